'''
Identity and attributes of a verified user.
'''
import re
from collections import namedtuple


# openid.<alias>.value.<name>, the name may carry a counter: fav_movie.2
AX_ATTRIBUTE_RE = re.compile(r'^openid\.([^.]+\.value\.([^.]+(\.\d+)?))$')


class MissingIdentity(ValueError):
    pass


def first_value(params, key):
    '''
    Returns the first value of a parameter, or None. Plain strings are
    accepted as single values.
    '''
    values = params.get(key)
    if not values:
        return None
    if isinstance(values, str):
        return values
    return values[0]


class UserInfoExtractor(object):
    """Extracts the values of a UserInfo from callback parameters.

    Only attribute exchange values listed in openid.signed are extracted,
    unsigned values could have been added by anyone on the way.

    @param params: mapping of parameter names to lists of values
    """

    def __init__(self, params):
        self.params = params

    def id(self):
        return first_value(self.params, 'openid.claimed_id') or first_value(self.params, 'openid.identity')

    def signed_fields(self):
        signed = first_value(self.params, 'openid.signed')
        return set(signed.split(',')) if signed else set()

    def ax_attributes(self):
        signed = self.signed_fields()
        attributes = {}
        for key in self.params:
            match = AX_ATTRIBUTE_RE.match(key)
            if match is None or match.group(1) not in signed:
                continue
            value = first_value(self.params, key)
            if value is not None:
                attributes[match.group(2)] = value
        return attributes


class UserInfo(namedtuple('UserInfo', ['id', 'attributes'])):
    """A verified identity.

    @ivar id: the claimed identifier, never empty.
    @ivar attributes: signed attribute exchange values by name,
        e.g. {'email': 'user@example.com'}
    """
    __slots__ = ()

    def __new__(cls, id, attributes=None):
        return super().__new__(cls, id, attributes if attributes is not None else {})

    @classmethod
    def from_params(cls, params):
        '''
        Builds a UserInfo from the parameters of a verified callback.

        Raises MissingIdentity if neither openid.claimed_id nor
        openid.identity is present.
        '''
        extractor = UserInfoExtractor(params)
        id = extractor.id()
        if not id:
            raise MissingIdentity('No identity in response')
        return cls(id, extractor.ax_attributes())
