# -*- test-case-name: openid_rp.test.test_consumer -*-
"""OpenID support for Relying Parties (aka Consumers).

This module documents the main interface with the OpenID consumer
library.


OVERVIEW
========

    The OpenID identity verification process most commonly uses the
    following steps, as visible to the user of this library:

        1. The user enters their OpenID into a field on the consumer's
           site, and hits a login button.

        2. The consumer site discovers the user's OpenID provider.

        3. The consumer site sends the browser a redirect to the
           OpenID provider.  This is the authentication request as
           described in the OpenID specification.

        4. The OpenID provider's site sends the browser a redirect
           back to the consumer site.  This redirect contains the
           provider's response to the authentication request.

    The most important part of the flow to note is the consumer's site
    must handle two separate HTTP requests in order to perform the
    full identity check.


USING THIS LIBRARY
==================

    Create a C{L{Consumer}}.  It holds no per-user state, so a single
    instance may serve every request of the application.

    When the user submits an OpenID, call
    C{L{build_redirect_url<Consumer.build_redirect_url>}} with it and the
    URL the provider should send the user back to, and redirect the
    browser to the result.  Attribute exchange values (an email address,
    a name) may be requested on the same call.

    When the provider sends the user back, pass all the query arguments of
    that request to C{L{verify<Consumer.verify>}}.  The consumer discovers
    the provider of the asserted identifier again, never trusting the
    endpoint named in the response itself, and asks that provider to
    confirm the assertion with a check_authentication request ("stateless"
    or "dumb" mode: no associations are made and signatures are not
    checked locally).  On success a C{L{UserInfo<openid_rp.userinfo.UserInfo>}}
    with the identifier and the signed attributes is returned, otherwise an
    C{L{AuthenticationError}} is raised.

    Both methods are coroutines.
"""
import logging
import urllib.parse

import httpx

from openid_rp import fetchers
from openid_rp import discover
from openid_rp import urinorm
from openid_rp.userinfo import UserInfo, MissingIdentity, first_value


OPENID2_NS = 'http://specs.openid.net/auth/2.0'
AX_NS = 'http://openid.net/srv/ax/1.0'
UI_NS = 'http://specs.openid.net/extensions/ui/1.0'

# Ask the provider to show the icon of the relying party
UI_PARAMETERS = [
    ('openid.ns.ui', UI_NS),
    ('openid.ui.icon', 'true'),
]


class MissingParameters(ValueError):
    '''
    The application didn't supply an identifier to start with.
    '''


class AuthenticationError(ValueError):
    '''
    Base class for all non-normal conditions during handling authentication
    responses from a provider.
    '''
    def __init__(self, message, response):
        super().__init__(message)
        self.response = response


class BadResponse(AuthenticationError):
    '''
    The callback isn't a positive assertion this consumer can check.
    '''


class AuthError(AuthenticationError):
    '''
    The provider didn't confirm the assertion.
    '''


def ax_parameters(required, optional):
    '''
    Builds an attribute exchange fetch request from lists of
    (alias, type URI) pairs.
    '''
    required = list(required or [])
    optional = list(optional or [])
    if not required and not optional:
        return []

    parameters = [
        ('openid.ns.ax', AX_NS),
        ('openid.ax.mode', 'fetch_request'),
    ]
    if required:
        parameters.append(('openid.ax.required', ','.join(alias for alias, _ in required)))
    if optional:
        parameters.append(('openid.ax.if_available', ','.join(alias for alias, _ in optional)))
    parameters.extend(
        ('openid.ax.type.' + alias, type_uri)
        for alias, type_uri in required + optional
    )
    return parameters


def create_check_auth_params(query):
    """Generate the parameters of a check_authentication request given
    the parameters of an id_res callback. The callback parameters are
    left untouched.
    """
    params = {
        key: [values] if isinstance(values, str) else list(values)
        for key, values in query.items()
    }
    params['openid.mode'] = ['check_authentication']
    return params


def validate_return_to(query, return_to):
    '''
    Check the openid.return_to value of a callback against the URL
    the application received it on.
    Raises BadResponse if they don't match.
    '''
    msg_return_to = first_value(query, 'openid.return_to')
    if not msg_return_to:
        raise BadResponse('Missing openid.return_to', query)

    try:
        parsed_args = urllib.parse.parse_qsl(
            urllib.parse.urlsplit(msg_return_to).query, keep_blank_values=True)
    except ValueError:
        raise BadResponse('Bad return_to: %s' % msg_return_to, query)
    args = [
        key for key, value in parsed_args
        if value != first_value(query, key)
    ]
    if args:
        raise BadResponse('Mismatched return_to args: %s' % ', '.join(args), query)

    try:
        app_parts = urllib.parse.urlsplit(urinorm.urinorm(return_to))
        msg_parts = urllib.parse.urlsplit(urinorm.urinorm(msg_return_to))
    except ValueError:
        raise BadResponse('Bad return_to: %s' % msg_return_to, query)
    if app_parts[:3] != msg_parts[:3]:
        raise BadResponse('Wrong return_to: %s' % msg_return_to, query)


class Consumer(object):
    """An OpenID consumer implementation that performs discovery and
    verifies responses with the provider.

    @ivar discovery: the discovery strategy, by default the generic
        discovery with Google's discovery as a fallback. See
        C{L{openid_rp.discover.default_discovery}}.

    @ivar fetcher: the C{L{openid_rp.fetchers.Fetcher}} used for
        check_authentication requests.
    """

    def __init__(self, discovery=None, fetcher=None):
        self.fetcher = fetcher if fetcher is not None else fetchers.Fetcher()
        if discovery is None:
            discovery = discover.default_discovery(self.fetcher)
        self.discovery = discovery

    async def build_redirect_url(self, identifier, callback_url,
                                 required_attributes=None, optional_attributes=None,
                                 realm=None):
        """Start the OpenID authentication process. See steps 1-3 in
        the overview at the top of this file.

        @param identifier: Identity URL given by the user. A user_url of
            example.com is normalized to http://example.com/

        @param callback_url: the URL the provider should send the user
            back to.

        @param required_attributes: attribute exchange values to request,
            as a list of (alias, type URI) pairs.

        @param optional_attributes: same as required_attributes but for
            values the user may decline to share.

        @param realm: the URL pattern identifying the site to the user,
            e.g. http://*.example.com/

        @returns: the provider URL to redirect the user to.

        @raises MissingParameters: if identifier is empty.
        @raises openid_rp.discover.DiscoveryFailure: if no provider is found.
        """
        if not identifier or not identifier.strip():
            raise MissingParameters('No OpenID identifier given')

        claimed_id = urinorm.normalize_identifier(identifier)
        server = await self.discovery.discover_server(identifier)

        parameters = [
            ('openid.ns', OPENID2_NS),
            ('openid.mode', 'checkid_setup'),
            ('openid.claimed_id', claimed_id),
            ('openid.identity', server.identity(claimed_id)),
            ('openid.return_to', callback_url),
        ]
        if realm:
            parameters.append(('openid.realm', realm))
        parameters.extend(ax_parameters(required_attributes, optional_attributes))
        parameters.extend(UI_PARAMETERS)

        separator = '&' if '?' in server.url else '?'
        return server.url + separator + urllib.parse.urlencode(parameters)

    async def verify(self, query, return_to=None):
        """Called to interpret the server's response to an OpenID
        request. It is called in step 4 of the flow described in the
        consumer overview.

        @param query: the query parameters of the callback request, a
            mapping of names to lists of values.

        @param return_to: The URL used to invoke the application. If
            given, it is checked against the openid.return_to value in
            the response.

        @returns: the C{L{UserInfo<openid_rp.userinfo.UserInfo>}} of
            the verified user.

        @raises BadResponse: if the callback isn't a positive assertion.
        @raises AuthError: if the provider didn't confirm it.
        @raises openid_rp.discover.NoServerFound: if the provider of the
            claimed identifier can't be discovered.
        """
        mode = first_value(query, 'openid.mode')
        if mode in ('cancel', 'error'):
            error = first_value(query, 'openid.error') or 'Authentication cancelled by OpenID provider'
            raise BadResponse('%s: %s' % (mode, error), query)
        if mode != 'id_res':
            raise BadResponse('Mode missing or invalid: %s' % mode, query)

        claimed_id = first_value(query, 'openid.claimed_id') or first_value(query, 'openid.identity')
        if not claimed_id:
            raise BadResponse('No claimed identifier in response', query)
        if return_to is not None:
            validate_return_to(query, return_to)

        # Never openid.op_endpoint: the server is discovered from the
        # claimed identifier
        server = await self.discovery.discover_server_via_user_id(claimed_id)
        if not await self._check_auth(query, server.url):
            raise AuthError('Server denied check_authentication', query)

        try:
            return UserInfo.from_params(query)
        except MissingIdentity as e:
            raise BadResponse(str(e), query) from e

    async def _check_auth(self, query, server_url):
        """Make a check_authentication request to verify this response.

        @returns: True if the request is valid.
        @rtype: bool
        """
        logging.info('Using OpenID check_authentication')
        params = create_check_auth_params(query)
        try:
            response = await self.fetcher.post(server_url, params)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logging.exception('check_authentication failed: %s' % e)
            return False

        if response.is_success and 'is_valid:true' in response.text:
            return True
        logging.error('Server responds that checkAuth call is not valid')
        return False
