'''
Functions and classes to discover OpenID endpoints from identifiers.
'''
import urllib.parse
import logging
from collections import namedtuple

import httpx

from openid_rp import fetchers, linkparse, urinorm, xrds, yadis

OPENID_IDP_2_0_TYPE = 'http://specs.openid.net/auth/2.0/server'
OPENID_2_0_TYPE = 'http://specs.openid.net/auth/2.0/signon'
OPENID_1_1_TYPE = 'http://openid.net/signon/1.1'
OPENID_1_0_TYPE = 'http://openid.net/signon/1.0'
OPENID_1_1_SERVER_TYPE = 'http://openid.net/server/1.1'
OPENID_1_0_SERVER_TYPE = 'http://openid.net/server/1.0'

# OpenID service type URIs, listed in order of preference.  The
# ordering of this list affects XRDS service discovery.
SERVICE_TYPES = [
    OPENID_IDP_2_0_TYPE,
    OPENID_2_0_TYPE,
    OPENID_1_1_TYPE,
    OPENID_1_0_TYPE,
    OPENID_1_1_SERVER_TYPE,
    OPENID_1_0_SERVER_TYPE,
]

# <link> relations, listed in order of preference.
PROVIDER_RELS = ['openid2.provider', 'openid.server']
LOCAL_ID_RELS = ['openid2.local_id', 'openid.delegate']

ACCEPT = 'application/xrds+xml, text/html;q=0.9, */*;q=0.1'

GOOGLE_USER_XRDS_URL = 'https://www.google.com/accounts/o8/user-xrds?uri=%s'


class DiscoveryFailure(Exception):
    pass


class NetworkError(DiscoveryFailure):
    '''
    The discovery request failed or its answer held nothing usable.
    '''


class NoServerFound(DiscoveryFailure):
    '''
    Every configured discovery strategy failed. The individual errors are
    kept in the failures attribute.
    '''
    def __init__(self, message, failures):
        super().__init__(message)
        self.failures = failures


class DiscoveredServer(namedtuple('DiscoveredServer', ['url', 'delegate'])):
    """Object representing an OpenID provider endpoint.

    @ivar url: absolute URL of the provider endpoint.
    @ivar delegate: the identifier the provider wants to receive instead of
        the claimed identifier, or None.
    """
    __slots__ = ()

    def __new__(cls, url, delegate=None):
        return super().__new__(cls, url, delegate or None)

    def identity(self, claimed_id):
        '''
        Return the identifier that should be sent as the
        openid.identity parameter to the server.
        '''
        return self.delegate or claimed_id


def _base_url(response):
    try:
        return str(response.url)
    except RuntimeError:
        # response not bound to a request
        return ''


def absolute_url(response, url):
    '''
    Resolves url against the address the response came from. Returns None
    if the result isn't an absolute http(s) URL.
    '''
    try:
        url = urllib.parse.urljoin(_base_url(response), url)
        parts = urllib.parse.urlsplit(url)
    except ValueError as e:
        logging.info('Ignoring malformed URL %r: %s' % (url, e))
        return None
    if parts.scheme not in ('http', 'https') or not parts.netloc:
        logging.info('Ignoring non-absolute URL %r' % url)
        return None
    return url


def is_xrds(response):
    return xrds.CONTENT_TYPE in response.headers.get('content-type', '').lower()


class XrdsResolver(object):
    '''
    Finds the provider endpoint in an XRDS document. XRDS has no notion
    of a delegate so the result never carries one.
    '''
    types = SERVICE_TYPES

    def resolve(self, response):
        if not is_xrds(response):
            return None
        try:
            tree = xrds.parseXRDS(response.content)
        except xrds.XRDSError as e:
            logging.info('Ignoring XRDS from %s: %s' % (_base_url(response), e.args[0]))
            return None
        uri = xrds.find_uri(tree, self.types)
        if not uri:
            return None
        uri = absolute_url(response, uri)
        return DiscoveredServer(uri) if uri else None


class HtmlResolver(object):
    '''
    Finds the provider endpoint and delegate in the <link> tags of a page.
    '''
    def resolve(self, response):
        html = response.text
        url = linkparse.find_href(html, PROVIDER_RELS)
        if not url:
            return None
        url = absolute_url(response, url)
        if url is None:
            return None
        return DiscoveredServer(url, linkparse.find_href(html, LOCAL_ID_RELS))


def resolve(resolvers, response):
    '''
    Returns the result of the first resolver that understands the response,
    or None.
    '''
    for resolver in resolvers:
        server = resolver.resolve(response)
        if server is not None:
            return server
    return None


class Discovery(object):
    """Resolves an identifier to the location of the user's OpenID provider
    by fetching the identifier and reading the XRDS document or the HTML
    page it serves.

    XRIs are not supported.

    @ivar follow_yadis: whether a Yadis location advertised by a non-XRDS
        answer is fetched before reading the answer itself.
    """
    resolvers = (XrdsResolver(), HtmlResolver())

    def __init__(self, fetcher=None, follow_yadis=True):
        self.fetcher = fetcher if fetcher is not None else fetchers.Fetcher()
        self.follow_yadis = follow_yadis

    async def discover_server(self, identifier):
        '''
        Resolve the OpenID server from the user's OpenID.
        '''
        url = urinorm.normalize_identifier(identifier)
        response = await self.fetch(url)
        server = None
        if self.follow_yadis and not is_xrds(response):
            server = await self._discover_yadis_location(response)
        if server is None:
            server = resolve(self.resolvers, response)
        if server is None:
            raise NetworkError('No OpenID information found at %s' % url)
        return server

    async def discover_server_via_user_id(self, claimed_id):
        '''
        Resolve the OpenID server from the claimed ID of a response.
        '''
        return await self.discover_server(claimed_id)

    async def fetch(self, url):
        logging.debug('Fetching discovery document %s' % url)
        try:
            response = await self.fetcher.get(url, headers={'Accept': ACCEPT})
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise NetworkError('Fetching %s failed: %s' % (url, e)) from e
        if not response.is_success:
            raise NetworkError('Fetching %s returned status %s' % (url, response.status_code))
        return response

    async def _discover_yadis_location(self, response):
        location = yadis.yadis_location(response)
        if not location:
            return None
        location = absolute_url(response, location)
        if location is None:
            return None
        try:
            response = await self.fetch(location)
        except NetworkError as e:
            logging.info('Ignoring Yadis location: %s' % e)
            return None
        return XrdsResolver().resolve(response)


class UserXRDSDiscovery(Discovery):
    """Discovery for providers serving an XRDS document for any of their
    users at a fixed URL. Used on claimed identifiers which don't support
    discovery themselves.

    @cvar user_xrds_url: the URL template, '%s' is replaced with the
        URL-encoded claimed identifier.
    """
    user_xrds_url = None
    user_id_resolvers = (XrdsResolver(),)

    def __init__(self, fetcher=None, user_xrds_url=None, follow_yadis=True):
        super().__init__(fetcher, follow_yadis)
        if user_xrds_url is not None:
            self.user_xrds_url = user_xrds_url
        if self.user_xrds_url is None:
            raise ValueError('No user XRDS URL configured')

    async def discover_server_via_user_id(self, claimed_id):
        url = self.user_xrds_url % urllib.parse.quote_plus(claimed_id)
        response = await self.fetch(url)
        server = resolve(self.user_id_resolvers, response)
        if server is None:
            raise NetworkError('No OpenID service found at %s' % url)
        return server


class GoogleDiscovery(UserXRDSDiscovery):
    '''
    Resolves claimed identifiers asserted by Google through its fixed
    discovery endpoint.

    See https://sites.google.com/site/oauthgoog/fedlogininterp/openiddiscovery
    '''
    user_xrds_url = GOOGLE_USER_XRDS_URL


class CompositeDiscovery(object):
    """Treats a list of discovery strategies as a single one.

    Strategies are tried one after another in the given order and the first
    server found is returned. Failing strategies are skipped, if all of them
    fail NoServerFound is raised.
    """

    def __init__(self, strategies):
        self.strategies = tuple(strategies)
        if not self.strategies:
            raise ValueError('No discovery strategies given')

    async def discover_server(self, identifier):
        return await self._run('discover_server', identifier)

    async def discover_server_via_user_id(self, claimed_id):
        return await self._run('discover_server_via_user_id', claimed_id)

    async def _run(self, method, identifier):
        failures = []
        for strategy in self.strategies:
            try:
                return await getattr(strategy, method)(identifier)
            except DiscoveryFailure as e:
                logging.info('%s failed for %s: %s' % (strategy.__class__.__name__, identifier, e))
                failures.append(e)
        raise NoServerFound('No OpenID server found for %s' % identifier, failures)


def default_discovery(fetcher=None):
    '''
    Generic discovery first, then Google's fixed endpoint as a fallback.
    '''
    return CompositeDiscovery([Discovery(fetcher), GoogleDiscovery(fetcher)])
