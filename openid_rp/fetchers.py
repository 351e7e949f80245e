'''
Wrapper around httpx providing default parameters and safety checkings.
'''
import sys
import urllib.parse

import httpx

import openid_rp


USER_AGENT = 'openid-rp/%s (%s) httpx/%s' % (
    openid_rp.__version__,
    sys.platform,
    httpx.__version__,
)

DEFAULT_TIMEOUT = 10.0


class Fetcher(object):
    """Issues the GET and POST requests of discovery and verification.

    Every request runs in its own client, so a fetcher holds nothing but its
    configuration and may be shared between concurrent verifications.

    @param transport: an C{httpx.AsyncBaseTransport} to send requests
        through instead of the network. Tests pass an C{httpx.MockTransport}.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT, user_agent=USER_AGENT, transport=None):
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def get(self, url, headers=None):
        return await self.fetch('GET', url, headers=headers)

    async def post(self, url, data):
        '''
        POSTs form data. Values may be lists, in which case the key is
        repeated for every value.
        '''
        return await self.fetch('POST', url, data=data)

    async def fetch(self, method, url, data=None, headers=None):
        try:
            scheme = urllib.parse.urlsplit(url).scheme
        except ValueError as e:
            raise httpx.InvalidURL('Bad URL: %r' % url) from e
        if scheme not in ('http', 'https'):
            raise httpx.UnsupportedProtocol('Bad URL scheme: %r' % url)

        if headers is None:
            headers = {}
        headers.setdefault('User-Agent', self.user_agent)

        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout,
            follow_redirects=True,
        ) as client:
            return await client.request(method, url, data=data, headers=headers)
