import inspect
import os
import urllib.parse

import httpx

from openid_rp import fetchers


DATAPATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')

CONTENT_TYPES = {
    '.xrds': 'application/xrds+xml',
    '.html': 'text/html; charset=utf-8',
}


def gentests(cls):
    '''
    TestCase class decorator for data-driven tests.

    Reads a list of (name, args) pairs from cls.data and generates a separate
    test method named 'test_<name>' for each pair. The test method would call
    the method '_test' defined in a class to perform actual testing, passing it
    the args. A coroutine '_test' gets coroutine test methods.
    '''
    for name, args in cls.data:
        def g(*args):
            if inspect.iscoroutinefunction(cls._test):
                async def test_method(self):
                    await self._test(*args)
            else:
                def test_method(self):
                    self._test(*args)
            return test_method
        method = g(*args)
        method.__name__ = 'test_' + name
        setattr(cls, method.__name__, method)
    return cls


def read_data(name):
    with open(os.path.join(DATAPATH, name), 'rb') as f:
        return f.read()


class MockTransport(httpx.MockTransport):
    '''
    Fake network recording every request it gets.

    URLs registered in routes answer with the given (status, headers, body).
    Anything else must be on the host "unittest": a numeric path answers
    with that status, other paths serve files from DATAPATH. Extra response
    headers can be added with "header=Name: value" query arguments.
    '''
    def __init__(self, routes=None):
        self.requests = []
        self.routes = dict(routes or {})
        super().__init__(self.handle)

    @property
    def urls(self):
        return [str(r.url) for r in self.requests]

    def handle(self, request):
        self.requests.append(request)
        url = str(request.url)
        if url in self.routes:
            status, headers, body = self.routes[url]
            if isinstance(body, str):
                body = body.encode('utf-8')
            return httpx.Response(status, headers=headers, content=body)

        if request.url.host != 'unittest':
            raise httpx.ConnectError('Wrong host: %s' % request.url.host, request=request)
        path = request.url.path.lstrip('/')
        if path.isdigit():
            status, body, content_type = int(path), b'OK', 'text/plain'
        else:
            try:
                body = read_data(path)
            except FileNotFoundError:
                return httpx.Response(404, content=b'%s not found' % path.encode('utf-8'))
            status = 200
            content_type = CONTENT_TYPES.get(os.path.splitext(path)[1], 'text/plain')

        headers = httpx.Headers({
            'Server': 'Mock',
            'Content-Type': content_type,
        })
        query = urllib.parse.parse_qs(request.url.query.decode('ascii'))
        for header in query.get('header', []):
            name, value = header.split(': ', 1)
            headers[name] = value
        return httpx.Response(status, headers=headers, content=body)


def fetcher(transport):
    return fetchers.Fetcher(transport=transport)


def response(url, body, content_type='text/html', status=200):
    '''
    Builds a response to a GET of url without going through a transport.
    '''
    if isinstance(body, str):
        body = body.encode('utf-8')
    return httpx.Response(
        status,
        headers={'Content-Type': content_type},
        content=body,
        request=httpx.Request('GET', url),
    )
