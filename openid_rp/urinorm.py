import re
import urllib.parse


SCHEME_RE = re.compile(r'^https?:', re.IGNORECASE)
ILLEGAL_CHAR_RE = re.compile(r"[^-A-Za-z0-9:/?#[\]@!$&'()*+,;=._~%]", re.UNICODE)
ASCII = ''.join(map(chr, range(128)))
DEFAULT_PORTS = {
    'http': 80,
    'https': 443,
}


def remove_dot_segments(path):
    result_segments = []

    while path:
        if path.startswith('/./'):
            path = path[2:]
        elif path == '/.':
            path = '/'
        elif path.startswith('/../'):
            path = path[3:]
            if result_segments:
                result_segments.pop()
        elif path == '/..':
            path = '/'
            if result_segments:
                result_segments.pop()
        else:
            i = 0
            if path[0] == '/':
                i = 1
            i = path.find('/', i)
            if i == -1:
                i = len(path)
            result_segments.append(path[:i])
            path = path[i:]

    return ''.join(result_segments)


def quote(s):
    return urllib.parse.quote(s, safe=ASCII)


def _encode_host(host):
    if ':' in host:
        # IPv6 literal
        return '[%s]' % host
    # This should've been simply host.encode(..).decode(..) but idna breaks on
    # anything starting with '.' so we have to encode it in chunks
    return '.'.join(chunk.encode('idna').decode('ascii') for chunk in host.split('.'))


def urinorm(uri):
    '''
    Normalize an identifier into an absolute http(s) URL:

        urinorm('Example.COM:8080/a/../b#top') == 'http://example.com:8080/b'

    Raises ValueError if the identifier can't be parsed as a URL.
    '''
    uri = uri.strip()
    if not SCHEME_RE.match(uri):
        uri = 'http://' + uri
    parts = urllib.parse.urlsplit(uri)
    if not parts.hostname:
        raise ValueError('Not an absolute HTTP or HTTPS URI: %s' % uri)
    port = parts.port
    scheme = parts.scheme.lower() or ('https' if port == 443 else 'http')

    netloc = _encode_host(parts.hostname.lower())
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = '%s:%s' % (netloc, port)
    if '@' in parts.netloc:
        netloc = parts.netloc.rsplit('@', 1)[0] + '@' + netloc

    path = remove_dot_segments(quote(parts.path))
    if not path:
        path = '/'

    uri = urllib.parse.urlunsplit((scheme, netloc, path, quote(parts.query), ''))
    match = ILLEGAL_CHAR_RE.search(uri)
    if match:
        raise ValueError('Illegal characters in URI: %r at position %s' %
                         (match.group(), match.start()))
    return uri


def normalize_identifier(identifier):
    '''
    Normalize a user-supplied identifier, falling back to the trimmed input
    when it can't be parsed as a URL.
    '''
    identifier = identifier.strip()
    try:
        return urinorm(identifier)
    except ValueError:
        return identifier
