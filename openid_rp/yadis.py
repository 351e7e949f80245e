import html5lib


HEADER = 'x-xrds-location'
XHTML = '{http://www.w3.org/1999/xhtml}'


def http_equiv(content):
    root = html5lib.parse(content)
    for meta in root.findall('%shead/%smeta' % (XHTML, XHTML)):
        if meta.get('http-equiv', '').lower() == HEADER:
            return meta.get('content')


def yadis_location(response):
    '''
    Checks if the HTTP response refers to a Yadis document in its
    headers or in the HTML meta.

    Returns the location found or None.
    '''
    location = response.headers.get(HEADER)
    if location:
        return location.strip()
    content_type = response.headers.get('content-type', '').lower()
    if 'html' not in content_type:
        return None
    location = http_equiv(response.text)
    return location.strip() if location else None
