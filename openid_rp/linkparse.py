'''
Finds OpenID <link> tags in raw HTML text.

This deliberately doesn't parse the page: provider pages are often malformed
and the tags are only looked up by their shape, e.g.

    <link rel="openid2.provider" href="https://op.example.com/auth">
'''
import re


def link_re(rel):
    return re.compile(r'<link[^>]+%s[^>]+>' % re.escape(rel))


HREF_RES = [
    re.compile(r'href="([^"]*)"'),
    re.compile(r"href='([^']*)'"),
]


def extract_href(link):
    '''
    Returns the stripped href attribute of a tag, or None.
    '''
    for href_re in HREF_RES:
        match = href_re.search(link)
        if match:
            return match.group(1).strip()
    return None


def find_link(html, rels):
    '''
    Returns the text of the first <link> tag found for the most preferred
    of rels, or None.
    '''
    for rel in rels:
        match = link_re(rel).search(html)
        if match:
            return match.group()
    return None


def find_href(html, rels):
    link = find_link(html, rels)
    return extract_href(link) if link is not None else None
