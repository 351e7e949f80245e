import unittest

from openid_rp import linkparse
from openid_rp.discover import PROVIDER_RELS, LOCAL_ID_RELS
from . import support


@support.gentests
class ExtractHref(unittest.TestCase):
    data = [
        ('double_quotes', ('<link rel="openid2.provider" href="http://op/">', 'http://op/')),
        ('single_quotes', ("<link rel='openid2.provider' href='http://op/'>", 'http://op/')),
        ('stripped', ('<link rel="openid2.provider" href="  http://op/ ">', 'http://op/')),
        ('empty', ('<link rel="openid2.provider" href="">', '')),
        ('quote_inside', ('<link href="http://op/?a=\'b\'" rel="openid2.provider">', "http://op/?a='b'")),
        ('missing', ('<link rel="openid2.provider">', None)),
        ('unquoted', ('<link rel="openid2.provider" href=http://op/>', None)),
    ]

    def _test(self, link, expected):
        self.assertEqual(linkparse.extract_href(link), expected)


class FindHref(unittest.TestCase):
    def test_provider(self):
        html = support.read_data('openid2.html').decode('utf-8')
        self.assertEqual(linkparse.find_href(html, PROVIDER_RELS), 'http://www.myopenid.com/server')
        self.assertEqual(linkparse.find_href(html, LOCAL_ID_RELS), 'http://smoker.myopenid.com/')

    def test_preferred_rel_wins(self):
        # openid.server comes first in the document
        html = support.read_data('openid_1_and_2.html').decode('utf-8')
        self.assertEqual(linkparse.find_href(html, PROVIDER_RELS), 'http://www.myopenid.com/server')
        self.assertEqual(linkparse.find_href(html, LOCAL_ID_RELS), 'http://smoker.myopenid.com/')

    def test_fallback_rel(self):
        html = support.read_data('openid.html').decode('utf-8')
        self.assertEqual(linkparse.find_href(html, PROVIDER_RELS), 'http://www.myopenid.com/server')
        self.assertEqual(linkparse.find_href(html, LOCAL_ID_RELS), 'http://smoker.myopenid.com/')

    def test_rel_after_href(self):
        html = '<link href="http://op/" rel="openid2.provider" />'
        self.assertEqual(linkparse.find_href(html, PROVIDER_RELS), 'http://op/')

    def test_no_fallback_without_href(self):
        # a matching tag without href doesn't let a less preferred one through
        html = '<link rel="openid2.provider" /><link rel="openid.server" href="http://op/" />'
        self.assertIsNone(linkparse.find_href(html, PROVIDER_RELS))

    def test_dot_is_literal(self):
        html = '<link rel="openid2Xprovider" href="http://op/" />'
        self.assertIsNone(linkparse.find_href(html, PROVIDER_RELS))

    def test_no_links(self):
        html = support.read_data('junk.txt').decode('utf-8')
        self.assertIsNone(linkparse.find_href(html, PROVIDER_RELS))


if __name__ == '__main__':
    unittest.main()
