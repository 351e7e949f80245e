"""
ElementTree interface to an XRDS document.

Elements are looked up by their local names only, so documents declaring the
XRD namespaces in unusual ways (or not at all) are still understood.
"""
from lxml import etree as ET


CONTENT_TYPE = 'application/xrds+xml'


def t(name):
    return '{*}%s' % name


class XRDSError(Exception):
    '''
    General error with the XRDS document.
    '''
    pass


def parseXRDS(text):
    """Parse the given text as an XRDS document.

    @return: ElementTree containing an XRDS document

    @raises XRDSError: When there is a parse error or the document does
        not contain an XRDS.
    """
    if isinstance(text, str):
        text = text.encode('utf-8')
    parser = ET.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = ET.XML(text, parser)
    except (ET.ParseError, ValueError):
        raise XRDSError('Error parsing document as XML', text)
    if root is None or ET.QName(root).localname != 'XRDS':
        raise XRDSError('Not an XRDS document', text)
    return ET.ElementTree(root)


def iterServices(tree):
    """Return the Service elements of every XRD in the document, in
    document order"""
    return tree.getroot().findall('%s/%s' % (t('XRD'), t('Service')))


def getURI(service_element):
    """Given a Service element, return the stripped content of its first URI
    tag or None if absent or empty
    """
    uri_element = service_element.find(t('URI'))
    if uri_element is None or not uri_element.text:
        return None
    return uri_element.text.strip() or None


def getTypeURIs(service_element):
    """Given a Service element, return a list of the contents of all
    Type tags"""
    return [type_element.text for type_element
            in service_element.findall(t('Type'))]


def find_uri(tree, types):
    '''
    Returns the URI of the first service supporting the most preferred of
    types, or None if no service supports any of them.
    '''
    services = [(getTypeURIs(e), getURI(e)) for e in iterServices(tree)]
    for type_uri in types:
        for service_types, uri in services:
            if type_uri in service_types and uri is not None:
                return uri
    return None
