"""Descriptor file parsing and caching."""

from vaultfs.parser.content_types import DOT_CONTENT_XML, DOT_DIR, XML_SUFFIX, ContentType
from vaultfs.parser.content_element import ContentElement
from vaultfs.parser.jcr_xml import JcrXmlParser, decode_name, decode_value
from vaultfs.parser.content_file_cache import ContentFileCache

__all__ = [
    "DOT_CONTENT_XML",
    "DOT_DIR",
    "XML_SUFFIX",
    "ContentType",
    "ContentElement",
    "JcrXmlParser",
    "decode_name",
    "decode_value",
    "ContentFileCache",
]
