"""Descriptor file naming conventions."""

from enum import Enum

# Sidecar descriptor stored inside a node's own folder
DOT_CONTENT_XML = ".content.xml"

# Generic suffix of a same-name descriptor (e.g. page.xml for /page)
XML_SUFFIX = ".xml"

# Suffix of a folder that marks a same-named .xml as a plain file
DOT_DIR = ".dir"


class ContentType(Enum):
    """Serialization format of a descriptor file."""
    JCR_XML = "jcr.xml"
