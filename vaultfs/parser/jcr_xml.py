"""Parser for FileVault JCR XML descriptor files.

A descriptor looks like:

    ```xml
    <jcr:root xmlns:jcr="http://www.jcp.org/jcr/1.0"
              jcr:primaryType="cq:Page">
        <jcr:content jcr:title="Home" hideInNav="{Boolean}true">
            <par jcr:primaryType="nt:unstructured"/>
        </jcr:content>
    </jcr:root>
    ```

Elements become ContentElements (declaration order preserved),
attributes become properties with FileVault type hints decoded.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from lxml import etree

from vaultfs.parser.content_element import ContentElement

logger = logging.getLogger(__name__)

_TYPE_HINT = re.compile(r"^\{(\w+)\}(.*)$", re.DOTALL)
_ISO9075_ESCAPE = re.compile(r"_x([0-9a-fA-F]{4})_")


def _parse_date(value: str) -> Union[datetime, str]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value


def _parse_decimal(value: str) -> Union[Decimal, str]:
    try:
        return Decimal(value)
    except InvalidOperation:
        return value


_CONVERTERS: Dict[str, Callable[[str], Any]] = {
    "String": str,
    "Name": str,
    "Path": str,
    "Reference": str,
    "WeakReference": str,
    "URI": str,
    "Long": int,
    "Double": float,
    "Decimal": _parse_decimal,
    "Boolean": lambda v: v.strip().lower() == "true",
    "Date": _parse_date,
}


def decode_name(name: str) -> str:
    """Decode ISO 9075 escapes (``_x0020_`` -> space) in an XML name."""
    return _ISO9075_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), name)


def _split_multi_value(raw: str) -> List[str]:
    values: List[str] = []
    current: List[str] = []
    escaped = False
    for c in raw:
        if escaped:
            current.append(c)
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == ",":
            values.append("".join(current))
            current = []
        else:
            current.append(c)
    if current or values:
        values.append("".join(current))
    return values


def _unescape_single(raw: str) -> str:
    if raw.startswith("\\{") or raw.startswith("\\["):
        return raw[1:]
    return raw


def decode_value(raw: str) -> Any:
    """Decode a FileVault property value.

    Examples:
        >>> decode_value("{Long}42")
        42
        >>> decode_value("[a,b]")
        ['a', 'b']
        >>> decode_value("{Boolean}[true,false]")
        [True, False]
    """
    type_name = "String"
    match = _TYPE_HINT.match(raw)
    if match:
        type_name, raw = match.group(1), match.group(2)

    converter = _CONVERTERS.get(type_name)
    if converter is None:
        # Binary and unknown types stay as strings
        converter = str

    def convert(value: str) -> Any:
        try:
            return converter(value)
        except ValueError:
            logger.debug(f"Cannot convert {value!r} to {type_name}, keeping string")
            return value

    if raw.startswith("[") and raw.endswith("]"):
        return [convert(v) for v in _split_multi_value(raw[1:-1])]

    return convert(_unescape_single(raw))


def _qualified_name(name: str, nsmap: Dict[Optional[str], str]) -> str:
    qname = etree.QName(name)
    if qname.namespace is None:
        return decode_name(qname.localname)
    for prefix, uri in nsmap.items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{decode_name(qname.localname)}"
    return decode_name(qname.localname)


class JcrXmlParser:
    """Builds a ContentElement tree from a JCR XML file."""

    def __init__(self):
        self._xml_parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
        )

    def parse(self, file: Path) -> Optional[ContentElement]:
        """Parse a descriptor file.

        Args:
            file: Path to the descriptor

        Returns:
            Root ContentElement, or None if the file cannot be read or parsed
        """
        try:
            tree = etree.parse(str(file), self._xml_parser)
        except etree.XMLSyntaxError as e:
            logger.warning(f"Unable to parse content file {file}: {e}")
            return None
        except OSError as e:
            logger.warning(f"Unable to read content file {file}: {e}")
            return None

        root = tree.getroot()
        return self._build(root, name=None)

    def _build(self, element: etree._Element, name: Optional[str]) -> ContentElement:
        properties = {
            _qualified_name(key, element.nsmap): decode_value(value)
            for key, value in element.attrib.items()
        }
        node = ContentElement(name, properties)
        for child in element:
            if not isinstance(child.tag, str):
                continue
            child_name = _qualified_name(child.tag, child.nsmap)
            node.add_child(self._build(child, child_name))
        return node
