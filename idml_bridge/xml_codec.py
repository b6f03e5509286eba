"""XML codec for IDML story parts.

Parses story XML into ElementTree nodes and writes it back. ElementTree drops
everything before the root element, so the prolog (XML declaration and the
``<?aid ...?>`` instruction InDesign writes) is kept verbatim and re-emitted.
Processing instructions and comments inside the root are kept in the tree.

Text nodes are opaque strings; nothing is coerced.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union
import xml.etree.ElementTree as ET

from .errors import FormatError

logger = logging.getLogger(__name__)

# IDML namespace constants
IDML_NAMESPACES = {
    "idPkg": "http://ns.adobe.com/AdobeInDesign/idml/1.0/packaging",
}

for _prefix, _uri in IDML_NAMESPACES.items():
    ET.register_namespace(_prefix, _uri)

# Declaration, processing instructions, comments and doctype before the root
_PROLOG_ITEM = re.compile(r"[\s\ufeff]*(?:<\?.*?\?>|<!--.*?-->|<![^>]*>)", re.DOTALL)
_LEADING_SPACE = re.compile(r"[\s\ufeff]*")
_NAMESPACE_DECL = re.compile(r"""xmlns:([A-Za-z_][\w.-]*)\s*=\s*["']([^"']+)["']""")
_RESERVED_PREFIX = re.compile(r"ns\d+$")


@dataclass
class XMLDocument:
    """
    Parsed XML part.

    Attributes:
        root: Root element
        prolog: Source text before the root element, kept verbatim
        epilog: Whitespace after the root element
    """

    root: ET.Element
    prolog: str = ""
    epilog: str = ""


def parse(xml: Union[bytes, str]) -> XMLDocument:
    """
    Parse XML text into an XMLDocument.

    Raises:
        FormatError: If the XML is malformed or not UTF-8
    """
    if isinstance(xml, bytes):
        try:
            text = xml.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError(f"XML is not valid UTF-8: {exc}") from exc
    else:
        text = xml

    root_start = _root_start(text)
    if root_start is None:
        raise FormatError("XML has no root element")

    prolog = text[:root_start]
    body = text[root_start:]
    stripped = body.rstrip()
    epilog = body[len(stripped):]

    _register_source_namespaces(text)

    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    try:
        parser.feed(stripped)
        root = parser.close()
    except ET.ParseError as exc:
        raise FormatError(f"Malformed XML: {exc}") from exc

    return XMLDocument(root=root, prolog=prolog, epilog=epilog)


def serialize(document: XMLDocument) -> bytes:
    """Serialize an XMLDocument back to UTF-8 bytes."""
    body = ET.tostring(document.root, encoding="unicode", method="xml")
    return (document.prolog + body + document.epilog).encode("utf-8")


def _root_start(text: str) -> Optional[int]:
    """Offset of the root element's opening tag, skipping prolog items."""
    position = 0
    while True:
        match = _PROLOG_ITEM.match(text, position)
        if match is None:
            break
        position = match.end()

    position = _LEADING_SPACE.match(text, position).end()
    if not text.startswith("<", position):
        return None
    return position


def _register_source_namespaces(text: str) -> None:
    """Register prefixes declared in the source so output keeps them."""
    for prefix, uri in _NAMESPACE_DECL.findall(text):
        if _RESERVED_PREFIX.match(prefix):
            continue
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            logger.debug(f"Could not register namespace prefix {prefix!r}")


def local_name(element: ET.Element) -> str:
    """
    Tag without namespace. Comments and processing instructions yield "".

    Example:
        >>> local_name(ET.Element("{http://ns.adobe.com/AdobeInDesign/idml/1.0/packaging}Story"))
        'Story'
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def children_named(element: ET.Element, name: str) -> List[ET.Element]:
    """Direct children with the given local name, in document order."""
    return [child for child in element if local_name(child) == name]


def iter_named(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """All descendants with the given local name, in document order."""
    for node in element.iter():
        if node is not element and local_name(node) == name:
            yield node


def find_story_element(root: ET.Element) -> Optional[ET.Element]:
    """
    Locate the Story element of a story part.

    InDesign writes ``<idPkg:Story><Story Self="u123">...`` but hand-made or
    exported fragments may have a bare ``<Story>`` root. Both are accepted.

    Returns:
        The Story element, or None if the part holds no story
    """
    if local_name(root) == "Story":
        inner = children_named(root, "Story")
        return inner[0] if inner else root

    for node in root.iter():
        if local_name(node) == "Story":
            return node

    return None
