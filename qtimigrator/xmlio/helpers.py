"""Small ElementTree helpers shared by the readers and writers."""

import copy
import xml.etree.ElementTree as ET
from typing import List, Optional

from qtimigrator.errors import ParsingError


XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
XML_NS = "{http://www.w3.org/XML/1998/namespace}"


def localname(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def namespace(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def parse_xml(content: bytes, label: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise ParsingError(f"failed to parse {label} document: {e}", cause=e) from e


def children(el: Optional[ET.Element], *names: str) -> List[ET.Element]:
    """Direct children whose local name is one of ``names``, in document order."""
    if el is None:
        return []
    return [node for node in el if localname(node.tag) in names]


def child(el: Optional[ET.Element], *names: str) -> Optional[ET.Element]:
    if el is None:
        return None
    for candidate in el:
        if localname(candidate.tag) in names:
            return candidate
    return None


def attr(el: ET.Element, *names: str) -> Optional[str]:
    """First present attribute among ``names``, matched on local name."""
    by_local = {localname(key): value for key, value in el.attrib.items()}
    for name in names:
        if name in by_local:
            return by_local[name]
    return None


def int_attr(el: ET.Element, *names: str) -> int:
    value = attr(el, *names)
    if value is None or not value.strip():
        return 0
    try:
        return int(value.strip())
    except ValueError as e:
        raise ParsingError(
            f"attribute {names[0]!r} of <{localname(el.tag)}> is not an integer: {value!r}", cause=e
        ) from e


def float_attr(el: ET.Element, *names: str) -> Optional[float]:
    value = attr(el, *names)
    if value is None or not value.strip():
        return None
    try:
        return float(value.strip())
    except ValueError as e:
        raise ParsingError(
            f"attribute {names[0]!r} of <{localname(el.tag)}> is not a number: {value!r}", cause=e
        ) from e


def text(el: Optional[ET.Element]) -> str:
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def _strip_namespaces(el: ET.Element) -> None:
    for node in el.iter():
        if isinstance(node.tag, str):
            node.tag = localname(node.tag)
        for key in list(node.attrib):
            if key.startswith("{") and not key.startswith(XML_NS):
                node.attrib[localname(key)] = node.attrib.pop(key)


def inner_xml(el: Optional[ET.Element]) -> str:
    """Serialize the content of ``el`` without its own start and end tags."""
    if el is None:
        return ""
    clone = copy.deepcopy(el)
    _strip_namespaces(clone)
    parts = [_escape(clone.text or "")]
    for node in clone:
        parts.append(ET.tostring(node, encoding="unicode"))
    return "".join(parts).strip()


def outer_xml(el: Optional[ET.Element]) -> Optional[str]:
    if el is None:
        return None
    clone = copy.deepcopy(el)
    _strip_namespaces(clone)
    clone.tail = None
    return ET.tostring(clone, encoding="unicode")


def _escape(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def content_of(el: Optional[ET.Element]) -> str:
    """Markup held by a content element.

    Elements with child elements are serialized; plain text (including
    escaped or CDATA HTML) is returned unescaped.
    """
    if el is None:
        return ""
    if len(el):
        return inner_xml(el)
    return (el.text or "").strip()
