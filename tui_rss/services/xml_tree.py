"""Generic tree builder for feed XML.

Turns raw feed markup into nested dicts so the normalizer can work on key
presence alone::

    <rss><channel><title>T</title><item>..</item><item>..</item></channel></rss>

becomes ``{"rss": {"channel": {"title": "T", "item": [{...}, {...}]}}}``.
Attributes are stored as ``@name`` keys and mixed text as ``#text``.
"""

import re
from typing import Any, Dict, Union

from lxml import etree

from tui_rss.errors import FormatError

Node = Union[str, Dict[str, Any]]

_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


def _tag_name(element: etree._Element) -> str:
    """Qualified tag name using the document's own prefix (e.g. dc:creator)."""
    local = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local}"
    return local


def _attr_name(element: etree._Element, key: str) -> str:
    qname = etree.QName(key)
    if qname.namespace:
        prefix = next(
            (p for p, uri in element.nsmap.items() if uri == qname.namespace and p),
            None,
        )
        if prefix:
            return f"@{prefix}:{qname.localname}"
    return f"@{qname.localname}"


def _inner_markup(element: etree._Element) -> str:
    parts = [element.text or ""]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts).strip()


def _convert(element: etree._Element) -> Node:
    attributes = {_attr_name(element, k): v for k, v in element.attrib.items()}
    text = (element.text or "").strip()

    if attributes.get("@type") == "xhtml":
        attributes["#text"] = _inner_markup(element)
        return attributes

    children = [c for c in element if isinstance(c.tag, str)]
    if not attributes and not children:
        return text

    node: Dict[str, Any] = dict(attributes)
    for child in children:
        name = _tag_name(child)
        value = _convert(child)
        if name in node:
            existing = node[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[name] = [existing, value]
        else:
            node[name] = value

    if text:
        node["#text"] = text
    return node


def build_tree(xml_text: Union[str, bytes]) -> Dict[str, Any]:
    """Parse feed XML into a generic nested dict.

    Args:
        xml_text: Raw XML document

    Returns:
        Dict with a single key, the root tag

    Raises:
        FormatError: If the document cannot be parsed as XML
    """
    if isinstance(xml_text, str):
        # Already decoded, so the declared encoding no longer applies
        xml_text = _DECLARATION_RE.sub("", xml_text, count=1).encode("utf-8")

    parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_text.strip(), parser=parser)
    except etree.XMLSyntaxError as e:
        raise FormatError(f"Malformed XML: {e}") from e

    if root is None:
        raise FormatError("Document is not XML")

    return {_tag_name(root): _convert(root)}
