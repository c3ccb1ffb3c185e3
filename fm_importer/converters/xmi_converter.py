"""XMI / notation XML to JSON-shaped dict conversion.

Papyrus stores models as ``model.uml`` and layouts as ``model.notation``,
both XMI. The importers consume the JSON shape produced by the host's XML
converter, so raw XML uploads are converted into exactly that shape:

- attributes become ``"@" + name`` keys
- namespaced names become ``"<namespace uri>:<local name>"``
  (``xmi:id`` -> ``"@http://www.omg.org/spec/XMI/20131001:id"``)
- a child element that occurs once is a dict, repeated ones a list
- non-blank text content is stored under ``"#text"``
- an ``xmi:XMI`` root is unwrapped, so the UML model and the stereotype
  applications end up as sibling top-level keys
"""

import logging
from typing import Any, Dict, Union

from lxml import etree

from ..core.errors import DecodeError

logger = logging.getLogger(__name__)

TEXT_KEY = "#text"
XMI_NAMESPACE = "http://www.omg.org/spec/XMI/20131001"

# Older Papyrus releases write XMI 2.0 documents
NAMESPACE_ALIASES = {
    "http://www.omg.org/XMI": XMI_NAMESPACE,
}


def qualified_name(tag: str) -> str:
    """``{ns}local`` -> ``ns:local``; unqualified names are kept as-is."""
    qname = etree.QName(tag)
    if not qname.namespace:
        return qname.localname
    namespace = NAMESPACE_ALIASES.get(qname.namespace, qname.namespace)
    return f"{namespace}:{qname.localname}"


def element_to_dict(element: etree._Element) -> Dict[str, Any]:
    """Convert one element and its subtree."""
    result: Dict[str, Any] = {}

    for name, value in element.attrib.items():
        result["@" + qualified_name(name)] = value

    for child in element:
        # Skip comments and processing instructions
        if not isinstance(child.tag, str):
            continue

        key = qualified_name(child.tag)
        value = element_to_dict(child)
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]

    text = (element.text or "").strip()
    if text:
        result[TEXT_KEY] = text

    return result


def xmi_to_dict(content: Union[bytes, str]) -> Dict[str, Any]:
    """Parse XMI/XML content into the importer's document shape.

    Raises:
        DecodeError: If the content is not well-formed XML
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise DecodeError(f"Invalid XML document: {e}") from e

    root_name = qualified_name(root.tag)
    body = element_to_dict(root)

    if root_name == f"{XMI_NAMESPACE}:XMI":
        logger.debug(f"Unwrapped XMI root with {len(body)} entries")
        return body

    return {root_name: body}
