"""Decoding resolved assets into documents.

Assets arrive either as bytes (server side) or as an already-decoded dict
(browser side). Bytes are JSON unless they start with an XML declaration or
element, in which case they go through the XMI converter.
"""

import json
import logging
from typing import Any, Dict, Optional

from .constants import UML_MODEL_KEY
from .errors import DecodeError

logger = logging.getLogger(__name__)

GRAPH_DOCUMENT = "graph"
UML_DOCUMENT = "uml"


def decode_document(content: Any) -> Dict[str, Any]:
    """Turn resolved asset content into a document dict.

    Raises:
        DecodeError: If the content is neither JSON nor XML, or not an object
    """
    if isinstance(content, dict):
        return content

    if isinstance(content, (bytes, bytearray)):
        try:
            text = bytes(content).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Asset is not UTF-8 text: {e}") from e
    elif isinstance(content, str):
        text = content
    else:
        raise DecodeError(f"Unsupported asset content type: {type(content).__name__}")

    if text.lstrip().startswith("<"):
        from ..converters.xmi_converter import xmi_to_dict
        return xmi_to_dict(text.encode("utf-8"))

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Asset is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise DecodeError(
            f"Expected a JSON object at the top level, got {type(document).__name__}"
        )
    return document


def detect_document_kind(document: Dict[str, Any]) -> str:
    """Tell graph documents from UML model documents.

    Raises:
        DecodeError: If the document matches neither shape
    """
    if UML_MODEL_KEY in document:
        return UML_DOCUMENT
    if isinstance(document.get("nodes"), list):
        return GRAPH_DOCUMENT
    raise DecodeError(
        "Unrecognized document: expected a 'nodes' list or a "
        f"'{UML_MODEL_KEY}' entry, got keys {sorted(document)[:5]}"
    )


def extract_notation_diagram(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the diagram object of a notation document.

    Converted ``.notation`` files keep the ``notation:Diagram`` element as a
    top-level key; already-flattened JSON has ``@name``/``children`` at the
    top. The first diagram wins when a file holds several.
    """
    if document is None:
        return None
    if "children" in document or "@name" in document:
        return document

    for key, value in document.items():
        if key.endswith(":Diagram"):
            if isinstance(value, list):
                if len(value) > 1:
                    logger.warning(f"Notation holds {len(value)} diagrams, using the first")
                return value[0] if value else None
            return value

    return document
