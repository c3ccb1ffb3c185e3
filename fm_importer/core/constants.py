"""Namespaces, meta types and the external type lookup table.

The importers never look at raw meta-type strings: every external name
(an XMI type such as ``uml:Class`` or a stereotype such as ``Satisfy``) is
turned into a MetaType through a total mapping that fails loudly on
anything it does not know.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml

from .errors import DecodeError, UnknownElementTypeError, UnknownStereotypeError

logger = logging.getLogger(__name__)


# ============================================================================
# Document namespaces
# ============================================================================

XMI_PREFIX = "@http://www.omg.org/spec/XMI/20131001:"
XMI_ID = XMI_PREFIX + "id"
XMI_TYPE = XMI_PREFIX + "type"

UML_MODEL_KEY = "http://www.eclipse.org/uml2/5.0.0/UML:Model"
UML_TYPE_PREFIX = "uml:"

CONNECTION_STEREOTYPE_PREFIX = "http://www.eclipse.org/papyrus/0.7.0/FM/Requirements:"
COMMENT_STEREOTYPE_PREFIX = "http://www.eclipse.org/papyrus/0.7.0/FM/ModelElements:"
REQUIREMENT_STEREOTYPE_KEY = CONNECTION_STEREOTYPE_PREFIX + "Requirement"

NOTATION_ID_PREFIX = "model.uml#"

# Layout defaults
ROOT_POSITION = {"x": 200, "y": 200}
DEFAULT_X_OFFSET = 50
DEFAULT_X_STEP = 100
DEFAULT_Y = 200


class MetaType(str, Enum):
    """Meta types of the host language the importers instantiate."""

    # Graph importer
    GRAPH = "Graph"
    NODE = "Node"
    EDGE = "Edge"

    # Requirement diagram nodes
    REQUIREMENT_DIAGRAM = "RequirementDiagram"
    REQUIREMENT = "Requirement"
    COMMENT = "Comment"
    RATIONALE = "Rationale"
    PROBLEM = "Problem"

    # Requirement diagram links
    ABSTRACTION = "Abstraction"
    DECOMPOSE = "Decompose"
    COMMENT_LINK = "CommentLink"
    SATISFY = "Satisfy"
    VERIFY = "Verify"
    DERIVE_REQT = "DeriveReqt"
    REFINE = "Refine"
    TRACE = "Trace"
    COPY = "Copy"

    @classmethod
    def from_name(cls, name: str) -> "MetaType":
        """Resolve a meta type by its host name (e.g. a stereotype name)."""
        try:
            return cls(name)
        except ValueError:
            raise UnknownStereotypeError(name, [m.value for m in cls]) from None

    @property
    def is_link(self) -> bool:
        return self in LINK_TYPES


LINK_TYPES = frozenset({
    MetaType.EDGE,
    MetaType.ABSTRACTION,
    MetaType.DECOMPOSE,
    MetaType.COMMENT_LINK,
    MetaType.SATISFY,
    MetaType.VERIFY,
    MetaType.DERIVE_REQT,
    MetaType.REFINE,
    MetaType.TRACE,
    MetaType.COPY,
})

# XMI type (without the "uml:" prefix) -> meta type
FM_TO_META_TYPES: Dict[str, MetaType] = {
    "Class": MetaType.REQUIREMENT,
    "Abstraction": MetaType.ABSTRACTION,
}


def default_position(index: int) -> Dict[str, int]:
    """Fallback layout for the index-th element of a collection."""
    return {"x": DEFAULT_X_OFFSET + DEFAULT_X_STEP * index, "y": DEFAULT_Y}


class TypeLookup:
    """Total mapping from external XMI types to meta types.

    Example:
        lookup = TypeLookup()
        lookup.resolve("uml:Class")        # MetaType.REQUIREMENT
        lookup.resolve("uml:Package")      # raises UnknownElementTypeError
    """

    def __init__(self, mapping: Optional[Mapping[str, Union[MetaType, str]]] = None):
        self._mapping: Dict[str, MetaType] = dict(FM_TO_META_TYPES)
        if mapping:
            self.update(mapping)

    def update(self, mapping: Mapping[str, Union[MetaType, str]]) -> None:
        for type_name, meta_type in mapping.items():
            self._mapping[self._strip(type_name)] = (
                meta_type if isinstance(meta_type, MetaType) else MetaType.from_name(meta_type)
            )

    def resolve(self, type_name: Optional[str]) -> MetaType:
        """Resolve an XMI type such as ``uml:Class``.

        Raises:
            UnknownElementTypeError: If the type is missing or not mapped
        """
        if not type_name:
            raise UnknownElementTypeError(str(type_name), self._mapping.keys())
        try:
            return self._mapping[self._strip(type_name)]
        except KeyError:
            raise UnknownElementTypeError(type_name, self._mapping.keys()) from None

    def __contains__(self, type_name: str) -> bool:
        return self._strip(type_name) in self._mapping

    def as_dict(self) -> Dict[str, str]:
        return {name: meta.value for name, meta in self._mapping.items()}

    @staticmethod
    def _strip(type_name: str) -> str:
        if type_name.startswith(UML_TYPE_PREFIX):
            return type_name[len(UML_TYPE_PREFIX):]
        return type_name

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "TypeLookup":
        """Load a lookup from YAML, on top of the built-in table.

        The file holds an ``element_types`` mapping, e.g.::

            element_types:
              Class: Requirement
              Abstraction: Abstraction
        """
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DecodeError(f"Invalid type lookup file {yaml_path}: {e}") from e

        element_types = data.get("element_types", {})
        if not isinstance(element_types, dict):
            raise DecodeError(f"'element_types' in {yaml_path} must be a mapping")

        logger.info(f"Loaded {len(element_types)} element types from {yaml_path}")
        return cls(element_types)

    @classmethod
    def default(cls) -> "TypeLookup":
        """Built-in table, extended by FM_TYPE_LOOKUP_FILE when it is set."""
        from ..config.settings import get_type_lookup_file

        path = get_type_lookup_file()
        if path is not None:
            return cls.from_yaml(path)
        return cls()
