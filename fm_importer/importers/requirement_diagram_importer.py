"""Importer for Papyrus requirement diagrams.

Consumes two converted documents:

- the UML model (``model.uml``): packaged requirements and abstractions,
  owned comments, nested sub-requirements, and the stereotype applications
  that say what each generic Abstraction or Comment really is
- the notation (``model.notation``): diagram name and node coordinates

and builds a ``RequirementDiagram`` holding requirement and comment nodes
plus typed link nodes (Decompose, CommentLink, Satisfy, ...). Nested
requirements are flattened under the diagram and connected to their parent
with Decompose links.

Construction runs in fixed stages and never revisits one:
stereotypes indexed -> positions indexed -> nodes created -> links resolved.
"""

import logging
from typing import Any, Dict, Hashable, Optional, Union

from ..config.settings import is_enabled
from ..core.constants import (
    COMMENT_STEREOTYPE_PREFIX,
    CONNECTION_STEREOTYPE_PREFIX,
    NOTATION_ID_PREFIX,
    REQUIREMENT_STEREOTYPE_KEY,
    ROOT_POSITION,
    UML_MODEL_KEY,
    XMI_ID,
    XMI_TYPE,
    MetaType,
    TypeLookup,
    default_position,
)
from ..core.document_loader import extract_notation_diagram
from ..core.errors import DecodeError, StereotypeConflictError, UnknownElementTypeError
from ..core.graph_sink import GraphSink, NodeRef
from ..models.import_models import ImportContext, ImportSummary, PendingLink
from ..models.layout import NodePosition, PositionIndex
from ..utils.documents import as_list, element_key, text_of

logger = logging.getLogger(__name__)

# (namespace prefix, attribute naming the stereotyped element)
STEREOTYPE_NAMESPACES = (
    (CONNECTION_STEREOTYPE_PREFIX, "@base_Abstraction"),
    (COMMENT_STEREOTYPE_PREFIX, "@base_Comment"),
)


# ============================================================================
# Index builders
# ============================================================================

def build_stereotype_index(uml_document: Dict[str, Any]) -> Dict[str, str]:
    """Map stereotyped Abstraction/Comment ids to their stereotype name.

    Keys are scanned in document order. When two applications target the
    same element the later one wins, unless ``strict_stereotype_conflicts``
    is on.

    Raises:
        StereotypeConflictError: On a duplicate target in strict mode
    """
    index: Dict[str, str] = {}

    for key, applications in uml_document.items():
        if key == REQUIREMENT_STEREOTYPE_KEY:
            continue

        for prefix, base_attribute in STEREOTYPE_NAMESPACES:
            if key.startswith(prefix):
                break
        else:
            continue

        stereotype = key[len(prefix):]
        for application in as_list(applications):
            target = element_key(application.get(base_attribute))
            if target is None:
                logger.debug(f"{stereotype} application without {base_attribute}, skipping")
                continue

            existing = index.get(target)
            if existing is not None and existing != stereotype:
                if is_enabled("strict_stereotype_conflicts"):
                    raise StereotypeConflictError(target, existing, stereotype)
                logger.warning(
                    f"Element '{target}' stereotyped as both {existing} and "
                    f"{stereotype}; keeping {stereotype}"
                )
            index[target] = stereotype

    return index


def build_requirement_properties(uml_document: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    """Requirement stereotype attributes (``id``, ``text``) keyed by base class id."""
    properties: Dict[str, Dict[str, str]] = {}
    for application in as_list(uml_document.get(REQUIREMENT_STEREOTYPE_KEY)):
        base_class = element_key(application.get("@base_Class"))
        if base_class is None:
            continue
        values = {
            name: application[f"@{name}"]
            for name in ("id", "text")
            if application.get(f"@{name}") is not None
        }
        properties[base_class] = values
    return properties


def _coordinate(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid notation coordinate: {value!r}") from e


def build_position_index(notation: Optional[Dict[str, Any]]) -> PositionIndex:
    """Map element ids to their diagram coordinates.

    Returns:
        The index, or None when the notation has no children
    """
    if not notation or not notation.get("children"):
        return None

    index: Dict[str, NodePosition] = {}
    for child in as_list(notation["children"]):
        element = child.get("element")
        href = element.get("@href") if isinstance(element, dict) else None
        if not href:
            continue

        if href.startswith(NOTATION_ID_PREFIX):
            element_id = href[len(NOTATION_ID_PREFIX):]
        else:
            element_id = href.split("#", 1)[-1]

        # Papyrus leaves out zero coordinates
        constraint = child.get("layoutConstraint") or {}
        index[element_id] = NodePosition(
            x=_coordinate(constraint.get("@x", 0)),
            y=_coordinate(constraint.get("@y", 0)),
        )

    return index


# ============================================================================
# Importer
# ============================================================================

class RequirementDiagramImporter:
    """Builds a RequirementDiagram from a UML model and its notation."""

    name = "requirement_diagram"

    def __init__(self, sink: GraphSink, type_lookup: Optional[TypeLookup] = None):
        self.sink = sink
        self.type_lookup = type_lookup or TypeLookup.default()

    def build_diagram(
        self,
        uml_document: Dict[str, Any],
        notation_document: Optional[Dict[str, Any]] = None,
        parent: Optional[NodeRef] = None,
    ) -> ImportSummary:
        """Import one requirement diagram.

        Args:
            uml_document: Converted UML model document
            notation_document: Converted notation document (optional)
            parent: Node to create the diagram under (the sink root by default)

        Returns:
            ImportSummary of what was created

        Raises:
            DecodeError: If the document holds no UML model
            UnknownElementTypeError: On an unmapped XMI type or stereotype
            UnresolvedReferenceError: On a dangling link when references are strict
        """
        model = uml_document.get(UML_MODEL_KEY)
        if not isinstance(model, dict):
            raise DecodeError(f"Document has no '{UML_MODEL_KEY}' entry")

        parent = parent if parent is not None else self.sink.root
        context = ImportContext()

        stereotypes = build_stereotype_index(uml_document)
        requirement_properties = build_requirement_properties(uml_document)

        notation = extract_notation_diagram(notation_document)
        positions = build_position_index(notation)

        diagram_name = (
            (notation or {}).get("@name")
            or model.get("@name")
            or MetaType.REQUIREMENT_DIAGRAM.value
        )
        diagram = self.construct_node(
            parent, MetaType.REQUIREMENT_DIAGRAM, diagram_name, ROOT_POSITION
        )

        for i, element in enumerate(as_list(model.get("packagedElement"))):
            self._add_packaged_element(
                diagram, element, i, context, stereotypes, positions, requirement_properties
            )

        for i, comment in enumerate(as_list(model.get("ownedComment"))):
            self._add_comment(diagram, comment, i, context, stereotypes, positions)

        # With all nodes created, connect the links between them
        for link in context.links:
            self._materialize_link(diagram, link, context)

        logger.info(
            f"Imported requirement diagram '{diagram_name}': "
            f"{context.nodes_created} nodes, {context.links_created} links"
        )
        return ImportSummary.from_context(self.name, diagram, diagram_name, context)

    def construct_node(
        self,
        parent: NodeRef,
        meta_type: MetaType,
        name: Optional[str],
        position: Union[NodePosition, Dict[str, int]],
    ) -> NodeRef:
        """Create a named, positioned node under parent."""
        if isinstance(position, NodePosition):
            position = position.to_registry()

        node = self.sink.create_node(parent, meta_type)
        self.sink.set_attribute(node, "name", name)
        self.sink.set_registry(node, "position", dict(position))
        return node

    # ------------------------------------------------------------------
    # Node pass
    # ------------------------------------------------------------------

    def _add_packaged_element(
        self,
        diagram: NodeRef,
        element: Dict[str, Any],
        index: int,
        context: ImportContext,
        stereotypes: Dict[str, str],
        positions: PositionIndex,
        requirement_properties: Dict[str, Dict[str, str]],
    ) -> None:
        element_id = element.get(XMI_ID)
        try:
            meta_type = self.type_lookup.resolve(element.get(XMI_TYPE))
        except UnknownElementTypeError as e:
            if not is_enabled("skip_unknown_element_types"):
                raise
            logger.warning(f"Skipping element '{element_id}': {e}")
            context.warnings.append(f"Skipped element '{element_id}': {e}")
            return

        # Relationships become links once every node exists
        if meta_type.is_link:
            link_type = meta_type
            if meta_type is MetaType.ABSTRACTION:
                link_type = self._stereotype_link_type(element_id, stereotypes)
            context.links.append(PendingLink(
                src=element.get("@client"),
                dst=element.get("@supplier"),
                type=link_type,
            ))
            return

        if context.is_registered(element_id):
            logger.debug(f"Element '{element_id}' already imported, skipping")
            return

        self._construct_element(
            diagram, meta_type, element, index, context, positions, requirement_properties
        )

        if meta_type is MetaType.REQUIREMENT and element.get("nestedClassifier"):
            self._construct_decomposition(
                diagram, element, context, positions, requirement_properties
            )

    def _construct_decomposition(
        self,
        diagram: NodeRef,
        parent_element: Dict[str, Any],
        context: ImportContext,
        positions: PositionIndex,
        requirement_properties: Dict[str, Dict[str, str]],
    ) -> None:
        """Create nested requirements and a Decompose link to each, depth first."""
        parent_id = parent_element.get(XMI_ID)

        for i, child in enumerate(as_list(parent_element.get("nestedClassifier"))):
            child_id = child.get(XMI_ID)
            if not context.is_registered(child_id):
                self._construct_element(
                    diagram, MetaType.REQUIREMENT, child, i, context, positions,
                    requirement_properties,
                )

            context.links.append(PendingLink(src=parent_id, dst=child_id, type=MetaType.DECOMPOSE))

            if child.get("nestedClassifier"):
                self._construct_decomposition(
                    diagram, child, context, positions, requirement_properties
                )

    def _construct_element(
        self,
        diagram: NodeRef,
        meta_type: MetaType,
        element: Dict[str, Any],
        index: int,
        context: ImportContext,
        positions: PositionIndex,
        requirement_properties: Dict[str, Dict[str, str]],
    ) -> NodeRef:
        element_id = element.get(XMI_ID)
        node = self.construct_node(
            diagram, meta_type, element.get("@name"),
            self._position_for(element_id, index, positions),
        )
        for name, value in requirement_properties.get(element_key(element_id), {}).items():
            self.sink.set_attribute(node, name, value)

        context.register(element_id, node)
        context.nodes_created += 1
        return node

    def _add_comment(
        self,
        diagram: NodeRef,
        comment: Dict[str, Any],
        index: int,
        context: ImportContext,
        stereotypes: Dict[str, str],
        positions: PositionIndex,
    ) -> None:
        comment_id = comment.get(XMI_ID)
        if context.is_registered(comment_id):
            logger.debug(f"Comment '{comment_id}' already imported, skipping")
            return

        stereotype = stereotypes.get(element_key(comment_id))
        meta_type = MetaType.from_name(stereotype) if stereotype else MetaType.COMMENT

        node = self.construct_node(
            diagram, meta_type, meta_type.value,
            self._position_for(comment_id, index, positions),
        )
        body = text_of(comment.get("body"))
        if body:
            self.sink.set_attribute(node, "body", body)

        context.register(comment_id, node)
        context.nodes_created += 1

        for target in (comment.get("@annotatedElements") or "").split():
            context.links.append(PendingLink(src=comment_id, dst=target, type=MetaType.COMMENT_LINK))

    # ------------------------------------------------------------------
    # Link pass
    # ------------------------------------------------------------------

    def _materialize_link(self, diagram: NodeRef, link: PendingLink, context: ImportContext) -> None:
        link_node = self.sink.create_node(diagram, link.type)
        self.sink.set_pointer(link_node, "src", context.resolve(link.src, link.type.value, "src"))
        self.sink.set_pointer(link_node, "dst", context.resolve(link.dst, link.type.value, "dst"))
        context.links_created += 1

    @staticmethod
    def _stereotype_link_type(element_id: Hashable, stereotypes: Dict[str, str]) -> MetaType:
        stereotype = stereotypes.get(element_key(element_id))
        if stereotype is None:
            logger.warning(f"Abstraction '{element_id}' has no stereotype, importing as Abstraction")
            return MetaType.ABSTRACTION
        return MetaType.from_name(stereotype)

    @staticmethod
    def _position_for(element_id: Hashable, index: int, positions: PositionIndex) -> Dict[str, int]:
        key = element_key(element_id)
        if positions and key in positions:
            return positions[key].to_registry()
        return default_position(index)
