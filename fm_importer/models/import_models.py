"""Working state and results of a single import call.

Every import owns a fresh ImportContext, threads it through its node and
link passes and discards it afterwards, so nothing leaks between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from pydantic import BaseModel, Field

from ..config.settings import is_enabled
from ..core.constants import MetaType
from ..core.errors import UnresolvedReferenceError
from ..core.graph_sink import NodeRef
from ..utils.documents import element_key

logger = logging.getLogger(__name__)


@dataclass
class CollectedEdge:
    """Edge gathered from a graph document's outE/inE tables."""
    src: Hashable
    dst: Hashable
    label: str


@dataclass
class PendingLink:
    """Link whose endpoints are resolved after all nodes exist."""
    src: Optional[Hashable]
    dst: Optional[Hashable]
    type: MetaType


@dataclass
class ImportContext:
    """Per-call accumulator for identity mapping and deferred links.

    Attributes:
        id_to_node: External id (as text) -> created node
        edges: Graph importer edges keyed by edge id, in discovery order
        links: Requirement importer links, in emission order
        unresolved: Endpoint ids that had no node when links were built
    """
    id_to_node: Dict[Optional[str], NodeRef] = field(default_factory=dict)
    edges: Dict[Optional[str], CollectedEdge] = field(default_factory=dict)
    links: List[PendingLink] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    nodes_created: int = 0
    links_created: int = 0

    def register(self, element_id: Hashable, node: NodeRef) -> None:
        self.id_to_node[element_key(element_id)] = node

    def is_registered(self, element_id: Hashable) -> bool:
        return element_key(element_id) in self.id_to_node

    def add_edge(self, edge_id: Hashable, edge: CollectedEdge) -> bool:
        """Collect an edge unless its id was seen before. Returns True if added."""
        key = element_key(edge_id)
        if key in self.edges:
            return False
        self.edges[key] = edge
        return True

    def resolve(self, element_id: Optional[Hashable], link_kind: str, role: str) -> Optional[NodeRef]:
        """Look up a link endpoint.

        Ids match by their text form, so ``1`` and ``"1"`` are the same
        element. Unknown ids resolve to None and are recorded, unless the
        ``strict_references`` flag is on.

        Raises:
            UnresolvedReferenceError: If the id is unknown and references are strict
        """
        node = self.id_to_node.get(element_key(element_id))
        if node is not None:
            return node

        if is_enabled("strict_references"):
            raise UnresolvedReferenceError(link_kind, role, str(element_id))

        message = f"{link_kind} link {role} '{element_id}' has no matching node"
        logger.warning(message)
        self.unresolved.append(str(element_id))
        self.warnings.append(message)
        return None


class ImportSummary(BaseModel):
    """What an importer created, returned to the plugin and tool layers."""

    importer: str = Field(..., description="Importer that produced the graph")
    root_id: str = Field(..., description="Sink id of the created container node")
    root_name: str = Field(default="", description="Name given to the container")
    nodes_created: int = Field(default=0, description="Element nodes created")
    links_created: int = Field(default=0, description="Edge/link nodes created")
    unresolved_references: List[str] = Field(
        default_factory=list, description="Endpoint ids that resolved to no node"
    )
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def from_context(
        cls, importer: str, root: NodeRef, root_name: str, context: ImportContext
    ) -> "ImportSummary":
        return cls(
            importer=importer,
            root_id=root.node_id,
            root_name=root_name,
            nodes_created=context.nodes_created,
            links_created=context.links_created,
            unresolved_references=list(context.unresolved),
            warnings=list(context.warnings),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
