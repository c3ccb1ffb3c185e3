"""
Graph Sink Module - Host Model Graph Abstraction

The importers never touch the host's storage engine directly. They create
nodes and set attributes, registry values and pointers through the narrow
GraphSink interface, and ask it to persist once the transform is done.

InMemoryGraphSink is the reference implementation used by the MCP server
and the tests. It keeps the model in a networkx MultiDiGraph:
- containment edges (key ``"contains"``) from parent to child
- pointer edges (key = pointer name, e.g. ``"src"``) from a node to its target

Usage:
    from fm_importer.core.graph_sink import InMemoryGraphSink

    sink = InMemoryGraphSink()
    node = sink.create_node(sink.root, MetaType.REQUIREMENT)
    sink.set_attribute(node, "name", "Req1")
    sink.set_registry(node, "position", {"x": 50, "y": 200})
    await sink.save("Imported requirements")
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import networkx as nx

from .constants import MetaType
from .errors import SinkError

logger = logging.getLogger(__name__)

CONTAINMENT = "contains"
ROOT_ID = ""
ROOT_KIND = "ROOT"


@dataclass(frozen=True)
class NodeRef:
    """Handle to a node owned by a graph sink."""
    node_id: str
    kind: str


@dataclass
class CommitRecord:
    """One successful save of the in-memory graph."""
    message: str
    timestamp: datetime
    node_count: int


# ============================================================================
# Graph Sink Abstract Base Class
# ============================================================================

class GraphSink(ABC):
    """Capabilities the importers need from the host model graph."""

    @property
    @abstractmethod
    def root(self) -> NodeRef:
        """Node that imports are created under (the active node)."""

    @abstractmethod
    def create_node(self, parent: NodeRef, kind: Union[MetaType, str]) -> NodeRef:
        """Create a node of the given meta type under parent."""

    @abstractmethod
    def set_attribute(self, node: NodeRef, name: str, value: Any) -> None:
        """Set a named attribute on node."""

    @abstractmethod
    def set_registry(self, node: NodeRef, key: str, value: Any) -> None:
        """Set a registry (presentation) value on node."""

    @abstractmethod
    def set_pointer(self, node: NodeRef, name: str, target: Optional[NodeRef]) -> None:
        """Point node's named pointer at target; None leaves it unset."""

    @abstractmethod
    async def save(self, message: str) -> None:
        """Persist everything created so far."""


# ============================================================================
# In-Memory Implementation
# ============================================================================

class InMemoryGraphSink(GraphSink):
    """Thread-safe in-memory host graph backed by networkx.

    Node ids follow the host's path convention: the root is ``""`` and each
    child is ``<parent id>/<relid>``.
    """

    def __init__(self, name: str = "project"):
        self.name = name
        self._graph = nx.MultiDiGraph()
        self._relids = itertools.count(1)
        self._commits: List[CommitRecord] = []
        self._lock = threading.RLock()

        self._graph.add_node(
            ROOT_ID, kind=ROOT_KIND, attributes={"name": name}, registry={}, pointers={}
        )
        self._root = NodeRef(ROOT_ID, ROOT_KIND)

    @property
    def root(self) -> NodeRef:
        return self._root

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create_node(self, parent: NodeRef, kind: Union[MetaType, str]) -> NodeRef:
        if parent is None:
            raise SinkError("Cannot create node without a parent")
        kind_name = kind.value if isinstance(kind, MetaType) else str(kind)

        with self._lock:
            self._require(parent)
            node_id = f"{parent.node_id}/{next(self._relids)}"
            self._graph.add_node(
                node_id, kind=kind_name, attributes={}, registry={}, pointers={}
            )
            self._graph.add_edge(parent.node_id, node_id, key=CONTAINMENT)

        logger.debug(f"Created {kind_name} node {node_id}")
        return NodeRef(node_id, kind_name)

    def set_attribute(self, node: NodeRef, name: str, value: Any) -> None:
        with self._lock:
            self._require(node)["attributes"][name] = value

    def set_registry(self, node: NodeRef, key: str, value: Any) -> None:
        with self._lock:
            self._require(node)["registry"][key] = value

    def set_pointer(self, node: NodeRef, name: str, target: Optional[NodeRef]) -> None:
        if name == CONTAINMENT:
            raise SinkError(f"'{CONTAINMENT}' is reserved and cannot be used as a pointer name")

        with self._lock:
            data = self._require(node)
            if target is not None:
                self._require(target)

            previous = data["pointers"].get(name)
            if previous is not None and self._graph.has_edge(node.node_id, previous, key=name):
                self._graph.remove_edge(node.node_id, previous, key=name)

            if target is None:
                data["pointers"][name] = None
            else:
                data["pointers"][name] = target.node_id
                self._graph.add_edge(node.node_id, target.node_id, key=name)

    async def save(self, message: str) -> None:
        with self._lock:
            record = CommitRecord(
                message=message,
                timestamp=datetime.now(timezone.utc),
                node_count=self._graph.number_of_nodes(),
            )
            self._commits.append(record)
        logger.info(f"Saved {self.name}: {message} ({record.node_count} nodes)")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def kind_of(self, node: NodeRef) -> str:
        with self._lock:
            return self._require(node)["kind"]

    def get_attribute(self, node: NodeRef, name: str) -> Any:
        with self._lock:
            return self._require(node)["attributes"].get(name)

    def get_registry(self, node: NodeRef, key: str) -> Any:
        with self._lock:
            return self._require(node)["registry"].get(key)

    def get_pointer(self, node: NodeRef, name: str) -> Optional[NodeRef]:
        """Target of a pointer, or None when unset or set to nothing."""
        with self._lock:
            target_id = self._require(node)["pointers"].get(name)
            if target_id is None:
                return None
            return NodeRef(target_id, self._graph.nodes[target_id]["kind"])

    def has_pointer(self, node: NodeRef, name: str) -> bool:
        """True when the pointer was set, even if it was set to nothing."""
        with self._lock:
            return name in self._require(node)["pointers"]

    def get_children(self, node: NodeRef) -> List[NodeRef]:
        """Children in creation order."""
        with self._lock:
            self._require(node)
            children = [
                child for _, child, key in self._graph.out_edges(node.node_id, keys=True)
                if key == CONTAINMENT
            ]
            return [NodeRef(c, self._graph.nodes[c]["kind"]) for c in children]

    def find_by_kind(self, kind: Union[MetaType, str], parent: Optional[NodeRef] = None) -> List[NodeRef]:
        kind_name = kind.value if isinstance(kind, MetaType) else str(kind)
        candidates = self.get_children(parent) if parent is not None else [
            NodeRef(n, d["kind"]) for n, d in self._graph.nodes(data=True)
        ]
        return [ref for ref in candidates if ref.kind == kind_name]

    def node_count(self) -> int:
        """Number of nodes, excluding the root."""
        with self._lock:
            return self._graph.number_of_nodes() - 1

    @property
    def commits(self) -> List[CommitRecord]:
        with self._lock:
            return list(self._commits)

    def link_graph(self, container: Optional[NodeRef] = None) -> nx.DiGraph:
        """Project link nodes onto a plain DiGraph of the nodes they connect.

        Every non-link child of ``container`` (all nodes when omitted) is a
        graph node; every node with both ``src`` and ``dst`` set becomes an
        edge carrying the link's kind.
        """
        with self._lock:
            if container is not None:
                members = [ref.node_id for ref in self.get_children(container)]
            else:
                members = [n for n in self._graph.nodes if n != ROOT_ID]

            graph = nx.DiGraph()
            for node_id in members:
                data = self._graph.nodes[node_id]
                src = data["pointers"].get("src")
                dst = data["pointers"].get("dst")
                if "src" in data["pointers"] or "dst" in data["pointers"]:
                    if src is not None and dst is not None:
                        graph.add_edge(src, dst, kind=data["kind"], link=node_id)
                    continue
                graph.add_node(
                    node_id,
                    kind=data["kind"],
                    label=data["attributes"].get("name", ""),
                )
            return graph

    def _require(self, node: NodeRef) -> Dict[str, Any]:
        if node is None or node.node_id not in self._graph:
            raise SinkError(f"Node {node.node_id if node else None!r} not found")
        return self._graph.nodes[node.node_id]
