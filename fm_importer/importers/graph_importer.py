"""Importer for vertex/edge graph documents (feature-model graphs).

Input shape::

    {"nodes": [
        {"id": 1, "label": "A", "outE": {"created": [{"id": "e1", "inV": 2}]}},
        {"id": 2, "label": "B", "inE": {"created": [{"id": "e1", "outV": 1}]}}
    ]}

Output: one ``Graph`` container holding a ``Node`` per source node and an
``Edge`` per distinct edge id, with ``src``/``dst`` pointers.
"""

import logging
from typing import Any, Dict, Hashable, List, Optional

from ..config.settings import is_enabled
from ..core.constants import ROOT_POSITION, MetaType, default_position
from ..core.errors import DecodeError
from ..core.graph_sink import GraphSink, NodeRef
from ..models.import_models import CollectedEdge, ImportContext, ImportSummary
from ..utils.documents import as_list

logger = logging.getLogger(__name__)

GRAPH_NAME = "graph"


class GraphImporter:
    """Builds a Graph container from a vertex/edge document."""

    name = "graph"

    def __init__(self, sink: GraphSink):
        self.sink = sink

    def build_graph(self, document: Dict[str, Any], parent: Optional[NodeRef] = None) -> ImportSummary:
        """Create the container, its nodes and then its edges.

        Args:
            document: Decoded graph document with a ``nodes`` list
            parent: Node to create the container under (the sink root by default)

        Returns:
            ImportSummary of what was created

        Raises:
            DecodeError: If the document has no ``nodes`` list
        """
        source_nodes = document.get("nodes")
        if not isinstance(source_nodes, list):
            raise DecodeError("Graph document has no 'nodes' list")

        parent = parent if parent is not None else self.sink.root
        context = ImportContext()

        graph_node = self.sink.create_node(parent, MetaType.GRAPH)
        self.sink.set_attribute(graph_node, "name", GRAPH_NAME)
        self.sink.set_registry(graph_node, "position", dict(ROOT_POSITION))

        # Nodes first, gathering edges on the way
        for i, source in enumerate(source_nodes):
            state_id = source.get("id")
            node = self.sink.create_node(graph_node, MetaType.NODE)
            self.sink.set_attribute(node, "name", source.get("label"))
            self.sink.set_registry(node, "position", default_position(i))

            context.register(state_id, node)
            context.nodes_created += 1

            # inE is only read when outE is absent; an empty outE still wins
            if source.get("outE") is not None:
                self._collect_edges(context, state_id, source["outE"], "inV")
            elif source.get("inE") is not None:
                self._collect_edges(context, state_id, source["inE"], "outV")

        # With all nodes created, connect the edges between them
        for edge in context.edges.values():
            edge_node = self.sink.create_node(graph_node, MetaType.EDGE)
            self.sink.set_attribute(edge_node, "label", edge.label)
            self.sink.set_pointer(edge_node, "src", context.resolve(edge.src, edge.label, "src"))
            self.sink.set_pointer(edge_node, "dst", context.resolve(edge.dst, edge.label, "dst"))
            context.links_created += 1

        logger.info(
            f"Imported graph with {context.nodes_created} nodes and "
            f"{context.links_created} edges"
        )
        return ImportSummary.from_context(self.name, graph_node, GRAPH_NAME, context)

    @staticmethod
    def edge_kinds() -> List[str]:
        """Edge-kind tables read from outE/inE."""
        kinds = ["created"]
        if is_enabled("import_knows_edges"):
            kinds.append("knows")
        return kinds

    def _collect_edges(
        self,
        context: ImportContext,
        node_id: Hashable,
        edge_table: Dict[str, Any],
        endpoint_key: str,
    ) -> None:
        for kind in self.edge_kinds():
            for entry in as_list(edge_table.get(kind)):
                added = context.add_edge(
                    entry.get("id"),
                    CollectedEdge(src=node_id, dst=entry.get(endpoint_key), label=kind),
                )
                if not added:
                    logger.debug(f"Edge {entry.get('id')} already collected, skipping")
