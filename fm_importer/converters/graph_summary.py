"""Topology summaries of imported graphs."""

import logging
from collections import Counter
from typing import Any, Dict, Optional

import networkx as nx

from ..core.graph_sink import InMemoryGraphSink, NodeRef

logger = logging.getLogger(__name__)


def extract_topology_summary(graph: nx.DiGraph) -> Dict[str, Any]:
    """Extract topology summary from a graph.

    Args:
        graph: NetworkX graph to analyze

    Returns:
        Dictionary with topology metrics
    """
    summary = {
        "num_nodes": graph.number_of_nodes(),
        "num_edges": graph.number_of_edges(),
        "density": nx.density(graph),
    }

    # Per-kind counts
    summary["node_kinds"] = dict(Counter(d.get("kind", "") for _, d in graph.nodes(data=True)))
    summary["edge_kinds"] = dict(Counter(d.get("kind", "") for _, _, d in graph.edges(data=True)))

    if graph.number_of_nodes():
        summary["is_acyclic"] = nx.is_directed_acyclic_graph(graph)
        summary["num_weakly_connected_components"] = nx.number_weakly_connected_components(graph)
    else:
        summary["is_acyclic"] = True
        summary["num_weakly_connected_components"] = 0

    # Identify isolated nodes
    isolated = list(nx.isolates(graph))
    summary["num_isolated_nodes"] = len(isolated)
    summary["isolated_nodes"] = isolated

    return summary


def decomposition_depth(graph: nx.DiGraph) -> int:
    """Length of the longest chain of Decompose links."""
    decompose = nx.DiGraph(
        (u, v) for u, v, d in graph.edges(data=True) if d.get("kind") == "Decompose"
    )
    if decompose.number_of_edges() == 0:
        return 0
    if not nx.is_directed_acyclic_graph(decompose):
        logger.warning("Decompose links contain a cycle")
        return -1
    return nx.dag_longest_path_length(decompose)


def summarize_container(sink: InMemoryGraphSink, container: Optional[NodeRef] = None) -> Dict[str, Any]:
    """Summarize an imported Graph or RequirementDiagram held by the sink."""
    graph = sink.link_graph(container)
    summary = extract_topology_summary(graph)
    summary["decomposition_depth"] = decomposition_depth(graph)
    if container is not None:
        summary["container"] = {
            "id": container.node_id,
            "kind": container.kind,
            "name": sink.get_attribute(container, "name"),
        }
    return summary
