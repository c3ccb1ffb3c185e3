"""
Tests for GraphImporter - vertex/edge documents to Graph containers

Tests cover:
1. Container, node and edge creation for the basic example
2. Edge collection from outE/inE and de-duplication by edge id
3. The 'knows' edge kind behind its feature flag
4. Lenient and strict handling of unresolved endpoints
5. Isolation between import calls
"""

import pytest

from fm_importer.config.settings import set_flag
from fm_importer.core.constants import MetaType
from fm_importer.core.errors import DecodeError, UnresolvedReferenceError
from fm_importer.importers.graph_importer import GraphImporter


@pytest.fixture
def importer(sink):
    return GraphImporter(sink)


@pytest.fixture
def example_document():
    """Two nodes and one 'created' edge from A to B."""
    return {
        "nodes": [
            {"id": 1, "label": "A", "outE": {"created": [{"id": "e1", "inV": 2}]}},
            {"id": 2, "label": "B"},
        ]
    }


def _container(sink):
    return sink.get_children(sink.root)[-1]


class TestBasicImport:
    """Test the structure produced for a simple document."""

    def test_creates_single_graph_container(self, importer, sink, example_document):
        importer.build_graph(example_document)

        containers = sink.get_children(sink.root)
        assert len(containers) == 1
        assert containers[0].kind == "Graph"
        assert sink.get_attribute(containers[0], "name") == "graph"
        assert sink.get_registry(containers[0], "position") == {"x": 200, "y": 200}

    def test_creates_one_node_per_source_node(self, importer, sink, example_document):
        importer.build_graph(example_document)

        nodes = sink.find_by_kind(MetaType.NODE, _container(sink))
        assert [sink.get_attribute(n, "name") for n in nodes] == ["A", "B"]

    def test_node_positions_follow_sequence_index(self, importer, sink, example_document):
        importer.build_graph(example_document)

        nodes = sink.find_by_kind(MetaType.NODE, _container(sink))
        assert sink.get_registry(nodes[0], "position") == {"x": 50, "y": 200}
        assert sink.get_registry(nodes[1], "position") == {"x": 150, "y": 200}

    def test_edge_connects_source_to_target(self, importer, sink, example_document):
        importer.build_graph(example_document)

        container = _container(sink)
        a, b = sink.find_by_kind(MetaType.NODE, container)
        edges = sink.find_by_kind(MetaType.EDGE, container)

        assert len(edges) == 1
        assert sink.get_attribute(edges[0], "label") == "created"
        assert sink.get_pointer(edges[0], "src") == a
        assert sink.get_pointer(edges[0], "dst") == b

    def test_edges_created_after_nodes(self, importer, sink, example_document):
        importer.build_graph(example_document)

        kinds = [ref.kind for ref in sink.get_children(_container(sink))]
        assert kinds == ["Node", "Node", "Edge"]

    def test_summary_counts(self, importer, example_document):
        summary = importer.build_graph(example_document)

        assert summary.importer == "graph"
        assert summary.root_name == "graph"
        assert summary.nodes_created == 2
        assert summary.links_created == 1
        assert summary.unresolved_references == []

    def test_imports_under_given_parent(self, importer, sink, example_document):
        folder = sink.create_node(sink.root, "Folder")

        summary = importer.build_graph(example_document, parent=folder)

        assert [ref.node_id for ref in sink.get_children(folder)] == [summary.root_id]

    def test_missing_nodes_list_raises(self, importer):
        with pytest.raises(DecodeError, match="nodes"):
            importer.build_graph({"vertices": []})


class TestEdgeCollection:
    """Test how edges are gathered from outE/inE tables."""

    def test_duplicate_edge_ids_collapse(self, importer, sink):
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {"created": [{"id": "e1", "inV": 2}]}},
                {"id": 2, "label": "B", "inE": {"created": [{"id": "e1", "outV": 1}]}},
            ]
        }

        summary = importer.build_graph(document)

        assert summary.links_created == 1
        edge = sink.find_by_kind(MetaType.EDGE, _container(sink))[0]
        a, b = sink.find_by_kind(MetaType.NODE, _container(sink))
        # First discovery wins
        assert sink.get_pointer(edge, "src") == a
        assert sink.get_pointer(edge, "dst") == b

    def test_in_edges_used_when_out_edges_absent(self, importer, sink):
        document = {
            "nodes": [
                {"id": 1, "label": "A"},
                {"id": 2, "label": "B", "inE": {"created": [{"id": "e7", "outV": 1}]}},
            ]
        }

        importer.build_graph(document)

        a, b = sink.find_by_kind(MetaType.NODE, _container(sink))
        edge = sink.find_by_kind(MetaType.EDGE, _container(sink))[0]
        # The collecting node is always the source
        assert sink.get_pointer(edge, "src") == b
        assert sink.get_pointer(edge, "dst") == a

    def test_in_edges_ignored_when_out_edges_present(self, importer):
        document = {
            "nodes": [
                {
                    "id": 1,
                    "label": "A",
                    "outE": {"created": [{"id": "e1", "inV": 2}]},
                    "inE": {"created": [{"id": "e2", "outV": 2}]},
                },
                {"id": 2, "label": "B"},
            ]
        }

        summary = importer.build_graph(document)

        assert summary.links_created == 1

    def test_empty_out_edges_still_shadow_in_edges(self, importer):
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {}, "inE": {"created": [{"id": "e9", "outV": 2}]}},
                {"id": 2, "label": "B"},
            ]
        }

        summary = importer.build_graph(document)

        assert summary.links_created == 0

    def test_mixed_int_and_string_ids_match(self, importer, sink):
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {"created": [{"id": 7, "inV": "2"}]}},
                {"id": "2", "label": "B", "inE": {"created": [{"id": "7", "outV": 1}]}},
            ]
        }

        summary = importer.build_graph(document)

        _, b = sink.find_by_kind(MetaType.NODE, _container(sink))
        edge = sink.find_by_kind(MetaType.EDGE, _container(sink))[0]
        assert summary.links_created == 1
        assert sink.get_pointer(edge, "dst") == b
        assert summary.unresolved_references == []

    def test_edges_in_discovery_order(self, importer, sink):
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {"created": [
                    {"id": "e2", "inV": 3},
                    {"id": "e1", "inV": 2},
                ]}},
                {"id": 2, "label": "B"},
                {"id": 3, "label": "C"},
            ]
        }

        importer.build_graph(document)

        container = _container(sink)
        _, b, c = sink.find_by_kind(MetaType.NODE, container)
        edges = sink.find_by_kind(MetaType.EDGE, container)
        assert [sink.get_pointer(e, "dst") for e in edges] == [c, b]

    def test_knows_edges_ignored_by_default(self, importer):
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {"knows": [{"id": "k1", "inV": 2}]}},
                {"id": 2, "label": "B"},
            ]
        }

        summary = importer.build_graph(document)

        assert summary.links_created == 0

    def test_knows_edges_imported_when_enabled(self, importer, sink):
        set_flag("import_knows_edges", True)
        document = {
            "nodes": [
                {"id": 1, "label": "A", "outE": {
                    "created": [{"id": "c1", "inV": 2}],
                    "knows": [{"id": "k1", "inV": 2}],
                }},
                {"id": 2, "label": "B"},
            ]
        }

        summary = importer.build_graph(document)

        assert summary.links_created == 2
        labels = [
            sink.get_attribute(e, "label")
            for e in sink.find_by_kind(MetaType.EDGE, _container(sink))
        ]
        assert labels == ["created", "knows"]

    @pytest.mark.parametrize("node_count,edge_ids", [
        (1, []),
        (3, ["e1", "e2"]),
        (4, ["e1", "e1", "e2", "e3", "e3"]),
    ])
    def test_counts_match_distinct_edges(self, importer, node_count, edge_ids):
        nodes = [{"id": i, "label": f"N{i}"} for i in range(node_count)]
        nodes[0]["outE"] = {
            "created": [{"id": edge_id, "inV": node_count - 1} for edge_id in edge_ids]
        }

        summary = importer.build_graph({"nodes": nodes})

        assert summary.nodes_created == node_count
        assert summary.links_created == len(set(edge_ids))


class TestUnresolvedEndpoints:
    """Test endpoints that point at ids missing from the document."""

    @pytest.fixture
    def dangling_document(self):
        return {
            "nodes": [
                {"id": 1, "label": "A", "outE": {"created": [{"id": "e1", "inV": 99}]}},
            ]
        }

    def test_lenient_mode_leaves_pointer_empty(self, importer, sink, dangling_document):
        summary = importer.build_graph(dangling_document)

        edge = sink.find_by_kind(MetaType.EDGE, _container(sink))[0]
        assert sink.get_pointer(edge, "dst") is None
        assert sink.has_pointer(edge, "dst")
        assert summary.unresolved_references == ["99"]
        assert summary.warnings

    def test_strict_mode_raises(self, importer, dangling_document):
        set_flag("strict_references", True)

        with pytest.raises(UnresolvedReferenceError) as exc_info:
            importer.build_graph(dangling_document)

        assert exc_info.value.ref_id == "99"
        assert exc_info.value.role == "dst"


class TestCallIsolation:
    """Each call owns its identity map."""

    def test_second_import_links_only_its_own_nodes(self, importer, sink, example_document):
        importer.build_graph(example_document)
        importer.build_graph(example_document)

        first, second = sink.get_children(sink.root)
        second_nodes = sink.find_by_kind(MetaType.NODE, second)
        edge = sink.find_by_kind(MetaType.EDGE, second)[0]

        assert sink.get_pointer(edge, "src") in second_nodes
        assert sink.get_pointer(edge, "dst") in second_nodes
        assert len(sink.find_by_kind(MetaType.EDGE, first)) == 1
