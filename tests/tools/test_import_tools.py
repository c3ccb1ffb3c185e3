"""
Tests for the MCP import tools

Tests cover:
1. Tool definitions
2. Importing into new and existing projects
3. Project summaries
4. Error envelopes for failed imports and unknown tools
"""

import json

import pytest

from fm_importer.core.constants import REQUIREMENT_STEREOTYPE_KEY, TypeLookup
from fm_importer.core.graph_sink import InMemoryGraphSink
from fm_importer.tools.import_tools import ImportTools


GRAPH_JSON = json.dumps({
    "nodes": [
        {"id": 1, "label": "A", "outE": {"created": [{"id": "e1", "inV": 2}]}},
        {"id": 2, "label": "B", "outE": {"created": [{"id": "e2", "inV": 3}]}},
        {"id": 3, "label": "C"},
        {"id": 4, "label": "Lonely"},
    ]
})

UML_MODEL = {
    "http://www.eclipse.org/uml2/5.0.0/UML:Model": {
        "@name": "Brakes",
        "packagedElement": {
            "@http://www.omg.org/spec/XMI/20131001:type": "uml:Class",
            "@http://www.omg.org/spec/XMI/20131001:id": "r1",
            "@name": "Stop",
            "nestedClassifier": {
                "@http://www.omg.org/spec/XMI/20131001:type": "uml:Class",
                "@http://www.omg.org/spec/XMI/20131001:id": "r2",
                "@name": "Stop fast",
            },
        },
    },
    REQUIREMENT_STEREOTYPE_KEY: {"@base_Class": "r1", "@id": "REQ-1"},
}


@pytest.fixture
def projects():
    return {}


@pytest.fixture
def import_tools(projects, resolver):
    resolver.add("graph.json", GRAPH_JSON)
    resolver.add("model.uml", UML_MODEL)
    return ImportTools(projects, resolver, TypeLookup())


class TestToolDefinitions:

    def test_tool_names(self, import_tools):
        names = [tool.name for tool in import_tools.get_tools()]
        assert names == ["import_feature_model", "import_project_summary"]

    def test_import_schema(self, import_tools):
        tool = import_tools.get_tools()[0]
        assert tool.inputSchema["required"] == ["project_id", "file"]
        assert "notation" in tool.inputSchema["properties"]


class TestImportFeatureModel:

    @pytest.mark.asyncio
    async def test_creates_project(self, import_tools, projects):
        result = await import_tools.handle_tool(
            "import_feature_model", {"project_id": "p1", "file": "graph.json"}
        )

        assert result["ok"] is True
        assert result["data"]["project_id"] == "p1"
        assert result["data"]["commit_message"] == "FM Importer created new model."
        assert isinstance(projects["p1"], InMemoryGraphSink)

    @pytest.mark.asyncio
    async def test_reuses_existing_project(self, import_tools, projects):
        existing = InMemoryGraphSink("p1")
        projects["p1"] = existing

        await import_tools.handle_tool("import_feature_model", {"project_id": "p1", "file": "graph.json"})
        await import_tools.handle_tool("import_feature_model", {"project_id": "p1", "file": "model.uml"})

        assert projects["p1"] is existing
        assert [ref.kind for ref in existing.get_children(existing.root)] == [
            "Graph", "RequirementDiagram",
        ]

    @pytest.mark.asyncio
    async def test_failed_import(self, import_tools):
        result = await import_tools.handle_tool(
            "import_feature_model", {"project_id": "p1", "file": "missing.json"}
        )

        assert result["ok"] is False
        assert result["error"]["code"] == "IMPORT_ERROR"
        assert result["error"]["message"] == "Asset missing.json not found"

    @pytest.mark.asyncio
    async def test_missing_project_id(self, import_tools):
        result = await import_tools.handle_tool("import_feature_model", {"file": "graph.json"})

        assert result["error"]["code"] == "TOOL_ERROR"


class TestProjectSummary:

    @pytest.mark.asyncio
    async def test_unknown_project(self, import_tools):
        result = await import_tools.handle_tool("import_project_summary", {"project_id": "nope"})

        assert result["error"]["code"] == "PROJECT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_graph_summary(self, import_tools):
        await import_tools.handle_tool("import_feature_model", {"project_id": "p1", "file": "graph.json"})

        result = await import_tools.handle_tool("import_project_summary", {"project_id": "p1"})

        data = result["data"]
        assert data["node_count"] == 7
        assert [c["message"] for c in data["commits"]] == ["FM Importer created new model."]

        graph = data["containers"][0]
        assert graph["container"]["kind"] == "Graph"
        assert graph["num_nodes"] == 4
        assert graph["num_edges"] == 2
        assert graph["edge_kinds"] == {"Edge": 2}
        assert graph["num_isolated_nodes"] == 1
        assert graph["is_acyclic"] is True

    @pytest.mark.asyncio
    async def test_diagram_summary(self, import_tools):
        await import_tools.handle_tool("import_feature_model", {"project_id": "p1", "file": "model.uml"})

        result = await import_tools.handle_tool("import_project_summary", {"project_id": "p1"})

        diagram = result["data"]["containers"][0]
        assert diagram["container"]["name"] == "Brakes"
        assert diagram["node_kinds"] == {"Requirement": 2}
        assert diagram["edge_kinds"] == {"Decompose": 1}
        assert diagram["decomposition_depth"] == 1


class TestRouting:

    @pytest.mark.asyncio
    async def test_unknown_tool(self, import_tools):
        result = await import_tools.handle_tool("import_everything", {})

        assert result == {
            "ok": False,
            "error": {"message": "Unknown import tool: import_everything", "code": "UNKNOWN_TOOL"},
        }
