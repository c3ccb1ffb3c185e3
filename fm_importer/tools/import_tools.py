"""MCP tools for running imports into in-memory projects."""

import logging
from typing import Dict, List, Optional

from mcp import Tool

from ..converters.graph_summary import summarize_container
from ..core.asset_resolver import AssetResolver
from ..core.constants import TypeLookup
from ..core.graph_sink import InMemoryGraphSink
from ..plugin import FeatureModelImporterPlugin
from ..utils.response import error_response, success_response

logger = logging.getLogger(__name__)


class ImportTools:
    """Handles import and inspection tools over a set of project sinks."""

    def __init__(
        self,
        projects: Dict[str, InMemoryGraphSink],
        resolver: AssetResolver,
        type_lookup: Optional[TypeLookup] = None,
    ):
        """Initialize with the project store and the asset resolver.

        Args:
            projects: Dictionary of project id -> graph sink
            resolver: Resolves the ``file``/``notation`` handles
            type_lookup: XMI type table for requirement diagrams
        """
        self.projects = projects
        self.resolver = resolver
        self.type_lookup = type_lookup

    def get_tools(self) -> List[Tool]:
        """Return all import tools."""
        return [
            Tool(
                name="import_feature_model",
                description=(
                    "Import a Papyrus feature-model graph or requirement diagram "
                    "(JSON or XMI) into a project"
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {
                            "type": "string",
                            "description": "Project to import into (created if missing)"
                        },
                        "file": {
                            "type": "string",
                            "description": "Asset handle of the model file"
                        },
                        "notation": {
                            "type": "string",
                            "description": "Optional asset handle of the diagram notation file"
                        }
                    },
                    "required": ["project_id", "file"]
                }
            ),
            Tool(
                name="import_project_summary",
                description="Summarize the graphs and diagrams imported into a project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {
                            "type": "string",
                            "description": "Project to summarize"
                        }
                    },
                    "required": ["project_id"]
                }
            ),
        ]

    async def handle_tool(self, name: str, arguments: dict) -> dict:
        """Route tool call to appropriate handler.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            Standardized response
        """
        handlers = {
            "import_feature_model": self._import_feature_model,
            "import_project_summary": self._project_summary,
        }

        handler = handlers.get(name)
        if not handler:
            return error_response(f"Unknown import tool: {name}", code="UNKNOWN_TOOL")

        try:
            return await handler(arguments)
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            return error_response(str(e), code="TOOL_ERROR")

    async def _import_feature_model(self, args: dict) -> dict:
        project_id = args["project_id"]
        sink = self.projects.get(project_id)
        if sink is None:
            sink = InMemoryGraphSink(project_id)
            self.projects[project_id] = sink
            logger.info(f"Created project {project_id}")

        plugin = FeatureModelImporterPlugin(sink, self.resolver, self.type_lookup)
        config = {"file": args.get("file"), "notation": args.get("notation")}
        result = await plugin.main(config)

        response = result.to_response()
        if result.success:
            response["data"]["project_id"] = project_id
        return response

    async def _project_summary(self, args: dict) -> dict:
        project_id = args["project_id"]
        sink = self.projects.get(project_id)
        if sink is None:
            return error_response(f"Project {project_id} not found", code="PROJECT_NOT_FOUND")

        containers = [summarize_container(sink, ref) for ref in sink.get_children(sink.root)]
        return success_response({
            "project_id": project_id,
            "node_count": sink.node_count(),
            "commits": [
                {"message": c.message, "timestamp": c.timestamp.isoformat(), "node_count": c.node_count}
                for c in sink.commits
            ],
            "containers": containers,
        })
