"""MCP server exposing the FM importers."""

import asyncio
import json
import logging
from typing import Dict, Optional

from mcp import Tool
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import TextContent

from .config.settings import get_asset_root
from .core.asset_resolver import AssetResolver, FileAssetResolver
from .core.constants import TypeLookup
from .core.graph_sink import InMemoryGraphSink
from .tools.import_tools import ImportTools

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FeatureModelImporterServer:
    """MCP Server importing Papyrus models into in-memory projects."""

    def __init__(self, resolver: Optional[AssetResolver] = None):
        """Initialize the server with an empty project store."""
        self.projects: Dict[str, InMemoryGraphSink] = {}
        self.resolver = resolver or FileAssetResolver(get_asset_root())

        self.import_tools = ImportTools(self.projects, self.resolver, TypeLookup.default())

        # Create MCP server instance
        self.server = Server("fm-importer")

        # Register handlers
        self._register_handlers()

    def _register_handlers(self):
        """Register all MCP handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List all available tools."""
            return self.import_tools.get_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:
            """Route tool calls to appropriate handlers."""
            try:
                if name.startswith("import_"):
                    result = await self.import_tools.handle_tool(name, arguments)
                else:
                    raise ValueError(f"Unknown tool: {name}")

                return [TextContent(type="text", text=json.dumps(result, indent=2))]

            except Exception as e:
                logger.error(f"Error executing tool {name}: {e}")
                error_result = {
                    "error": str(e),
                    "tool": name,
                    "arguments": arguments
                }
                return [TextContent(type="text", text=json.dumps(error_result, indent=2))]

    async def run(self):
        """Run the MCP server."""
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name="fm-importer",
                    server_version="0.1.0",
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )


def main():
    """Main entry point for the MCP server."""
    server = FeatureModelImporterServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
