"""FM Importer plugin entry point.

Resolves the uploaded asset, decodes it, dispatches to the importer that
matches its shape, and persists the result. The only suspension points are
asset resolution and the final save; everything in between is one
synchronous pass over the sink.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .core.asset_resolver import AssetResolver
from .core.constants import TypeLookup
from .core.document_loader import (
    GRAPH_DOCUMENT,
    decode_document,
    detect_document_kind,
)
from .core.errors import MissingInputError
from .core.graph_sink import GraphSink, NodeRef
from .importers.graph_importer import GraphImporter
from .importers.requirement_diagram_importer import RequirementDiagramImporter
from .models.import_models import ImportSummary
from .utils.response import error_response, success_response

logger = logging.getLogger(__name__)

GRAPH_COMMIT_MESSAGE = "FM Importer created new model."
DIAGRAM_COMMIT_MESSAGE = "FM Importer created new requirement diagram."


class PluginResult(BaseModel):
    """Outcome of one plugin invocation."""

    success: bool = Field(default=False)
    error: Optional[str] = Field(default=None, description="Original error message on failure")
    commit_message: Optional[str] = Field(default=None)
    summary: Optional[ImportSummary] = Field(default=None)

    def to_response(self) -> Dict[str, Any]:
        """Convert to the standard response envelope."""
        if not self.success:
            return error_response(self.error or "Import failed", code="IMPORT_ERROR")
        return success_response(
            {
                "commit_message": self.commit_message,
                "summary": self.summary.to_dict() if self.summary else None,
            },
            warnings=self.summary.warnings if self.summary else None,
        )


class FeatureModelImporterPlugin:
    """Imports feature-model graphs and requirement diagrams into a sink.

    Example:
        plugin = FeatureModelImporterPlugin(sink, resolver)
        result = await plugin.main({"file": "model.uml", "notation": "model.notation"})
        if not result.success:
            print(result.error)
    """

    def __init__(
        self,
        sink: GraphSink,
        resolver: AssetResolver,
        type_lookup: Optional[TypeLookup] = None,
        active_node: Optional[NodeRef] = None,
    ):
        self.sink = sink
        self.resolver = resolver
        self.type_lookup = type_lookup
        self.active_node = active_node if active_node is not None else sink.root

    def get_name(self) -> str:
        return "FM Importer"

    def get_version(self) -> str:
        return "0.1.0"

    def get_config_structure(self) -> List[Dict[str, Any]]:
        """Configuration options shown when the plugin is invoked."""
        return [
            {
                "name": "file",
                "displayName": "FM model",
                "description": "Click and drag existing FM models from Eclipse Papyrus",
                "value": "",
                "valueType": "asset",
                "readOnly": False,
            },
            {
                "name": "notation",
                "displayName": "Diagram notation",
                "description": "Papyrus notation file with the requirement diagram layout",
                "value": "",
                "valueType": "asset",
                "readOnly": False,
            },
        ]

    async def main(self, config: Dict[str, Any]) -> PluginResult:
        """Run the import. Failures come back as a non-success result.

        Args:
            config: Plugin configuration with ``file`` and optional ``notation``

        Returns:
            PluginResult with the import summary or the original error message
        """
        try:
            summary, commit_message = await self._run(config)
        except Exception as e:
            logger.error(f"FM import failed: {e}")
            return PluginResult(success=False, error=str(e))

        return PluginResult(success=True, commit_message=commit_message, summary=summary)

    async def _run(self, config: Dict[str, Any]) -> Tuple[ImportSummary, str]:
        file_handle = config.get("file")
        if not file_handle:
            raise MissingInputError("file")

        document = decode_document(await self.resolver.resolve(file_handle))
        logger.info(f"Obtained document from asset {file_handle}")

        if detect_document_kind(document) == GRAPH_DOCUMENT:
            summary = GraphImporter(self.sink).build_graph(document, self.active_node)
            commit_message = GRAPH_COMMIT_MESSAGE
        else:
            notation = None
            if config.get("notation"):
                notation = decode_document(await self.resolver.resolve(config["notation"]))
            importer = RequirementDiagramImporter(self.sink, self.type_lookup)
            summary = importer.build_diagram(document, notation, self.active_node)
            commit_message = DIAGRAM_COMMIT_MESSAGE

        await self.sink.save(commit_message)
        return summary, commit_message
