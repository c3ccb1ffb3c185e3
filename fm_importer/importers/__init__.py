"""Graph and requirement-diagram importers."""

from .graph_importer import GraphImporter
from .requirement_diagram_importer import (
    RequirementDiagramImporter,
    build_position_index,
    build_requirement_properties,
    build_stereotype_index,
)

__all__ = [
    "GraphImporter",
    "RequirementDiagramImporter",
    "build_position_index",
    "build_requirement_properties",
    "build_stereotype_index",
]
