"""Value objects and per-call working state of the importers."""

from .import_models import CollectedEdge, ImportContext, ImportSummary, PendingLink
from .layout import NodePosition, PositionIndex

__all__ = [
    "CollectedEdge",
    "ImportContext",
    "ImportSummary",
    "PendingLink",
    "NodePosition",
    "PositionIndex",
]
