"""Layout hints recovered from Papyrus notation documents.

Positions are stored on created nodes through the sink's ``position``
registry entry as plain ``{"x": ..., "y": ...}`` dicts, which is what the
host editor renders. NodePosition is the validated form used while
importing.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class NodePosition(BaseModel):
    """Position of a single node in 2D diagram space.

    Attributes:
        x: Horizontal coordinate
        y: Vertical coordinate
    """

    x: int = Field(..., description="Horizontal coordinate")
    y: int = Field(..., description="Vertical coordinate")

    def to_registry(self) -> Dict[str, int]:
        """Registry value understood by the host editor."""
        return {"x": self.x, "y": self.y}


# element id -> position, or None when the notation carried no children
PositionIndex = Optional[Dict[str, NodePosition]]
