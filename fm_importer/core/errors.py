"""Exceptions raised by the import pipeline.

Everything derives from ImporterError so the plugin boundary can turn any
pipeline failure into a failed result without catching unrelated bugs by
name.
"""

from typing import Iterable, Optional


class ImporterError(Exception):
    """Base exception for import pipeline errors."""
    pass


class MissingInputError(ImporterError):
    """Raised when the plugin is invoked without a file."""

    def __init__(self, option: str = "file"):
        self.option = option
        super().__init__(f"No {option} provided.")


class DecodeError(ImporterError):
    """Raised when asset content cannot be decoded into a document."""
    pass


class AssetNotFoundError(ImporterError):
    """Raised when an asset handle cannot be resolved."""

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(f"Asset {handle} not found")


class SinkError(ImporterError):
    """Raised when the graph sink rejects a node, attribute, pointer or save."""
    pass


class UnresolvedReferenceError(ImporterError):
    """Raised when a link endpoint id was never registered as a node."""

    def __init__(self, link_kind: str, role: str, ref_id: str):
        self.link_kind = link_kind
        self.role = role
        self.ref_id = ref_id
        super().__init__(
            f"{link_kind} link {role} references unknown element '{ref_id}'"
        )


class UnknownElementTypeError(ImporterError, ValueError):
    """Raised when an external type has no entry in the type lookup."""

    def __init__(self, type_name: str, available: Optional[Iterable[str]] = None):
        self.type_name = type_name
        message = f"Unknown element type: '{type_name}'."
        if available is not None:
            message += f" Available types: {', '.join(sorted(available))}"
        super().__init__(message)


class UnknownStereotypeError(UnknownElementTypeError):
    """Raised when a stereotype name does not match any meta type."""
    pass


class StereotypeConflictError(ImporterError):
    """Raised when two stereotype applications target the same element."""

    def __init__(self, element_id: str, existing: str, new: str):
        self.element_id = element_id
        self.existing = existing
        self.new = new
        super().__init__(
            f"Element '{element_id}' has conflicting stereotypes "
            f"'{existing}' and '{new}'"
        )
