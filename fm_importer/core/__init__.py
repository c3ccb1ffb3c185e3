"""
Core Layer - types, errors and collaborator interfaces shared by the importers

Modules:
- constants: document namespaces, MetaType and the XMI type lookup
- errors: ImporterError hierarchy
- graph_sink: GraphSink interface and the networkx-backed in-memory sink
- asset_resolver: AssetResolver interface plus in-memory and file resolvers
- document_loader: bytes/dict -> document decoding and shape detection
"""

from .asset_resolver import AssetResolver, FileAssetResolver, InMemoryAssetResolver
from .constants import MetaType, TypeLookup, default_position
from .document_loader import decode_document, detect_document_kind, extract_notation_diagram
from .errors import (
    AssetNotFoundError,
    DecodeError,
    ImporterError,
    MissingInputError,
    SinkError,
    StereotypeConflictError,
    UnknownElementTypeError,
    UnknownStereotypeError,
    UnresolvedReferenceError,
)
from .graph_sink import GraphSink, InMemoryGraphSink, NodeRef

__all__ = [
    # Constants
    'MetaType',
    'TypeLookup',
    'default_position',
    # Errors
    'ImporterError',
    'MissingInputError',
    'DecodeError',
    'AssetNotFoundError',
    'SinkError',
    'UnresolvedReferenceError',
    'UnknownElementTypeError',
    'UnknownStereotypeError',
    'StereotypeConflictError',
    # Collaborators
    'GraphSink',
    'InMemoryGraphSink',
    'NodeRef',
    'AssetResolver',
    'InMemoryAssetResolver',
    'FileAssetResolver',
    # Documents
    'decode_document',
    'detect_document_kind',
    'extract_notation_diagram',
]
