"""Asset resolution: turning an uploaded file handle into content.

In the browser the host hands back an already-parsed object, on the server
raw bytes. Resolvers return either; decoding is left to document_loader.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import AssetNotFoundError

logger = logging.getLogger(__name__)

AssetContent = Union[bytes, Dict[str, Any]]


class AssetResolver(ABC):
    """Resolves asset handles to bytes or pre-decoded documents."""

    @abstractmethod
    async def resolve(self, handle: str) -> AssetContent:
        """Fetch the asset behind handle.

        Raises:
            AssetNotFoundError: If the handle is unknown
        """


class InMemoryAssetResolver(AssetResolver):
    """Resolver over a dict of handle -> content, used by tests and scripting."""

    def __init__(self, assets: Optional[Dict[str, AssetContent]] = None):
        self._assets: Dict[str, AssetContent] = dict(assets or {})

    def add(self, handle: str, content: Union[AssetContent, str]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._assets[handle] = content

    async def resolve(self, handle: str) -> AssetContent:
        if handle not in self._assets:
            raise AssetNotFoundError(handle)
        return self._assets[handle]


class FileAssetResolver(AssetResolver):
    """Resolves handles as paths relative to an upload directory."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir).resolve()

    def _path_for(self, handle: str) -> Path:
        path = (self.base_dir / handle).resolve()
        # Handles must not escape the upload directory
        if self.base_dir != path and self.base_dir not in path.parents:
            raise AssetNotFoundError(handle)
        return path

    async def resolve(self, handle: str) -> AssetContent:
        path = self._path_for(handle)
        if not path.is_file():
            raise AssetNotFoundError(handle)

        content = await asyncio.to_thread(path.read_bytes)
        logger.debug(f"Resolved asset {handle} ({len(content)} bytes)")
        return content
