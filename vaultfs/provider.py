"""FsResourceProvider - entry point for browsing a FileVault folder."""

import logging
from pathlib import PurePosixPath
from typing import Iterator, List, Optional, Tuple

from vaultfs.config import ProviderConfig
from vaultfs.mapper.file_vault_mapper import FileVaultResourceMapper
from vaultfs.parser.content_file_cache import ContentFileCache
from vaultfs.resource import Resource
from vaultfs.stat_cache import FileStatCache

logger = logging.getLogger(__name__)


class PathError(Exception):
    """Error resolving a path."""
    pass


class NotFoundError(PathError):
    """Path does not exist."""
    pass


def normalize_path(path: str) -> str:
    """Normalize a logical path to absolute form without trailing slash.

    Args:
        path: Path like "/apps/site/" or "/apps/./site"

    Returns:
        Normalized path like "/apps/site"

    Raises:
        PathError: If the path is not absolute or escapes the root
    """
    if not path or not path.startswith("/"):
        raise PathError(f"Path must be absolute: '{path}'")

    parts: List[str] = []
    for part in PurePosixPath(path).parts[1:]:
        if part == ".":
            continue
        if part == "..":
            if not parts:
                raise PathError(f"Path escapes the root: '{path}'")
            parts.pop()
            continue
        parts.append(part)

    return "/" + "/".join(parts)


class FsResourceProvider:
    """Read-only resource tree over a FileVault folder.

    Wires the stat cache, content cache and mapper together from a
    ProviderConfig.

    Usage:
        >>> provider = FsResourceProvider(ProviderConfig(provider_root="/work/jcr_root"))
        >>> page = provider.get_resource("/content/site/home")
        >>> for child in provider.list_children("/content/site"):
        >>>     print(child.path, child.resource_type)
    """

    def __init__(self, config: ProviderConfig):
        """Initialize the provider.

        Args:
            config: Provider configuration
        """
        self.config = config
        self.stat_cache = FileStatCache(ttl=config.stat_cache_ttl)
        self.content_file_cache = ContentFileCache(max_size=config.content_cache_size)
        self.mapper = FileVaultResourceMapper(
            config.provider_root,
            config.filter_xml,
            self.content_file_cache,
            self.stat_cache,
        )
        logger.debug(f"Provider ready: {self.mapper!r}")

    def get_resource(self, path: str) -> Optional[Resource]:
        """Resolve a path to a resource.

        Args:
            path: Absolute logical path

        Returns:
            Resource or None if nothing is mapped there
        """
        return self.mapper.resolve(normalize_path(path))

    def list_children(self, path: str) -> List[Resource]:
        """List children of a resource.

        Args:
            path: Absolute logical path of the parent

        Returns:
            Child resources (empty for a leaf)

        Raises:
            NotFoundError: If the parent itself does not resolve
        """
        path = normalize_path(path)
        if self.mapper.resolve(path) is None:
            raise NotFoundError(f"No resource at '{path}'")

        children = self.mapper.children(path)
        if children is None:
            return []
        return list(children)

    def walk(self, path: str = "/", max_depth: Optional[int] = None) -> Iterator[Tuple[int, Resource]]:
        """Walk the tree depth-first.

        Args:
            path: Path to start at
            max_depth: Deepest level to descend to (None = unlimited)

        Yields:
            (depth, resource) pairs, the start resource at depth 0

        Raises:
            NotFoundError: If the start path does not resolve
        """
        start = self.get_resource(path)
        if start is None:
            raise NotFoundError(f"No resource at '{normalize_path(path)}'")

        stack: List[Tuple[int, Resource]] = [(0, start)]
        while stack:
            depth, resource = stack.pop()
            yield depth, resource
            if max_depth is not None and depth >= max_depth:
                continue
            children = self.mapper.children(resource.path)
            if children is None:
                continue
            stack.extend((depth + 1, child) for child in reversed(list(children)))

    def refresh(self) -> None:
        """Forget cached stats and parsed descriptors."""
        self.stat_cache.invalidate()
        self.content_file_cache.clear()
