"""Maps a FileVault-style folder onto the virtual resource tree.

A path may be backed by:

    - a plain file or folder                 /apps/site/script.js
    - a node inside the folder's sidecar     /apps/site/.content.xml
    - a same-name descriptor                 /apps/site/page.xml  -> /apps/site/page
      (page.xml is a plain file instead when page.xml.dir exists next to it)
    - a node inside an ancestor descriptor   /apps/.content.xml   -> /apps/site/jcr:content

Resolution order for one path is: plain file, then descriptor content,
then plain folder. Child listings merge descriptor children (declaration
order) with folder entries (sorted by on-disk name).
"""

import logging
import os
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Union

from vaultfs import platform_name
from vaultfs.mapper.content_file import ContentFile
from vaultfs.mapper.workspace_filter import FilterConfigurationError, WorkspaceFilter
from vaultfs.parser.content_file_cache import ContentFileCache
from vaultfs.parser.content_types import DOT_CONTENT_XML, DOT_DIR, XML_SUFFIX, ContentType
from vaultfs.resource import ContentFileResource, FileResource, Resource
from vaultfs.stat_cache import FileStatCache

logger = logging.getLogger(__name__)

DOT_CONTENT_XML_SUFFIX = "/" + DOT_CONTENT_XML
DOT_DIR_SUFFIX = "/" + DOT_DIR


def is_contained_path(path: str) -> bool:
    """Check that path has no "." or ".." segment, so it stays below the provider root."""
    return not any(segment in (".", "..") for segment in path.split("/"))


def get_parent_path(path: str) -> Optional[str]:
    """Parent of a logical path ("/a/b" -> "/a", "/a" -> "/", "/" -> None)."""
    if path == "/" or not path:
        return None
    parent = path.rsplit("/", 1)[0]
    return parent or "/"


def join_path(parent_path: str, name: str) -> str:
    if parent_path == "/":
        return "/" + name
    return f"{parent_path}/{name}"


class FileVaultResourceMapper:
    """Resolves resources and child listings below a provider root.

    The mapper holds no mutable state besides the stat cache reference,
    which can be swapped with update_stat_cache(). Lookups are safe to
    run from several threads.

    Attributes:
        provider_root: Folder on disk that backs "/"
        filter_xml: Optional filter.xml location
        workspace_filter: Loaded filter, or None when unfiltered
    """

    def __init__(
        self,
        provider_root: Union[str, Path],
        filter_xml: Optional[Union[str, Path]],
        content_file_cache: ContentFileCache,
        stat_cache: FileStatCache,
    ):
        """Initialize the mapper.

        Args:
            provider_root: Folder on disk that backs "/"
            filter_xml: filter.xml location (None to disable filtering)
            content_file_cache: Cache of parsed descriptors
            stat_cache: Cache of file existence and type checks
        """
        self.provider_root = Path(provider_root)
        self.filter_xml = Path(filter_xml) if filter_xml is not None else None
        self.content_file_cache = content_file_cache
        self._stat_cache = stat_cache
        self._stat_cache_lock = threading.Lock()
        self.workspace_filter = self._load_workspace_filter()

    @property
    def stat_cache(self) -> FileStatCache:
        return self._stat_cache

    def update_stat_cache(self, stat_cache: FileStatCache) -> None:
        """Replace the stat cache used for subsequent lookups."""
        with self._stat_cache_lock:
            self._stat_cache = stat_cache

    def resolve(self, path: str) -> Optional[Resource]:
        """Resolve a logical path to a resource.

        Args:
            path: Absolute logical path

        Returns:
            FileResource, ContentFileResource, or None if nothing is there
        """
        stat_cache = self._stat_cache
        if not self._path_matches(path, stat_cache):
            return None

        # plain file wins over everything
        file = self._get_file(path, stat_cache)
        if file is not None and stat_cache.is_file(file):
            return FileResource(self, path, file, stat_cache)

        content_file = self._get_content_file(path, None, stat_cache)
        if content_file is not None:
            return ContentFileResource(self, content_file)

        # folder without any descriptor
        if file is not None and stat_cache.is_directory(file):
            return FileResource(self, path, file, stat_cache)

        return None

    def children(self, parent_path: str) -> Optional[Iterator[Resource]]:
        """List the children of a resource.

        Args:
            parent_path: Logical path of the parent

        Returns:
            Lazy single-pass iterator of child resources, or None if the
            parent has no (visible) children
        """
        if not is_contained_path(parent_path):
            return None
        child_paths = self._collect_child_paths(parent_path, self._stat_cache)
        if not child_paths:
            return None
        return self._resolve_all(child_paths)

    def path_matches(self, path: str) -> bool:
        """Check whether path is visible through the workspace filter.

        Never visible: paths with "." or ".." segments, .content.xml files,
        "/.dir" folders, and "<name>.dir" folders next to an existing
        "<name>" (the FileVault metadata folder of that file). Any other
        folder whose name happens to end in ".dir" is an ordinary folder.
        Without a filter every other path is visible; with one, a path
        must be contained in it or be an ancestor of a filter root.
        """
        return self._path_matches(path, self._stat_cache)

    def get_file(self, path: str) -> Optional[Path]:
        """Get the plain file or folder backing path.

        An .xml file is a plain file when a .dir folder sits next to it,
        or when it holds no descriptor content. Otherwise it is the
        descriptor of the path without .xml and never a plain file.

        Returns:
            Existing file/folder, or None
        """
        return self._get_file(path, self._stat_cache)

    def get_content_file(self, path: str, sub_path: Optional[str] = None) -> Optional[ContentFile]:
        """Find the descriptor holding content for path.

        Walks up from path, trying the sidecar .content.xml and then the
        same-name .xml at each level. Each level up pushes the consumed
        segment onto sub_path, so an ancestor descriptor is asked for the
        nested node.

        Args:
            path: Logical path to start at
            sub_path: Path below ``path`` inside the descriptor

        Returns:
            ContentFile with content, or None
        """
        return self._get_content_file(path, sub_path, self._stat_cache)

    def _path_matches(self, path: str, stat_cache: FileStatCache) -> bool:
        if not is_contained_path(path) or path.endswith(DOT_CONTENT_XML_SUFFIX):
            return False
        if self._is_dot_dir(path, stat_cache):
            return False
        if self.workspace_filter is None:
            return True
        return self.workspace_filter.contains(path) or self.workspace_filter.is_ancestor(path)

    def _is_dot_dir(self, path: str, stat_cache: FileStatCache) -> bool:
        if path.endswith(DOT_DIR_SUFFIX):
            return True
        if not path.endswith(DOT_DIR) or len(path) <= len(DOT_DIR) + 1:
            return False
        return stat_cache.exists(self._to_file(path[:-len(DOT_DIR)]))

    def _get_file(self, path: str, stat_cache: FileStatCache) -> Optional[Path]:
        if not is_contained_path(path) or path.endswith(DOT_CONTENT_XML_SUFFIX):
            return None
        file = self._to_file(path)
        if not stat_cache.exists(file):
            return None
        if (path.endswith(XML_SUFFIX) and stat_cache.is_file(file)
                and not self._has_dot_dir(file, stat_cache)
                and self._holds_content(file, path[:-len(XML_SUFFIX)])):
            return None
        return file

    def _get_content_file(self, path: str, sub_path: Optional[str],
                          stat_cache: FileStatCache) -> Optional[ContentFile]:
        if not is_contained_path(path):
            return None
        current: Optional[str] = path
        while current is not None:
            for file in self._descriptor_candidates(current, stat_cache):
                if not stat_cache.is_file(file):
                    continue
                content_file = ContentFile(file, current, sub_path,
                                           self.content_file_cache, ContentType.JCR_XML)
                if content_file.has_content():
                    return content_file

            parent = get_parent_path(current)
            if parent is None:
                break
            name = current.rsplit("/", 1)[-1]
            sub_path = f"{name}/{sub_path}" if sub_path else name
            current = parent
        return None

    def _descriptor_candidates(self, path: str, stat_cache: FileStatCache) -> List[Path]:
        platform_path = platform_name.get_platform_path(path)
        candidates = [self._platform_file(platform_path.rstrip("/") + DOT_CONTENT_XML_SUFFIX)]
        if path != "/":
            # page.xml next to page.xml.dir is a plain file, not a descriptor
            same_name = self._platform_file(platform_path + XML_SUFFIX)
            if not self._has_dot_dir(same_name, stat_cache):
                candidates.append(same_name)
        return candidates

    def _holds_content(self, file: Path, path: str) -> bool:
        return ContentFile(file, path, None, self.content_file_cache, ContentType.JCR_XML).has_content()

    def _collect_child_paths(self, parent_path: str, stat_cache: FileStatCache) -> List[str]:
        # dict keeps insertion order and gives O(1) dedup
        child_paths = {}

        parent_content_file = self._get_content_file(parent_path, None, stat_cache)
        if parent_content_file is not None:
            for name, _ in parent_content_file.get_children():
                child_path = join_path(parent_path, name)
                if child_path not in child_paths and self._path_matches(child_path, stat_cache):
                    child_paths[child_path] = None

        parent_file = self._get_file(parent_path, stat_cache)
        if parent_file is not None and stat_cache.is_directory(parent_file):
            for entry_name in self._list_dir(parent_file):
                child_path = join_path(parent_path, platform_name.get_repository_name(entry_name))

                file = self._get_file(child_path, stat_cache)
                if file is not None:
                    if child_path not in child_paths and self._path_matches(child_path, stat_cache):
                        child_paths[child_path] = None
                    continue

                # page.xml lists as page; .xml is re-added by the descriptor lookup
                if not child_path.endswith(DOT_CONTENT_XML_SUFFIX) and child_path.endswith(XML_SUFFIX):
                    child_path = child_path[:-len(XML_SUFFIX)]
                if child_path in child_paths or not self._path_matches(child_path, stat_cache):
                    continue
                if self._get_content_file(child_path, None, stat_cache) is not None:
                    child_paths[child_path] = None

        logger.debug(f"Found {len(child_paths)} children below {parent_path}")
        return list(child_paths)

    def _resolve_all(self, child_paths: List[str]) -> Iterator[Resource]:
        for child_path in child_paths:
            resource = self.resolve(child_path)
            if resource is None:
                logger.debug(f"Child {child_path} vanished during listing")
                continue
            yield resource

    def _list_dir(self, folder: Path) -> List[str]:
        try:
            names = os.listdir(folder)
        except OSError as e:
            logger.warning(f"Unable to list folder {folder}: {e}")
            return []
        return sorted(names)

    def _has_dot_dir(self, file: Path, stat_cache: FileStatCache) -> bool:
        return stat_cache.is_directory(file.with_name(file.name + DOT_DIR))

    def _to_file(self, path: str) -> Path:
        return self._platform_file(platform_name.get_platform_path(path))

    def _platform_file(self, platform_path: str) -> Path:
        relative = platform_path.lstrip("/")
        return self.provider_root / relative if relative else self.provider_root

    def _load_workspace_filter(self) -> Optional[WorkspaceFilter]:
        if self.filter_xml is None:
            return None
        if not self.filter_xml.exists():
            logger.debug(f"Workspace filter not found: {self.filter_xml}")
            return None
        try:
            return WorkspaceFilter.load(self.filter_xml)
        except (FilterConfigurationError, OSError) as e:
            logger.error(f"Unable to parse workspace filter: {self.filter_xml}", exc_info=e)
            return None

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(provider_root='{self.provider_root}', "
                f"filter_xml={str(self.filter_xml) if self.filter_xml else None!r})")
