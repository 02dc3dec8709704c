"""View of one node inside a descriptor file."""

from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from vaultfs.parser.content_element import ContentElement
from vaultfs.parser.content_file_cache import ContentFileCache
from vaultfs.parser.content_types import ContentType


class ContentFile:
    """A descriptor file plus the sub-path of the node it is asked about.

    When the descriptor was found at an ancestor of the requested
    resource, ``sub_path`` holds the rest of the requested path, e.g.
    ``/a/.content.xml`` asked about ``/a/b/c`` has sub_path ``b/c``.

    Instances are cheap and built per lookup; the parsed tree lives in
    the ContentFileCache.

    Attributes:
        file: Descriptor file on disk
        path: Logical path the descriptor belongs to
        sub_path: Path inside the descriptor (None for its root)
    """

    def __init__(
        self,
        file: Path,
        path: str,
        sub_path: Optional[str],
        content_file_cache: ContentFileCache,
        content_type: ContentType = ContentType.JCR_XML,
    ):
        self.file = file
        self.path = path
        self.sub_path = sub_path
        self.content_type = content_type
        self._content_file_cache = content_file_cache
        self._content: Optional[ContentElement] = None
        self._content_loaded = False

    @property
    def resource_path(self) -> str:
        """Logical path of the node this view points at."""
        if not self.sub_path:
            return self.path
        if self.path == "/":
            return "/" + self.sub_path
        return f"{self.path}/{self.sub_path}"

    @property
    def content(self) -> Optional[ContentElement]:
        """Content element at sub_path, or None."""
        if not self._content_loaded:
            root = self._content_file_cache.get(self.path, self.file, self.content_type)
            if root is not None and self.sub_path:
                root = root.get_child(self.sub_path)
            self._content = root
            self._content_loaded = True
        return self._content

    def has_content(self) -> bool:
        """Check whether the node exists and defines anything.

        An element without properties or children (``<b/>``) only fixes
        the position of a node stored elsewhere, so it does not count.
        """
        content = self.content
        return content is not None and bool(content.properties or content.children)

    @property
    def value_map(self) -> Dict[str, Any]:
        """Properties of the node (empty if there is no content)."""
        content = self.content
        return dict(content.properties) if content is not None else {}

    def get_children(self) -> Iterator[Tuple[str, ContentElement]]:
        """Iterate direct children as (name, element) in declaration order."""
        content = self.content
        if content is None:
            return iter(())
        return content.iter_children()

    def navigate_to(self, relative_path: str) -> "ContentFile":
        """Get a view of a node below this one in the same descriptor."""
        relative_path = relative_path.strip("/")
        if self.sub_path:
            sub_path = f"{self.sub_path}/{relative_path}" if relative_path else self.sub_path
        else:
            sub_path = relative_path or None
        return ContentFile(self.file, self.path, sub_path,
                           self._content_file_cache, self.content_type)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(file='{self.file}', path='{self.path}', "
                f"sub_path={self.sub_path!r})")
