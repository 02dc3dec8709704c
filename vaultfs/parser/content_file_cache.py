"""LRU cache of parsed descriptor files."""

import logging
import os
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Tuple

from vaultfs.parser.content_element import ContentElement
from vaultfs.parser.content_types import ContentType
from vaultfs.parser.jcr_xml import JcrXmlParser

logger = logging.getLogger(__name__)

# Cached value when a file could not be parsed
_NO_CONTENT = object()


class ContentFileCache:
    """Caches the parsed content tree of each descriptor file.

    Entries are keyed on the file's absolute path and validated against
    its modification time, so an edited descriptor is re-parsed on the
    next lookup. Failed parses are cached as "no content" until the
    file changes.
    """

    def __init__(self, max_size: int = 1000):
        """Initialize the cache.

        Args:
            max_size: Maximum number of parsed files kept (0 disables caching)
        """
        self.max_size = max_size
        self._entries: "OrderedDict[str, Tuple[float, object]]" = OrderedDict()
        self._lock = threading.Lock()
        self._parsers = {ContentType.JCR_XML: JcrXmlParser()}

    def get(
        self,
        path: str,
        file: Path,
        content_type: ContentType = ContentType.JCR_XML,
    ) -> Optional[ContentElement]:
        """Get the root content element of a descriptor.

        Args:
            path: Logical path the descriptor belongs to (for logging)
            file: Descriptor file on disk
            content_type: Descriptor format

        Returns:
            Root element, or None if the file has no usable content
        """
        key = os.fspath(file)
        try:
            mtime = os.stat(key).st_mtime
        except OSError:
            logger.debug(f"Content file for {path} disappeared: {key}")
            self.remove(key)
            return None

        if self.max_size > 0:
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None and entry[0] == mtime:
                    self._entries.move_to_end(key)
                    return None if entry[1] is _NO_CONTENT else entry[1]

        logger.debug(f"Parsing content file for {path}: {key}")
        content = self._parsers[content_type].parse(file)

        if self.max_size > 0:
            with self._lock:
                self._entries[key] = (mtime, _NO_CONTENT if content is None else content)
                self._entries.move_to_end(key)
                while len(self._entries) > self.max_size:
                    self._entries.popitem(last=False)
        return content

    def remove(self, file: str) -> None:
        """Drop the cached content of one file."""
        with self._lock:
            self._entries.pop(os.fspath(file), None)

    def clear(self) -> None:
        """Drop all cached content."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Number of cached files."""
        with self._lock:
            return len(self._entries)
