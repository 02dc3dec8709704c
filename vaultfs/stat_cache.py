"""Cached file existence and type checks.

Every filesystem stat done while resolving resources goes through
FileStatCache, so repeated lookups of the same descriptor or folder
during one tree walk hit memory instead of the disk.
"""

import errno
import logging
import os
import stat
import threading
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileStatCache:
    """TTL cache of ``os.stat`` results keyed by absolute path.

    Missing files are cached too (as a negative entry), which is what
    makes repeated ``.content.xml`` checks along an ancestor walk cheap.
    Expired entries are swept out on write, at most once per TTL, so
    the map only holds paths seen during the last TTL or so.

    Attributes:
        ttl: Seconds an entry stays valid. 0 disables caching.
    """

    def __init__(self, ttl: float = 10.0):
        """Initialize the cache.

        Args:
            ttl: Seconds an entry stays valid (0 = always stat)
        """
        self.ttl = ttl
        self._entries: Dict[str, Tuple[float, Optional[int]]] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.monotonic()

    def exists(self, path: PathLike) -> bool:
        """Check whether anything exists at path."""
        return self._mode(path) is not None

    def is_file(self, path: PathLike) -> bool:
        """Check whether path is a regular file."""
        mode = self._mode(path)
        return mode is not None and stat.S_ISREG(mode)

    def is_directory(self, path: PathLike) -> bool:
        """Check whether path is a directory."""
        mode = self._mode(path)
        return mode is not None and stat.S_ISDIR(mode)

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        """Drop one entry, or everything if path is None."""
        with self._lock:
            if path is None:
                logger.debug(f"Clearing {len(self._entries)} stat cache entries")
                self._entries.clear()
            else:
                self._entries.pop(os.fspath(path), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _mode(self, path: PathLike) -> Optional[int]:
        key = os.fspath(path)
        now = time.monotonic()

        if self.ttl > 0:
            with self._lock:
                entry = self._entries.get(key)
            if entry is not None and now - entry[0] < self.ttl:
                return entry[1]

        mode = _stat_mode(key)

        if self.ttl > 0:
            with self._lock:
                if now - self._last_sweep >= self.ttl:
                    self._sweep(now)
                self._entries[key] = (now, mode)
        return mode

    def _sweep(self, now: float) -> None:
        # caller holds self._lock
        expired = [key for key, (checked, _) in self._entries.items() if now - checked >= self.ttl]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Dropped {len(expired)} expired stat cache entries")


def _stat_mode(path: str) -> Optional[int]:
    """``st_mode`` of path, or None when no file can exist there."""
    try:
        return os.stat(path).st_mode
    except (FileNotFoundError, NotADirectoryError):
        # NotADirectoryError: a path component is a plain file
        return None
    except ValueError:
        # embedded NUL byte
        return None
    except OSError as e:
        if e.errno in (errno.ENAMETOOLONG, errno.ELOOP):
            return None
        raise
