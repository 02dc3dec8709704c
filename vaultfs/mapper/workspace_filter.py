"""FileVault workspace filter (``META-INF/vault/filter.xml``).

Example:

    ```xml
    <workspaceFilter version="1.0">
        <filter root="/apps/site">
            <exclude pattern="/apps/site/private(/.*)?"/>
        </filter>
        <filter root="/content/site"/>
    </workspaceFilter>
    ```

A path is contained if any filter set contains it. Within a set, a path
must lie at or below the root; the include/exclude rules are then
applied in order and the last matching rule decides.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Pattern, Union

from lxml import etree

logger = logging.getLogger(__name__)


class FilterConfigurationError(Exception):
    """Workspace filter file is malformed."""
    pass


class FilterRule:
    """An include or exclude pattern."""

    def __init__(self, pattern: str, include: bool):
        self.pattern = pattern
        self.include = include
        try:
            self._regex: Pattern[str] = re.compile(pattern)
        except re.error as e:
            raise FilterConfigurationError(f"Invalid filter pattern '{pattern}': {e}") from e

    def matches(self, path: str) -> bool:
        return self._regex.fullmatch(path) is not None

    def __repr__(self) -> str:
        kind = "include" if self.include else "exclude"
        return f"{self.__class__.__name__}({kind}={self.pattern!r})"


def _is_descendant_or_equal(root: str, path: str) -> bool:
    if root == "/" or root == path:
        return True
    return path.startswith(root + "/")


class PathFilterSet:
    """Filter rules scoped to one root path."""

    def __init__(self, root: str, mode: str = "replace", rules: Optional[List[FilterRule]] = None):
        self.root = root.rstrip("/") or "/"
        self.mode = mode
        self.rules: List[FilterRule] = rules or []

    def covers(self, path: str) -> bool:
        """Check whether path is at or below the root."""
        return _is_descendant_or_equal(self.root, path)

    def contains(self, path: str) -> bool:
        """Check whether path is covered and passes the rules."""
        if not self.covers(path):
            return False
        if not self.rules:
            return True
        result = not self.rules[0].include
        for rule in self.rules:
            if rule.matches(path):
                result = rule.include
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root={self.root!r}, rules={self.rules!r})"


class WorkspaceFilter:
    """Set of PathFilterSets loaded from a filter.xml file."""

    def __init__(self, filter_sets: Optional[List[PathFilterSet]] = None):
        self.filter_sets: List[PathFilterSet] = filter_sets or []

    @classmethod
    def load(cls, source: Union[str, Path]) -> "WorkspaceFilter":
        """Load a workspace filter from a filter.xml file.

        Args:
            source: Path to filter.xml

        Returns:
            Parsed WorkspaceFilter

        Raises:
            FilterConfigurationError: If the document is not a valid filter
            OSError: If the file cannot be read
        """
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.parse(str(source), parser).getroot()
        except etree.XMLSyntaxError as e:
            raise FilterConfigurationError(f"Malformed filter file {source}: {e}") from e

        if etree.QName(root).localname != "workspaceFilter":
            raise FilterConfigurationError(
                f"Expected <workspaceFilter> root element in {source}, "
                f"got <{etree.QName(root).localname}>"
            )

        filter_sets = []
        for filter_elem in root.iterchildren("filter"):
            root_path = filter_elem.get("root")
            if not root_path:
                raise FilterConfigurationError(f"<filter> without root attribute in {source}")
            rules = []
            for rule_elem in filter_elem:
                if rule_elem.tag not in ("include", "exclude"):
                    continue
                pattern = rule_elem.get("pattern")
                if pattern is None:
                    raise FilterConfigurationError(
                        f"<{rule_elem.tag}> without pattern attribute in {source}"
                    )
                rules.append(FilterRule(pattern, include=rule_elem.tag == "include"))
            filter_sets.append(PathFilterSet(root_path, filter_elem.get("mode", "replace"), rules))

        logger.debug(f"Loaded {len(filter_sets)} filter sets from {source}")
        return cls(filter_sets)

    def contains(self, path: str) -> bool:
        """Check whether any filter set contains path."""
        return any(filter_set.contains(path) for filter_set in self.filter_sets)

    def covers(self, path: str) -> bool:
        """Check whether any filter set root covers path."""
        return any(filter_set.covers(path) for filter_set in self.filter_sets)

    def is_ancestor(self, path: str) -> bool:
        """Check whether path is a strict ancestor of any filter root."""
        prefix = "/" if path == "/" else path + "/"
        return any(filter_set.root != path and filter_set.root.startswith(prefix)
                   for filter_set in self.filter_sets)
