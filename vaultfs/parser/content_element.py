"""In-memory tree built from a parsed descriptor file."""

from typing import Any, Dict, Iterator, Optional, Tuple


class ContentElement:
    """One node of a descriptor's content tree.

    Children keep their declaration order, which is the order
    resources are listed in.

    Attributes:
        name: Node name (None for the descriptor root)
        properties: Property name -> decoded value
        children: Ordered child name -> ContentElement
    """

    def __init__(
        self,
        name: Optional[str] = None,
        properties: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.properties: Dict[str, Any] = properties or {}
        self.children: Dict[str, "ContentElement"] = {}

    def add_child(self, child: "ContentElement") -> None:
        """Append a child. A repeated name replaces the earlier node in place."""
        self.children[child.name] = child

    def get_child(self, relative_path: str) -> Optional["ContentElement"]:
        """Navigate to a descendant.

        Args:
            relative_path: ``/``-separated path below this element

        Returns:
            Descendant element or None if any segment is missing
        """
        element: Optional[ContentElement] = self
        for segment in relative_path.split("/"):
            if not segment:
                continue
            element = element.children.get(segment)
            if element is None:
                return None
        return element

    def iter_children(self) -> Iterator[Tuple[str, "ContentElement"]]:
        """Iterate (name, element) pairs in declaration order."""
        return iter(list(self.children.items()))

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(name={self.name!r}, "
                f"properties={len(self.properties)}, children={len(self.children)})")
