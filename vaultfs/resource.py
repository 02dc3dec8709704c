"""Resource types returned by the resource mapper.

A resource is a node of the virtual tree:
    - FileResource: backed by a plain file or folder on disk
    - ContentFileResource: backed by a node inside a descriptor file
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from vaultfs.stat_cache import FileStatCache

if TYPE_CHECKING:
    from vaultfs.mapper.content_file import ContentFile
    from vaultfs.mapper.file_vault_mapper import FileVaultResourceMapper


class ResourceType(Enum):
    """Kind of resource."""
    FILE = "file"
    FOLDER = "folder"
    CONTENT = "content"


class Resource(ABC):
    """Base class for all resources.

    Attributes:
        path: Absolute logical path (e.g. /content/site/jcr:content)
        resolver: Mapper that produced this resource (used for child lookup)
        resource_type: File, folder or content
    """

    def __init__(
        self,
        resolver: "FileVaultResourceMapper",
        path: str,
        resource_type: ResourceType,
    ):
        self.resolver = resolver
        self.path = path
        self.resource_type = resource_type

    @property
    def name(self) -> str:
        """Last path segment ("" for the root)."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent_path(self) -> Optional[str]:
        """Logical path of the parent, or None for the root."""
        if self.path == "/":
            return None
        parent = self.path.rsplit("/", 1)[0]
        return parent or "/"

    def list_children(self) -> List["Resource"]:
        """List children resources.

        Returns:
            Children in resolution order (empty if there are none)
        """
        children = self.resolver.children(self.path)
        return list(children) if children is not None else []

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Get metadata about this resource for display."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path='{self.path}')"


class FileResource(Resource):
    """A plain file or folder on disk."""

    def __init__(
        self,
        resolver: "FileVaultResourceMapper",
        path: str,
        file: Path,
        stat_cache: FileStatCache,
    ):
        """Initialize a file resource.

        Args:
            resolver: Owning mapper
            path: Logical path
            file: File or folder on disk
            stat_cache: Stat cache used for type checks
        """
        self.file = file
        self._stat_cache = stat_cache
        resource_type = ResourceType.FOLDER if stat_cache.is_directory(file) else ResourceType.FILE
        super().__init__(resolver, path, resource_type)

    def is_directory(self) -> bool:
        return self.resource_type == ResourceType.FOLDER

    @property
    def size(self) -> Optional[int]:
        """File size in bytes (None for folders)."""
        if self.is_directory():
            return None
        return self.file.stat().st_size

    def read_bytes(self) -> bytes:
        """Read the file contents.

        Raises:
            IsADirectoryError: If the resource is a folder
        """
        if self.is_directory():
            raise IsADirectoryError(f"Resource '{self.path}' is a folder")
        return self.file.read_bytes()

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": self.resource_type.value,
            "name": self.name,
            "path": self.path,
            "file": str(self.file),
            "size": self.size,
        }


class ContentFileResource(Resource):
    """A node defined inside a descriptor file."""

    def __init__(self, resolver: "FileVaultResourceMapper", content_file: "ContentFile"):
        """Initialize a content resource.

        Args:
            resolver: Owning mapper
            content_file: Descriptor view positioned at this node
        """
        super().__init__(resolver, content_file.resource_path, ResourceType.CONTENT)
        self.content_file = content_file

    @property
    def properties(self) -> Dict[str, Any]:
        return self.content_file.value_map

    @property
    def primary_type(self) -> Optional[str]:
        return self.properties.get("jcr:primaryType")

    @property
    def resource_type_name(self) -> Optional[str]:
        """``sling:resourceType``, falling back to the primary type."""
        return self.properties.get("sling:resourceType", self.primary_type)

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": self.resource_type.value,
            "name": self.name,
            "path": self.path,
            "file": str(self.content_file.file),
            "resource_type": self.resource_type_name,
            "properties": len(self.properties),
        }
