"""Resource mapping between a FileVault folder and the virtual tree."""

from vaultfs.mapper.content_file import ContentFile
from vaultfs.mapper.workspace_filter import (
    FilterConfigurationError,
    FilterRule,
    PathFilterSet,
    WorkspaceFilter,
)
from vaultfs.mapper.file_vault_mapper import FileVaultResourceMapper, get_parent_path, join_path

__all__ = [
    "ContentFile",
    "FilterConfigurationError",
    "FilterRule",
    "PathFilterSet",
    "WorkspaceFilter",
    "FileVaultResourceMapper",
    "get_parent_path",
    "join_path",
]
