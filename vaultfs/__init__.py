"""Read-only resource tree over a FileVault content folder.

vaultfs maps a folder laid out the way FileVault packages store content
(``jcr_root/``) onto a virtual tree of resources. Some resources are
plain files and folders; others live inside XML descriptors:

    ```
    jcr_root/
    ├── apps/
    │   └── site/
    │       ├── .content.xml        # properties + children of /apps/site
    │       ├── script.js           # plain file /apps/site/script.js
    │       └── logo.png
    └── content/
        ├── site.xml                # descriptor for /content/site
        └── site/
            └── en/
                └── .content.xml    # /content/site/en and its jcr:content
    ```

Resolution:

    - A plain file wins over descriptor content at the same path
    - Descriptor content wins over a plain folder
    - A node missing its own descriptor is looked up inside the nearest
      ancestor descriptor
    - ``.content.xml`` and ``.dir`` entries are never resources
    - An optional workspace filter (filter.xml) hides everything it
      does not include

Usage Example:

    ```python
    from vaultfs import FsResourceProvider, ProviderConfig

    provider = FsResourceProvider(ProviderConfig(
        provider_root="/work/package/jcr_root",
        filter_xml="/work/package/META-INF/vault/filter.xml",
    ))

    page = provider.get_resource("/content/site/en/jcr:content")
    print(page.properties["jcr:title"])

    for child in provider.list_children("/content/site"):
        print(child.path, child.resource_type.value)
    ```
"""

from vaultfs.config import ProviderConfig, VaultFsConfig, load_config
from vaultfs.mapper import ContentFile, FileVaultResourceMapper, WorkspaceFilter
from vaultfs.parser import ContentElement, ContentFileCache
from vaultfs.provider import FsResourceProvider, NotFoundError, PathError
from vaultfs.resource import ContentFileResource, FileResource, Resource, ResourceType
from vaultfs.stat_cache import FileStatCache

__version__ = "0.1.0"

__all__ = [
    # Main entry point
    "FsResourceProvider",
    "ProviderConfig",
    "VaultFsConfig",
    "load_config",
    # Core
    "FileVaultResourceMapper",
    "ContentFile",
    "WorkspaceFilter",
    "ContentElement",
    "ContentFileCache",
    "FileStatCache",
    # Resources
    "Resource",
    "ResourceType",
    "FileResource",
    "ContentFileResource",
    # Errors
    "PathError",
    "NotFoundError",
]
