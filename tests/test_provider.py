"""
Tests for FsResourceProvider and the resource types it returns.

Tests focus on behavior:
- Path normalization and error handling
- Child listing distinguishes "leaf" from "missing"
- Tree walking order and depth limits
- Resource info dictionaries
"""

import pytest

from vaultfs import (
    ContentFileResource,
    FileResource,
    FsResourceProvider,
    NotFoundError,
    PathError,
    ProviderConfig,
    ResourceType,
)
from vaultfs.provider import normalize_path

NAMESPACES = (
    'xmlns:jcr="http://www.jcp.org/jcr/1.0" '
    'xmlns:sling="http://sling.apache.org/jcr/sling/1.0"'
)


@pytest.fixture
def package(tmp_path):
    """Create a small FileVault package.

    Structure:
        jcr_root/
        ├── apps/
        │   └── site/
        │       ├── .content.xml    (declares jcr:content, components)
        │       ├── components/
        │       │   └── page.html
        │       └── private/
        │           └── secret.txt
        └── content/
            └── home.xml            (declares jcr:content/par)
        META-INF/vault/filter.xml   (excludes /apps/site/private)
    """
    root = tmp_path / "jcr_root"
    (root / "apps" / "site" / "components").mkdir(parents=True)
    (root / "apps" / "site" / "private").mkdir()
    (root / "content").mkdir()

    (root / "apps" / "site" / ".content.xml").write_text(
        f'<jcr:root {NAMESPACES} jcr:primaryType="sling:Folder">'
        '<jcr:content jcr:title="Site" sling:resourceType="site/home"/>'
        '<components/>'
        '</jcr:root>'
    )
    (root / "apps" / "site" / "components" / "page.html").write_text("<html/>")
    (root / "apps" / "site" / "private" / "secret.txt").write_text("secret")
    (root / "content" / "home.xml").write_text(
        f'<jcr:root {NAMESPACES} jcr:primaryType="cq:Page">'
        '<jcr:content jcr:title="Home"><par sling:resourceType="site/par"/></jcr:content>'
        '</jcr:root>'
    )

    filter_xml = tmp_path / "META-INF" / "vault" / "filter.xml"
    filter_xml.parent.mkdir(parents=True)
    filter_xml.write_text(
        '<workspaceFilter version="1.0">'
        '<filter root="/apps/site"><exclude pattern="/apps/site/private(/.*)?"/></filter>'
        '<filter root="/content"/>'
        '</workspaceFilter>'
    )
    return root, filter_xml


@pytest.fixture
def provider(package):
    root, filter_xml = package
    return FsResourceProvider(ProviderConfig(
        provider_root=str(root),
        filter_xml=str(filter_xml),
        stat_cache_ttl=0,
    ))


class TestNormalizePath:
    """Test logical path normalization."""

    def test_trailing_slash_removed(self):
        assert normalize_path("/apps/site/") == "/apps/site"

    def test_root(self):
        assert normalize_path("/") == "/"

    def test_dot_segments(self):
        assert normalize_path("/apps/./site/../other") == "/apps/other"

    def test_duplicate_slashes(self):
        assert normalize_path("/apps//site") == "/apps/site"

    def test_relative_path_rejected(self):
        with pytest.raises(PathError):
            normalize_path("apps/site")

    def test_empty_path_rejected(self):
        with pytest.raises(PathError):
            normalize_path("")

    def test_escaping_root_rejected(self):
        with pytest.raises(PathError):
            normalize_path("/..")


class TestGetResource:
    """Test single resource lookup through the provider."""

    def test_content_resource(self, provider):
        resource = provider.get_resource("/apps/site/jcr:content/")

        assert isinstance(resource, ContentFileResource)
        assert resource.path == "/apps/site/jcr:content"
        assert resource.name == "jcr:content"
        assert resource.parent_path == "/apps/site"
        assert resource.properties["jcr:title"] == "Site"
        assert resource.resource_type_name == "site/home"

    def test_file_resource(self, provider):
        resource = provider.get_resource("/apps/site/components/page.html")

        assert isinstance(resource, FileResource)
        assert resource.size == len("<html/>")
        assert resource.read_bytes() == b"<html/>"

    def test_excluded_resource(self, provider):
        assert provider.get_resource("/apps/site/private/secret.txt") is None

    def test_same_name_descriptor(self, provider):
        resource = provider.get_resource("/content/home/jcr:content/par")

        assert isinstance(resource, ContentFileResource)

    def test_missing_resource(self, provider):
        assert provider.get_resource("/apps/nothing") is None


class TestListChildren:
    """Test child listing through the provider."""

    def test_children(self, provider):
        children = provider.list_children("/apps/site")

        assert [c.name for c in children] == ["jcr:content", "components"]

    def test_leaf_has_empty_children(self, provider):
        assert provider.list_children("/apps/site/components/page.html") == []

    def test_missing_parent_raises(self, provider):
        with pytest.raises(NotFoundError):
            provider.list_children("/apps/nothing")

    def test_excluded_parent_raises(self, provider):
        with pytest.raises(NotFoundError):
            provider.list_children("/apps/site/private")


class TestWalk:
    """Test depth-first tree walking."""

    def test_walk_order(self, provider):
        walked = [(depth, r.path) for depth, r in provider.walk("/apps")]

        assert walked == [
            (0, "/apps"),
            (1, "/apps/site"),
            (2, "/apps/site/jcr:content"),
            (2, "/apps/site/components"),
            (3, "/apps/site/components/page.html"),
        ]

    def test_walk_depth_limit(self, provider):
        walked = [r.path for _, r in provider.walk("/apps", max_depth=1)]

        assert walked == ["/apps", "/apps/site"]

    def test_walk_missing_start(self, provider):
        with pytest.raises(NotFoundError):
            list(provider.walk("/nothing"))


class TestResourceInfo:
    """Test info dictionaries used for display."""

    def test_folder_info(self, provider):
        info = provider.get_resource("/apps").get_info()

        assert info["type"] == "folder"
        assert info["path"] == "/apps"
        assert info["size"] is None

    def test_content_info(self, provider):
        info = provider.get_resource("/apps/site").get_info()

        assert info["type"] == ResourceType.CONTENT.value
        assert info["resource_type"] == "sling:Folder"
        assert info["file"].endswith(".content.xml")

    def test_root_resource_name(self, provider):
        root = provider.get_resource("/")

        assert root.name == ""
        assert root.parent_path is None

    def test_folder_read_bytes_fails(self, provider):
        with pytest.raises(IsADirectoryError):
            provider.get_resource("/apps").read_bytes()


class TestRefresh:
    """Test cache refresh."""

    def test_refresh_picks_up_new_content(self, package):
        root, filter_xml = package
        provider = FsResourceProvider(ProviderConfig(
            provider_root=str(root),
            filter_xml=str(filter_xml),
            stat_cache_ttl=3600,
        ))
        assert provider.get_resource("/content/new.txt") is None

        (root / "content" / "new.txt").write_text("new")
        assert provider.get_resource("/content/new.txt") is None

        provider.refresh()
        assert provider.get_resource("/content/new.txt") is not None
