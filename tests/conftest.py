"""Shared fixtures: an in-memory asset store and catalog builders."""

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from mtl_catalog.core.catalog_loader import load_catalog_from_string
from mtl_catalog.core.exceptions import FileSystemError
from mtl_catalog.core.interfaces import AssetKind
from mtl_catalog.core.paths import file_name, join_path, normalize_path
from mtl_catalog.core.settings import HostCapabilities
from mtl_catalog.core.target_material import TextureResource


PROJECT_ROOT = "/project"


class FakeAssetStore:
    """In-memory asset store recording every request made to it."""

    def __init__(
        self,
        capabilities: Optional[HostCapabilities] = None,
        shaders: Sequence[str] = ("Standard",),
    ) -> None:
        self._capabilities = capabilities or HostCapabilities()
        self.shaders = set(shaders)
        self.textures: Dict[str, TextureResource] = {}
        self.materials: Dict[str, object] = {}
        self.texts: Dict[str, str] = {}
        self.models: Dict[str, str] = {}
        self.folders = set()
        self.external_files = set()
        self.labels: Dict[str, List[str]] = {}
        self.import_requests: List[Tuple[str, bool]] = []
        self.copies: List[Tuple[str, str]] = []
        self.created: List[str] = []
        self.refresh_count = 0
        self.fail_copies = False
        self.fail_folders = False

    @staticmethod
    def _key(path: str) -> str:
        return normalize_path(path).casefold()

    # Test helpers.
    def add_texture(self, path: str) -> TextureResource:
        texture = TextureResource(normalize_path(path))
        self.textures[self._key(path)] = texture
        return texture

    def finish_import(self, path: str) -> TextureResource:
        return self.add_texture(path)

    def add_text(self, path: str, content: str) -> None:
        self.texts[self._key(path)] = content

    def add_model(self, path: str) -> None:
        self.models[self._key(path)] = normalize_path(path)

    def add_material(self, path: str, material) -> None:
        self.materials[self._key(path)] = material
        self.created.append(normalize_path(path))

    def add_external(self, path: str) -> None:
        self.external_files.add(normalize_path(path))

    # AssetStore protocol.
    @property
    def capabilities(self) -> HostCapabilities:
        return self._capabilities

    def project_path(self, path: str) -> str:
        return join_path(PROJECT_ROOT, path)

    def find_asset(self, path: str, kind: AssetKind):
        key = self._key(path)
        if kind is AssetKind.TEXTURE:
            return self.textures.get(key)
        if kind is AssetKind.MATERIAL:
            return self.materials.get(key)
        if kind is AssetKind.TEXT:
            return self.texts.get(key)
        return self.models.get(key)

    def search_assets(self, filename: str, kind: AssetKind) -> List[str]:
        pools = {
            AssetKind.TEXTURE: [t.path for t in self.textures.values()],
            AssetKind.MODEL: list(self.models.values()),
            AssetKind.MATERIAL: list(self.created),
        }
        wanted = file_name(filename).casefold()
        return sorted(
            path for path in pools.get(kind, []) if file_name(path).casefold() == wanted
        )

    def create_asset(self, resource, path: str) -> None:
        self.materials[self._key(path)] = resource
        self.created.append(normalize_path(path))

    def create_folder(self, parent: str, name: str) -> str:
        if self.fail_folders:
            raise FileSystemError("cannot create folder", details={"parent": parent})
        folder = join_path(parent, name)
        self.folders.add(self._key(folder))
        return folder

    def is_valid_folder(self, path: str) -> bool:
        return self._key(path) in self.folders

    def import_asset(self, path: str, force_update: bool = False) -> None:
        self.import_requests.append((normalize_path(path), force_update))

    def copy_file(self, source: str, destination: str) -> None:
        if self.fail_copies:
            raise FileSystemError("copy failed", details={"source": source})
        self.copies.append((normalize_path(source), normalize_path(destination)))

    def external_file_exists(self, path: str) -> bool:
        return normalize_path(path) in self.external_files

    def find_shader(self, name: str) -> Optional[str]:
        return name if name in self.shaders else None

    def get_labels(self, path: str) -> List[str]:
        return list(self.labels.get(self._key(path), []))

    def set_labels(self, path: str, labels: Sequence[str]) -> None:
        self.labels[self._key(path)] = list(labels)

    def refresh(self) -> None:
        self.refresh_count += 1


def catalog_xml(
    materials: str,
    images: str = "",
    root_path: Optional[str] = None,
) -> str:
    """Wrap material and image elements in a catalog document."""
    root = ""
    if root_path is not None:
        root = f"<useRootPath>1</useRootPath><RootPath>{root_path}</RootPath>"
    return (
        "<catalog>"
        f"{root}"
        '<Version app="modo" build="1234" appVersion="16.1">2</Version>'
        f"{images}{materials}"
        "</catalog>"
    )


@pytest.fixture
def store():
    return FakeAssetStore()


@pytest.fixture
def store_factory():
    return FakeAssetStore


@pytest.fixture
def make_document():
    def _make(materials: str, images: str = "", root_path: Optional[str] = None):
        document = load_catalog_from_string(catalog_xml(materials, images, root_path))
        assert document is not None
        return document

    return _make


@pytest.fixture
def make_catalog_text():
    return catalog_xml
