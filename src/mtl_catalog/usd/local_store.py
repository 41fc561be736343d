"""Asset store backed by a project directory on disk."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from ..core.exceptions import FileSystemError, ValidationError
from ..core.filesystem import DefaultFileSystem, FileSystem
from ..core.interfaces import AssetKind
from ..core.paths import file_extension, file_name, join_path, normalize_path
from ..core.settings import HostCapabilities
from ..core.target_material import DEFAULT_SHADER, TargetMaterial, TextureResource
from .material_writer import read_material, write_material


logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".tga", ".tif", ".tiff", ".exr", ".psd", ".bmp"}
)
MODEL_EXTENSIONS = frozenset({".fbx"})
MATERIAL_EXTENSIONS = frozenset({".usda", ".usd"})
TEXT_EXTENSIONS = frozenset({".xml", ".txt", ".json"})

LABELS_FILENAME = "mtl_catalog_labels.json"

_KIND_EXTENSIONS = {
    AssetKind.TEXTURE: IMAGE_EXTENSIONS,
    AssetKind.MODEL: MODEL_EXTENSIONS,
    AssetKind.MATERIAL: MATERIAL_EXTENSIONS,
    AssetKind.TEXT: TEXT_EXTENSIONS,
}


class ImportRequests(Protocol):
    """The part of an import subsystem the store forwards requests to."""

    def request_import(self, path: str, force_update: bool = False) -> None:
        ...

    def is_pending(self, path: str) -> bool:
        ...


class LocalAssetStore:
    """Serve project-relative asset paths from a directory tree.

    An asset counts as imported when its file exists and no import for it is
    outstanding in the attached import subsystem. Materials are cached so
    every lookup returns the same object, and dirty materials are written
    back on ``refresh``.

    Args:
        project_root: Directory project paths are relative to.
        fs: File system implementation.
        pipeline: Import subsystem receiving import requests.
        shaders: Shading templates the host provides.
        capabilities: Host features.
    """

    def __init__(
        self,
        project_root: Path,
        fs: Optional[FileSystem] = None,
        pipeline: Optional[ImportRequests] = None,
        shaders: Iterable[str] = (DEFAULT_SHADER,),
        capabilities: Optional[HostCapabilities] = None,
    ) -> None:
        self._fs = fs or DefaultFileSystem()
        self.root = self._fs.ensure_directory(Path(project_root)).resolve()
        self.pipeline = pipeline
        self._shaders = set(shaders)
        self._capabilities = capabilities or HostCapabilities()
        self._materials: Dict[str, TargetMaterial] = {}
        self._material_paths: Dict[str, TargetMaterial] = {}

    @property
    def capabilities(self) -> HostCapabilities:
        return self._capabilities

    @property
    def labels_file(self) -> Path:
        return self.root / LABELS_FILENAME

    def _absolute(self, path: str) -> Path:
        return self._fs.validate_path(self.root / normalize_path(path), self.root)

    def _key(self, path: str) -> str:
        return normalize_path(path).casefold()

    def _is_pending(self, path: str) -> bool:
        return self.pipeline is not None and self.pipeline.is_pending(path)

    def _is_file(self, path: str) -> bool:
        try:
            return self._absolute(path).is_file()
        except ValidationError:
            return False

    def relative_path(self, path: Path) -> str:
        return Path(path).resolve().relative_to(self.root).as_posix()

    def project_path(self, path: str) -> str:
        return normalize_path(str(self.root / normalize_path(path)))

    def find_asset(self, path: str, kind: AssetKind) -> Optional[Any]:
        if not path or file_extension(path) not in _KIND_EXTENSIONS[kind]:
            return None
        if kind is AssetKind.MATERIAL:
            return self._load_material(path)
        if not self._is_file(path) or self._is_pending(path):
            return None
        if kind is AssetKind.TEXTURE:
            return TextureResource(normalize_path(path))
        if kind is AssetKind.TEXT:
            return self._fs.read_text(self._absolute(path))
        return normalize_path(path)

    def _load_material(self, path: str) -> Optional[TargetMaterial]:
        key = self._key(path)
        cached = self._materials.get(key)
        if cached is not None:
            return cached
        if not self._is_file(path):
            return None
        material = read_material(self._absolute(path))
        self._cache_material(path, material)
        return material

    def _cache_material(self, path: str, material: TargetMaterial) -> None:
        self._materials[self._key(path)] = material
        self._material_paths[normalize_path(path)] = material

    def search_assets(self, filename: str, kind: AssetKind) -> List[str]:
        wanted = file_name(filename).casefold()
        matches = []
        for candidate in sorted(self.root.rglob("*")):
            if candidate.name.casefold() != wanted or not candidate.is_file():
                continue
            relative = self.relative_path(candidate)
            if self.find_asset(relative, kind) is not None:
                matches.append(relative)
        return matches

    def create_asset(self, resource: Any, path: str) -> None:
        if not isinstance(resource, TargetMaterial):
            raise ValidationError(
                "Only materials can be created as assets",
                details={"path": path, "type": type(resource).__name__},
            )
        self._cache_material(path, resource)
        write_material(resource, self._absolute(path))
        logger.debug("Created material asset %s", path)

    def create_folder(self, parent: str, name: str) -> str:
        folder = join_path(parent, name)
        self._fs.ensure_directory(self._absolute(folder))
        return folder

    def is_valid_folder(self, path: str) -> bool:
        try:
            return self._absolute(path).is_dir()
        except ValidationError:
            return False

    def import_asset(self, path: str, force_update: bool = False) -> None:
        logger.debug("Import requested for %s (force=%s)", path, force_update)
        if self.pipeline is not None:
            self.pipeline.request_import(normalize_path(path), force_update)

    def copy_file(self, source: str, destination: str) -> None:
        self._fs.copy_file(Path(source), self._absolute(destination))

    def external_file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def find_shader(self, name: str) -> Optional[str]:
        return name if name in self._shaders else None

    def _read_labels(self) -> Dict[str, List[str]]:
        if not self._fs.path_exists(self.labels_file):
            return {}
        data = self._fs.read_json(self.labels_file)
        if not isinstance(data, dict):
            logger.warning(
                "Labels file %s does not hold an object; ignoring it.", self.labels_file
            )
            return {}
        return data

    def get_labels(self, path: str) -> Sequence[str]:
        try:
            labels = self._read_labels()
        except FileSystemError as exc:
            logger.warning("Ignoring unreadable labels file: %s", exc)
            return []
        entry = labels.get(self._key(path), [])
        if not isinstance(entry, list):
            return []
        return [label for label in entry if isinstance(label, str)]

    def set_labels(self, path: str, labels: Sequence[str]) -> None:
        data = self._read_labels()
        data[self._key(path)] = list(labels)
        self._fs.write_json(self.labels_file, data)

    def refresh(self) -> None:
        for path, material in list(self._material_paths.items()):
            if material.dirty:
                write_material(material, self._absolute(path))
                logger.debug("Saved material asset %s", path)
