"""Interfaces consumed from the host asset store and import subsystem."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Sequence

from .settings import HostCapabilities


class AssetKind(Enum):
    TEXTURE = "texture"
    MATERIAL = "material"
    MODEL = "model"
    TEXT = "text"


class TextureType(Enum):
    DEFAULT = "default"
    NORMAL_MAP = "normal_map"


@dataclass(frozen=True)
class TextureImportSettings:
    """Decode configuration chosen before a staged image is imported.

    Attributes:
        texture_type: Plain image or normal map.
        srgb: Whether the image is decoded as sRGB colour data.
    """

    texture_type: TextureType = TextureType.DEFAULT
    srgb: bool = True


DeferredCall = Callable[[Callable[[], None]], None]


class AssetStore(Protocol):
    """Protocol for the host asset store.

    Paths are project-relative with forward slashes. Absolute paths are only
    used for files outside the project (``copy_file`` sources).
    """

    @property
    def capabilities(self) -> HostCapabilities:
        ...

    def project_path(self, path: str) -> str:
        """Return the absolute filesystem path of a project-relative path."""
        ...

    def find_asset(self, path: str, kind: AssetKind) -> Optional[Any]:
        """Return the imported asset at ``path`` or None.

        Textures are returned as ``TextureResource``, materials as
        ``TargetMaterial``, text assets as ``str``, models as their path.
        """
        ...

    def search_assets(self, filename: str, kind: AssetKind) -> List[str]:
        """Return project paths of imported assets with this filename."""
        ...

    def create_asset(self, resource: Any, path: str) -> None:
        ...

    def create_folder(self, parent: str, name: str) -> str:
        """Create ``parent/name`` and return its path."""
        ...

    def is_valid_folder(self, path: str) -> bool:
        ...

    def import_asset(self, path: str, force_update: bool = False) -> None:
        """Ask the import subsystem to (re)import ``path``."""
        ...

    def copy_file(self, source: str, destination: str) -> None:
        """Copy an external file to a project path, replacing it."""
        ...

    def external_file_exists(self, path: str) -> bool:
        ...

    def find_shader(self, name: str) -> Optional[str]:
        ...

    def get_labels(self, path: str) -> Sequence[str]:
        ...

    def set_labels(self, path: str, labels: Sequence[str]) -> None:
        ...

    def refresh(self) -> None:
        """Persist dirty assets and rescan the project."""
        ...
