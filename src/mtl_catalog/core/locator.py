"""Find imported texture resources or stage external images for import."""

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Optional, Sequence

from .exceptions import FileSystemError, ValidationError
from .interfaces import AssetKind, AssetStore
from .paths import TEXTURE_DIRNAME, file_name, join_path, normalize_path, paths_match
from .target_material import TextureResource


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocatedTexture:
    """Outcome of a locator lookup.

    Attributes:
        path: Canonical project path of the texture, None when nothing was found.
        resource: The imported resource, None while an import is outstanding.
    """

    path: Optional[str] = None
    resource: Optional[TextureResource] = None

    @property
    def found(self) -> bool:
        return self.path is not None

    @property
    def deferred(self) -> bool:
        return self.path is not None and self.resource is None


NOT_FOUND = LocatedTexture()


class ResourceLocator:
    """Map desired image filenames onto project texture resources.

    Args:
        store: Host asset store.
        texture_dirname: Conventional texture folder name.
    """

    def __init__(self, store: AssetStore, texture_dirname: str = TEXTURE_DIRNAME) -> None:
        self._store = store
        self._texture_dirname = texture_dirname

    def find_existing(
        self, filename: str, search_paths: Sequence[str]
    ) -> Optional[TextureResource]:
        """Find an imported texture by filename.

        Each search directory's texture folder is tried nearest first, then
        the whole project.
        """
        for directory in search_paths:
            candidate = join_path(directory, self._texture_dirname, filename)
            texture = self._store.find_asset(candidate, AssetKind.TEXTURE)
            if texture is not None:
                return texture

        for candidate in self._store.search_assets(filename, AssetKind.TEXTURE):
            texture = self._store.find_asset(candidate, AssetKind.TEXTURE)
            if texture is not None:
                return texture
        return None

    def stage_external(
        self, filename: str, texture_root: Optional[str], owner_directory: str
    ) -> Optional[str]:
        """Copy an external image into ``<owner>/Textures`` and request import.

        Returns:
            Optional[str]: The staged project path, or None when the external
            file does not exist or could not be copied.
        """
        if not texture_root:
            return None
        external_path = normalize_path(str(Path(texture_root) / filename))
        if not self._store.external_file_exists(external_path):
            logger.debug("External texture not found: %s", external_path)
            return None

        try:
            textures_dir = join_path(owner_directory, self._texture_dirname)
            if not self._store.is_valid_folder(textures_dir):
                textures_dir = self._store.create_folder(
                    owner_directory, self._texture_dirname
                )
            staged_path = join_path(textures_dir, file_name(filename))

            if paths_match(external_path, self._store.project_path(staged_path)):
                logger.debug(
                    "External texture %s is already the staged file; skipping copy.",
                    external_path,
                )
            else:
                self._store.copy_file(external_path, staged_path)
            self._store.import_asset(staged_path, force_update=True)
        except (FileSystemError, ValidationError) as exc:
            logger.warning("Failed to stage texture %s: %s", external_path, exc)
            return None
        return staged_path

    def locate(
        self,
        filename: str,
        search_paths: Sequence[str],
        texture_root: Optional[str],
        owner_directory: str,
        force: bool = False,
    ) -> LocatedTexture:
        """Resolve a texture filename to an existing or staged resource.

        Args:
            filename: Filename from the catalog, possibly with directories.
            search_paths: Directories from the owning asset up to the project root.
            texture_root: Absolute directory external filenames are relative to.
            owner_directory: Directory of the owning asset.
            force: Re-stage the external file even when a project copy exists.

        Returns:
            LocatedTexture: Existing resource, deferred staged path, or nothing.
        """
        if not filename:
            return NOT_FOUND

        existing = self.find_existing(file_name(filename), search_paths)
        if existing is not None and not force:
            return LocatedTexture(normalize_path(existing.path), existing)

        staged = self.stage_external(filename, texture_root, owner_directory)
        if staged is not None:
            return LocatedTexture(staged, None)

        if existing is not None:
            return LocatedTexture(normalize_path(existing.path), existing)
        return NOT_FOUND
