"""Entry points the host import pipeline calls into.

The host invokes ``assign_material`` once per (model asset, material slot)
while importing a model, ``preprocess_texture``/``postprocess_texture``
around each staged image import, and ``postprocess_all_assets`` after every
batch of asset changes.
"""

from enum import Enum
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .catalog import CatalogDocument, Colorspace
from .catalog_loader import CATALOG_EXTENSION, load_catalog_from_string
from .diagnostics import Diagnostic, log_diagnostics
from .exceptions import MtlCatalogError
from .interfaces import (
    AssetKind,
    AssetStore,
    DeferredCall,
    TextureImportSettings,
    TextureType,
)
from .mapping import NORMAL_MAP_SLOTS, SLOT_MAIN_TEX
from .paths import (
    MATERIAL_DIRNAME,
    file_stem,
    join_path,
    parent_directory,
    search_directories,
    with_extension,
)
from .pending import PendingResourceQueue, ResolvedTextureAssignment
from .reimport import MODEL_EXTENSION, ReimportCoordinator, ReimportReport
from .resolver import MaterialResolver, ResolutionContext
from .settings import HostCapabilities, ImporterSettings
from .target_material import TargetMaterial


logger = logging.getLogger(__name__)

MATERIAL_EXTENSION = ".usda"

Notifier = Callable[[str, str], None]


class MaterialNaming(Enum):
    MATERIAL_NAME = "material_name"
    MODEL_AND_MATERIAL_NAME = "model_and_material_name"
    TEXTURE_NAME = "texture_name"


class MaterialSearch(Enum):
    LOCAL = "local"
    RECURSIVE_UP = "recursive_up"
    EVERYWHERE = "everywhere"


def imported_material_name(
    model_name: str, material: TargetMaterial, naming: MaterialNaming
) -> str:
    """Name of the material asset, following the model's naming setting."""
    if naming is MaterialNaming.MODEL_AND_MATERIAL_NAME:
        return f"{model_name}-{material.name}"
    if naming is MaterialNaming.TEXTURE_NAME:
        main_texture = material.get_texture(SLOT_MAIN_TEX)
        if main_texture is not None:
            return main_texture.name
    return material.name


def locate_material_directory(
    store: AssetStore,
    search_paths: Sequence[str],
    material_file: str,
    search: MaterialSearch,
) -> str:
    """Directory a material asset lives in, or should be created in.

    Args:
        store: Host asset store.
        search_paths: Directories from the model up to the project root.
        material_file: Material asset filename.
        search: The model's material search setting.

    Returns:
        str: The directory holding an existing asset, else the model's
        local ``Materials`` directory.
    """
    asset_directory = search_paths[0] if search_paths else ""
    local_directory = join_path(asset_directory, MATERIAL_DIRNAME)

    if search is MaterialSearch.RECURSIVE_UP:
        for directory in search_paths:
            candidate = join_path(directory, MATERIAL_DIRNAME)
            if store.find_asset(join_path(candidate, material_file), AssetKind.MATERIAL):
                return candidate
    elif search is MaterialSearch.EVERYWHERE:
        for path in store.search_assets(material_file, AssetKind.MATERIAL):
            return parent_directory(path)
    return local_directory


class CatalogMaterialImporter:
    """Drive material resolution and texture backfill for a host.

    Args:
        store: Host asset store.
        queue: Shared pending resource queue.
        settings: Global importer policy.
        capabilities: Host features; defaults to the store's.
        notifier: Receives one aggregated notice per subject.
        scheduler: Defers a call until the host finishes its current import.
            The sweep runs immediately when no scheduler is given.
        model_extension: Extension of model assets.
        material_extension: Extension of material assets.
    """

    def __init__(
        self,
        store: AssetStore,
        queue: Optional[PendingResourceQueue] = None,
        settings: Optional[ImporterSettings] = None,
        capabilities: Optional[HostCapabilities] = None,
        notifier: Optional[Notifier] = None,
        scheduler: Optional[DeferredCall] = None,
        model_extension: str = MODEL_EXTENSION,
        material_extension: str = MATERIAL_EXTENSION,
    ) -> None:
        self.store = store
        self.queue = queue or PendingResourceQueue()
        self.settings = settings or ImporterSettings()
        self.capabilities = capabilities or store.capabilities
        self._notifier = notifier
        self._scheduler = scheduler
        self._material_extension = material_extension
        self.resolver = MaterialResolver(store, self.queue, self.capabilities)
        self.coordinator = ReimportCoordinator(store, model_extension=model_extension)

    def catalog_path_for(self, model_path: str) -> str:
        return with_extension(model_path, CATALOG_EXTENSION)

    def load_catalog(self, path: str) -> Optional[CatalogDocument]:
        return load_catalog_from_string(self.store.find_asset(path, AssetKind.TEXT))

    def texture_root(self, document: CatalogDocument, asset_directory: str) -> str:
        if document.use_root_texture_path and document.root_texture_path:
            return document.root_texture_path
        return self.store.project_path(asset_directory)

    def settings_for(self, catalog_path: str) -> ImporterSettings:
        return self.settings.with_labels(self.store.get_labels(catalog_path))

    def assign_material(
        self,
        model_path: str,
        material: TargetMaterial,
        naming: MaterialNaming = MaterialNaming.MATERIAL_NAME,
        search: MaterialSearch = MaterialSearch.RECURSIVE_UP,
    ) -> Optional[TargetMaterial]:
        """Resolve one material of a model being imported.

        Args:
            model_path: Project path of the model asset.
            material: The host's material for this slot; its name is the
                catalog join key.
            naming: The model's material naming setting.
            search: The model's material search setting.

        Returns:
            Optional[TargetMaterial]: The finalized material, or None to let
            the host fall back to its default material.
        """
        try:
            return self._assign_material(model_path, material, naming, search)
        except MtlCatalogError as exc:
            logger.error(
                "Failed to import material %s for %s: %s", material.name, model_path, exc
            )
            return None
        except Exception:
            logger.exception(
                "Unexpected error importing material %s for %s", material.name, model_path
            )
            return None

    def _assign_material(
        self,
        model_path: str,
        material: TargetMaterial,
        naming: MaterialNaming,
        search: MaterialSearch,
    ) -> Optional[TargetMaterial]:
        catalog_path = self.catalog_path_for(model_path)
        document = self.load_catalog(catalog_path)
        if document is None:
            return None

        settings = self.settings_for(catalog_path)
        asset_directory = parent_directory(model_path)
        search_paths = tuple(search_directories(asset_directory))
        logger.debug("Asset Directory: %s", asset_directory)

        material_name = imported_material_name(file_stem(model_path), material, naming)
        material_file = f"{material_name}{self._material_extension}"
        material_directory = locate_material_directory(
            self.store, search_paths, material_file, search
        )
        material_path = join_path(material_directory, material_file)

        target = material
        existing = self.store.find_asset(material_path, AssetKind.MATERIAL)
        if existing is not None:
            target = existing
            if not settings.always_apply:
                return existing

        context = ResolutionContext(
            asset_directory=asset_directory,
            search_paths=search_paths,
            texture_root=self.texture_root(document, asset_directory),
            force_import=settings.always_import,
        )
        logger.debug("Texture Root Path: %s", context.texture_root)

        result = self.resolver.resolve(target, document, context)
        if result is None:
            return None

        if existing is None:
            if not self.store.is_valid_folder(material_directory):
                self.store.create_folder(asset_directory, MATERIAL_DIRNAME)
            self.store.create_asset(target, material_path)

        self.report(target.name, result.diagnostics)
        return target

    def report(self, subject: str, diagnostics: Sequence[Diagnostic]) -> None:
        notice = log_diagnostics(subject, diagnostics, logger)
        if notice and self._notifier is not None:
            self._notifier(subject, notice)

    def preprocess_texture(self, path: str) -> Optional[TextureImportSettings]:
        """Choose decode settings for a staged image about to be imported.

        Returns:
            Optional[TextureImportSettings]: None when no queued request
            targets ``path``.
        """
        entries: List[ResolvedTextureAssignment] = self.queue.entries_for_path(path)
        if not entries:
            return None
        normal_map = any(entry.target_slot in NORMAL_MAP_SLOTS for entry in entries)
        linear = any(
            entry.resolved_colorspace is Colorspace.LINEAR for entry in entries
        )
        return TextureImportSettings(
            texture_type=TextureType.NORMAL_MAP if normal_map else TextureType.DEFAULT,
            srgb=not linear,
        )

    def postprocess_texture(self, path: str) -> int:
        """Mark queued requests for ``path`` ready and schedule the sweep."""
        transitioned = self.queue.complete(path)
        if not transitioned:
            return 0
        if self._scheduler is not None:
            self._scheduler(self.apply_pending)
        else:
            self.apply_pending()
        return transitioned

    def apply_pending(self) -> List[ResolvedTextureAssignment]:
        return self.queue.apply_ready(self.store)

    def postprocess_all_assets(
        self,
        imported: Iterable[str],
        deleted: Iterable[str] = (),
        moved: Iterable[str] = (),
        moved_from: Iterable[str] = (),
    ) -> ReimportReport:
        """Reimport models whose catalog documents changed in this batch."""
        changed: Tuple[str, ...] = tuple(imported) + tuple(moved)
        report = self.coordinator.on_assets_changed(changed, changed)
        for diagnostic in report.diagnostics:
            self.report(diagnostic.subject, [diagnostic])
        return report
