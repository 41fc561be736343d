"""Propagate catalog document edits to their mesh assets."""

from dataclasses import dataclass, field
import logging
from typing import Callable, Iterable, List, Optional

from .catalog import CatalogDocument
from .catalog_loader import CATALOG_EXTENSION, load_catalog_from_string
from .diagnostics import Diagnostic, DiagnosticKind
from .exceptions import FileSystemError
from .interfaces import AssetKind, AssetStore
from .paths import file_extension, normalize_path, paths_match, with_extension


logger = logging.getLogger(__name__)

MODEL_EXTENSION = ".fbx"

CatalogReader = Callable[[str], Optional[CatalogDocument]]


@dataclass
class ReimportReport:
    """What a batch notification led to.

    Attributes:
        reimported: Model paths a reimport was requested for.
        skipped: Model paths already part of the batch.
        diagnostics: Catalogs without a matching model.
    """

    reimported: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class ReimportCoordinator:
    """Request a model reimport when its catalog document changes.

    Args:
        store: Host asset store.
        model_extension: Extension of the sibling model asset.
        catalog_extension: Extension of catalog documents.
        reader: Optional catalog reader; reads text assets from the store by default.
    """

    def __init__(
        self,
        store: AssetStore,
        model_extension: str = MODEL_EXTENSION,
        catalog_extension: str = CATALOG_EXTENSION,
        reader: Optional[CatalogReader] = None,
    ) -> None:
        self._store = store
        self._model_extension = model_extension
        self._catalog_extension = catalog_extension
        self._reader = reader or self._read_catalog

    def _read_catalog(self, path: str) -> Optional[CatalogDocument]:
        try:
            content = self._store.find_asset(path, AssetKind.TEXT)
        except FileSystemError as exc:
            logger.warning("Could not read catalog %s: %s", path, exc)
            return None
        return load_catalog_from_string(content)

    def on_assets_changed(
        self, changed_paths: Iterable[str], batch_paths: Optional[Iterable[str]] = None
    ) -> ReimportReport:
        """Handle a batch of created or modified assets.

        Args:
            changed_paths: Paths that were created or modified.
            batch_paths: Every path in the batch, used to detect models that
                are already being imported. Defaults to ``changed_paths``.

        Returns:
            ReimportReport: Requested reimports, skips and diagnostics.
        """
        changed = [normalize_path(path) for path in changed_paths]
        batch = [normalize_path(path) for path in (batch_paths or changed)]
        report = ReimportReport()
        requested: List[str] = []

        for path in changed:
            if file_extension(path) != self._catalog_extension:
                continue
            if self._reader(path) is None:
                continue

            model_path = with_extension(path, self._model_extension)
            if any(paths_match(model_path, other) for other in batch):
                logger.debug(
                    "Model %s was just imported with this catalog; not reimporting.",
                    model_path,
                )
                report.skipped.append(model_path)
                continue
            if any(paths_match(model_path, other) for other in requested):
                continue

            if self._store.find_asset(model_path, AssetKind.MODEL) is None:
                report.diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.MISSING_MODEL,
                        path,
                        f"Catalog {path} has no corresponding model {model_path}.",
                    )
                )
                logger.info("Catalog %s has no corresponding model.", path)
                continue

            self._store.import_asset(model_path, force_update=True)
            requested.append(model_path)
            report.reimported.append(model_path)
            logger.debug("Reimporting model %s.", model_path)

        return report
