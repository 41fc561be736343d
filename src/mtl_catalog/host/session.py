"""Wire a local project, its import pipeline and the importer together."""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.importer import CatalogMaterialImporter, MaterialNaming, MaterialSearch
from ..core.paths import normalize_path
from ..core.pending import PendingResourceQueue
from ..core.reimport import ReimportReport
from ..core.settings import HostCapabilities, ImporterSettings
from ..core.target_material import DEFAULT_SHADER, TargetMaterial
from ..usd.local_store import IMAGE_EXTENSIONS, MODEL_EXTENSIONS, LocalAssetStore
from .import_pipeline import ImportPipeline


logger = logging.getLogger(__name__)


@dataclass
class ModelImport:
    """How a model's materials are imported, remembered for reimports."""

    material_names: Tuple[str, ...]
    naming: MaterialNaming = MaterialNaming.MATERIAL_NAME
    search: MaterialSearch = MaterialSearch.RECURSIVE_UP
    materials: Dict[str, Optional[TargetMaterial]] = field(default_factory=dict)


class ImporterSession:
    """A local host running catalog material imports against a project.

    Args:
        project_root: Project directory; asset paths are relative to it.
        settings: Global importer policy.
        capabilities: Host features.
        shaders: Shading templates the host provides.
    """

    def __init__(
        self,
        project_root: Path,
        settings: Optional[ImporterSettings] = None,
        capabilities: Optional[HostCapabilities] = None,
        shaders: Iterable[str] = (DEFAULT_SHADER,),
    ) -> None:
        self.pipeline = ImportPipeline(IMAGE_EXTENSIONS, MODEL_EXTENSIONS)
        self.store = LocalAssetStore(
            project_root,
            pipeline=self.pipeline,
            shaders=shaders,
            capabilities=capabilities,
        )
        self.queue = PendingResourceQueue()
        self.notices: List[str] = []
        self.reports: List[ReimportReport] = []
        self.importer = CatalogMaterialImporter(
            self.store,
            self.queue,
            settings=settings,
            notifier=self._collect_notice,
            scheduler=self.pipeline.delay_call,
        )
        self._models: Dict[str, ModelImport] = {}

        self.pipeline.texture_preprocessor = self.importer.preprocess_texture
        self.pipeline.texture_postprocessor = self.importer.postprocess_texture
        self.pipeline.model_importer = self._import_model
        self.pipeline.batch_postprocessor = self._postprocess_batch

    def _collect_notice(self, subject: str, notice: str) -> None:
        self.notices.append(notice)

    def _postprocess_batch(self, imported, deleted, moved, moved_from) -> None:
        report = self.importer.postprocess_all_assets(
            imported, deleted, moved, moved_from
        )
        if report.reimported or report.diagnostics:
            self.reports.append(report)

    def _settle(self) -> None:
        """Run queued imports, then save materials the imports changed."""
        self.pipeline.run()
        self.store.refresh()

    def _import_model(self, model_path: str) -> None:
        model = self._models.get(normalize_path(model_path).casefold())
        if model is None:
            logger.debug("No material slots recorded for %s", model_path)
            return
        for name in model.material_names:
            model.materials[name] = self.importer.assign_material(
                model_path, TargetMaterial(name), model.naming, model.search
            )

    def import_model(
        self,
        model_path: str,
        material_names: Sequence[str],
        naming: MaterialNaming = MaterialNaming.MATERIAL_NAME,
        search: MaterialSearch = MaterialSearch.RECURSIVE_UP,
    ) -> Dict[str, Optional[TargetMaterial]]:
        """Import a model with the given material slots and settle the queue.

        Returns:
            Dict[str, Optional[TargetMaterial]]: Material per slot name; None
            where the host keeps its default material.
        """
        model = ModelImport(tuple(material_names), naming, search)
        self._models[normalize_path(model_path).casefold()] = model
        self.pipeline.request_import(model_path, force_update=True)
        self._settle()
        return dict(model.materials)

    def notify_changed(self, paths: Iterable[str]) -> List[ReimportReport]:
        """Tell the host that assets were created or edited on disk."""
        start = len(self.reports)
        for path in paths:
            self.pipeline.request_import(path)
        self._settle()
        return self.reports[start:]

    def materials_for(self, model_path: str) -> Dict[str, Optional[TargetMaterial]]:
        model = self._models.get(normalize_path(model_path).casefold())
        return dict(model.materials) if model else {}
