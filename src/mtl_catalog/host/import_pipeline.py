"""A synchronous stand-in for a host's asynchronous asset import subsystem.

Import requests are queued and processed in batches by ``run``. For each
image the pre-import hook chooses decode settings and the post-import hook
is told the import finished; models are handed to the model importer; and
every batch ends with the batch post-processor followed by the calls that
were deferred while the batch ran.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..core.interfaces import TextureImportSettings
from ..core.paths import file_extension, normalize_path


logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCHES = 16

TexturePreprocessor = Callable[[str], Optional[TextureImportSettings]]
TexturePostprocessor = Callable[[str], Any]
ModelImporter = Callable[[str], Any]
BatchPostprocessor = Callable[
    [Iterable[str], Iterable[str], Iterable[str], Iterable[str]], Any
]


class ImportPipeline:
    """Queue import requests and run them through the registered hooks.

    Attributes:
        image_extensions: Extensions treated as images.
        model_extensions: Extensions treated as models.
        texture_preprocessor: Called before an image is imported.
        texture_postprocessor: Called once an image import finished.
        model_importer: Called to import a model.
        batch_postprocessor: Called with every processed batch.
        texture_settings: Decode settings chosen per imported image.
    """

    def __init__(
        self,
        image_extensions: Iterable[str] = (),
        model_extensions: Iterable[str] = (),
    ) -> None:
        self.image_extensions = {ext.lower() for ext in image_extensions}
        self.model_extensions = {ext.lower() for ext in model_extensions}
        self.texture_preprocessor: Optional[TexturePreprocessor] = None
        self.texture_postprocessor: Optional[TexturePostprocessor] = None
        self.model_importer: Optional[ModelImporter] = None
        self.batch_postprocessor: Optional[BatchPostprocessor] = None
        self.texture_settings: Dict[str, TextureImportSettings] = {}
        self._requests: List[str] = []
        self._deferred: List[Callable[[], None]] = []

    def _key(self, path: str) -> str:
        return normalize_path(path).casefold()

    def request_import(self, path: str, force_update: bool = False) -> None:
        path = normalize_path(path)
        if self.is_pending(path):
            return
        self._requests.append(path)
        logger.debug("Queued import of %s (force=%s)", path, force_update)

    def is_pending(self, path: str) -> bool:
        key = self._key(path)
        return any(self._key(request) == key for request in self._requests)

    @property
    def pending(self) -> List[str]:
        return list(self._requests)

    def delay_call(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the current batch finishes."""
        self._deferred.append(callback)

    def _import_one(self, path: str) -> None:
        extension = file_extension(path)
        if extension in self.image_extensions:
            if self.texture_preprocessor is not None:
                settings = self.texture_preprocessor(path)
                if settings is not None:
                    self.texture_settings[self._key(path)] = settings
            if self.texture_postprocessor is not None:
                self.texture_postprocessor(path)
        elif extension in self.model_extensions:
            if self.model_importer is not None:
                self.model_importer(path)

    def run_batch(self) -> List[str]:
        """Import every queued path, then run batch and deferred callbacks.

        Returns:
            List[str]: Paths imported in this batch.
        """
        batch, self._requests = self._requests, []
        for path in batch:
            logger.debug("Importing %s", path)
            self._import_one(path)
        if batch and self.batch_postprocessor is not None:
            self.batch_postprocessor(batch, (), (), ())

        deferred, self._deferred = self._deferred, []
        for callback in deferred:
            callback()
        return batch

    def run(self, max_batches: int = DEFAULT_MAX_BATCHES) -> int:
        """Process batches until no requests or deferred calls remain.

        Returns:
            int: Number of batches run.
        """
        batches = 0
        while self._requests or self._deferred:
            if batches >= max_batches:
                logger.warning(
                    "Stopping after %d import batches with %d request(s) left.",
                    batches,
                    len(self._requests),
                )
                break
            self.run_batch()
            batches += 1
        return batches
