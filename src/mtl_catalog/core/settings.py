"""Importer configuration and per-document label overrides."""

from dataclasses import dataclass, replace
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from .exceptions import ConfigurationError, FileSystemError
from .filesystem import DefaultFileSystem, FileSystem


logger = logging.getLogger(__name__)

LABEL_ALWAYS_APPLY = "always-apply"
LABEL_NEVER_APPLY = "never-apply"
LABEL_ALWAYS_IMPORT = "always-import"
LABEL_NEVER_IMPORT = "never-import"

_APPLY_LABELS = {LABEL_ALWAYS_APPLY: True, LABEL_NEVER_APPLY: False}
_IMPORT_LABELS = {LABEL_ALWAYS_IMPORT: True, LABEL_NEVER_IMPORT: False}


@dataclass(frozen=True)
class ImporterSettings:
    """Global importer policy.

    Attributes:
        always_apply: Re-apply catalog values to materials that already exist.
        always_import: Re-stage external textures even when a project copy exists.
        debug: Emit debug-level logging.
    """

    always_apply: bool = True
    always_import: bool = False
    debug: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ImporterSettings":
        if not data:
            return cls()
        known = {"always_apply", "always_import", "debug"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                "Unknown importer settings", details={"keys": unknown}
            )
        values = {}
        for key in known:
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, bool):
                raise ConfigurationError(
                    "Importer setting must be a boolean",
                    details={"key": key, "value": value},
                )
            values[key] = value
        return cls(**values)

    def to_mapping(self) -> dict:
        return {
            "always_apply": self.always_apply,
            "always_import": self.always_import,
            "debug": self.debug,
        }

    def with_labels(self, labels: Iterable[str]) -> "ImporterSettings":
        """Return settings overridden by per-document labels.

        The last applicable label in each category wins.

        Args:
            labels: Labels stored on the catalog document asset.

        Returns:
            ImporterSettings: Settings with the overrides applied.
        """
        always_apply = self.always_apply
        always_import = self.always_import
        for label in labels:
            normalized = label.strip().lower()
            if normalized in _APPLY_LABELS:
                always_apply = _APPLY_LABELS[normalized]
            elif normalized in _IMPORT_LABELS:
                always_import = _IMPORT_LABELS[normalized]
        return replace(self, always_apply=always_apply, always_import=always_import)


@dataclass(frozen=True)
class HostCapabilities:
    """Optional host features, resolved once at startup.

    Attributes:
        override_tag_on_create: Host materials accept render-type override tags.
        albedo_alpha_smoothness: Target shader can read smoothness from albedo alpha.
    """

    override_tag_on_create: bool = True
    albedo_alpha_smoothness: bool = False


def load_settings(
    path: Path, fs: Optional[FileSystem] = None
) -> ImporterSettings:
    """Load importer settings from a JSON file.

    A missing file yields the defaults.

    Raises:
        ConfigurationError: If the file exists but is not valid settings JSON.
    """
    active_fs = fs or DefaultFileSystem()
    if not active_fs.path_exists(path):
        logger.debug("No settings file at %s; using defaults.", path)
        return ImporterSettings()
    try:
        data = active_fs.read_json(path)
    except FileSystemError as exc:
        raise ConfigurationError(
            "Importer settings could not be read",
            details={"path": str(path), "error": exc.message},
        ) from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            "Importer settings must be a JSON object", details={"path": str(path)}
        )
    return ImporterSettings.from_mapping(data)


def save_settings(
    settings: ImporterSettings, path: Path, fs: Optional[FileSystem] = None
) -> None:
    active_fs = fs or DefaultFileSystem()
    active_fs.write_json(path, settings.to_mapping())
