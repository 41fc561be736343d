"""Disk access used by the local asset store, catalog loading and settings.

Every failure surfaces as ``FileSystemError`` or ``ValidationError`` so
callers deciding whether a catalog, a labels file or a staged texture is
usable only handle the package's own exceptions.
"""

import json
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .exceptions import FileSystemError, ValidationError


class FileSystem(Protocol):
    """Disk operations a project store needs; swapped out in tests."""

    def ensure_directory(self, path: Path) -> Path:
        ...

    def validate_path(self, path: Path, base_dir: Optional[Path] = None) -> Path:
        """Resolve ``path``, rejecting it when it leaves ``base_dir``."""
        ...

    def path_exists(self, path: Path) -> bool:
        ...

    def read_text(self, path: Path) -> str:
        ...

    def read_json(self, path: Path) -> Any:
        ...

    def write_json(self, path: Path, data: Dict[str, Any]) -> None:
        ...

    def copy_file(self, source: Path, destination: Path) -> None:
        """Stage ``source`` at ``destination``, replacing any earlier copy."""
        ...


def _failure(action: str, path: Path, exc: Exception, **details: str) -> FileSystemError:
    details.update(path=str(path), error=str(exc), type=type(exc).__name__)
    return FileSystemError(f"Failed to {action}: {path}", details=details)


class DefaultFileSystem:
    """Local disk access.

    Text is always UTF-8. JSON is written indented because the labels and
    settings files are meant to be edited by hand.
    """

    def ensure_directory(self, path: Path) -> Path:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (OSError, ValueError) as exc:
            raise _failure("create directory", path, exc) from exc
        return path

    def validate_path(self, path: Path, base_dir: Optional[Path] = None) -> Path:
        try:
            resolved = path.resolve()
        except (OSError, RuntimeError) as exc:
            raise ValidationError(
                f"Cannot resolve path: {path}",
                details={"path": str(path), "error": str(exc)},
            ) from exc
        if base_dir is None:
            return resolved

        # Symlinks are resolved first, so a link out of the project is rejected too.
        base_resolved = base_dir.resolve()
        if resolved != base_resolved and base_resolved not in resolved.parents:
            raise ValidationError(
                f"Path escapes base directory: {path}",
                details={"path": str(path), "base_dir": str(base_dir)},
            )
        return resolved

    def path_exists(self, path: Path) -> bool:
        return path.exists()

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise _failure("read text", path, exc) from exc

    def read_json(self, path: Path) -> Any:
        """Parse a JSON file; callers check the shape of what comes back."""
        try:
            return json.loads(self.read_text(path))
        except FileSystemError as exc:
            raise _failure("read JSON", path, exc.__cause__ or exc) from exc
        except json.JSONDecodeError as exc:
            raise _failure("read JSON", path, exc) from exc

    def write_json(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            text = json.dumps(data, indent=2)
        except (TypeError, ValueError) as exc:
            raise _failure("write JSON", path, exc) from exc
        self.ensure_directory(path.parent)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise _failure("write JSON", path, exc) from exc

    def copy_file(self, source: Path, destination: Path) -> None:
        self.ensure_directory(destination.parent)
        try:
            shutil.copyfile(str(source), str(destination))
        except OSError as exc:
            raise _failure(
                f"copy {source} to", destination, exc, source=str(source)
            ) from exc
