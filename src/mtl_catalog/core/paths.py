"""Asset path helpers.

Asset store paths are project-relative and use forward slashes, e.g.
``Assets/Ships/Hull.fbx``.
"""

from pathlib import PurePosixPath
from typing import List


TEXTURE_DIRNAME = "Textures"
MATERIAL_DIRNAME = "Materials"


def normalize_path(path: str) -> str:
    """Normalize separators and strip trailing separators."""
    if not path:
        return path
    return str(path).replace("\\", "/").rstrip("/")


def join_path(*parts: str) -> str:
    cleaned = [normalize_path(part) for part in parts if part]
    if not cleaned:
        return ""
    return normalize_path(str(PurePosixPath(*cleaned)))


def parent_directory(path: str) -> str:
    parent = PurePosixPath(normalize_path(path)).parent
    return "" if str(parent) == "." else str(parent)


def file_stem(path: str) -> str:
    return PurePosixPath(normalize_path(path)).stem


def file_name(path: str) -> str:
    return PurePosixPath(normalize_path(path)).name


def file_extension(path: str) -> str:
    return PurePosixPath(normalize_path(path)).suffix.lower()


def with_extension(path: str, extension: str) -> str:
    """Return the sibling path with the same basename and a new extension."""
    normalized = normalize_path(path)
    return join_path(parent_directory(normalized), f"{file_stem(normalized)}{extension}")


def paths_match(first: str, second: str) -> bool:
    """Compare asset paths ignoring separator style and case."""
    if first is None or second is None:
        return False
    return normalize_path(first).casefold() == normalize_path(second).casefold()


def search_directories(directory: str) -> List[str]:
    """Return every directory from ``directory`` up to the project root.

    Ordered nearest first, e.g. ``Assets/Ships/Hull`` yields
    ``["Assets/Ships/Hull", "Assets/Ships", "Assets"]``.
    """
    parts = [part for part in normalize_path(directory).split("/") if part]
    return ["/".join(parts[:count]) for count in range(len(parts), 0, -1)]
