"""Load catalog documents from their XML form."""

import logging
from pathlib import Path
from typing import List, Optional
import xml.etree.ElementTree as ET

from .catalog import (
    CatalogDocument,
    CatalogMaterial,
    CatalogProperty,
    CatalogTextureRef,
    CatalogVersion,
    Channel,
    Colorspace,
    ImageFileEntry,
    UVSet,
)
from .exceptions import CatalogError, FileSystemError
from .filesystem import DefaultFileSystem, FileSystem
from .numeric import parse_numeric_value


logger = logging.getLogger(__name__)

CATALOG_ROOT_TAG = "catalog"
CATALOG_EXTENSION = ".xml"


def _parse_int(value: Optional[str], default: int, field_name: str) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise CatalogError(
            "Invalid integer in catalog document",
            details={"field": field_name, "value": value},
        ) from exc


def _parse_wrap(value: Optional[str]) -> float:
    if value is None:
        return 1.0
    parsed = parse_numeric_value(value, 1)
    if parsed.count != 1:
        return 1.0
    return parsed.values[0]


def _parse_texture(element: ET.Element) -> CatalogTextureRef:
    channel = Channel.from_name(element.get("channel"))
    if element.get("channel") and channel is None:
        logger.debug("Unknown texture channel '%s'.", element.get("channel"))

    uvmap = element.get("uvmap")
    uv_set = UVSet.UV1
    if uvmap is not None and uvmap.strip().upper() == UVSet.UV2.value:
        uv_set = UVSet.UV2

    return CatalogTextureRef(
        name=element.get("name"),
        legacy_filename=element.get("filename"),
        channel=channel or Channel.RGB,
        channel_explicit=channel is not None,
        wrap_u=_parse_wrap(element.get("wrapU")),
        wrap_v=_parse_wrap(element.get("wrapV")),
        uv_set=uv_set,
        uv_set_explicit=uvmap is not None,
        image_index=_parse_int(element.get("image"), -1, "texture.image"),
        uv_index=_parse_int(element.get("uvIndex"), 0, "texture.uvIndex"),
        uv_name=element.get("uvName"),
    )


def _parse_property(element: ET.Element) -> CatalogProperty:
    name = element.get("name")
    if name is None:
        raise CatalogError("Catalog property is missing its name")
    return CatalogProperty(
        name=name,
        raw_value=element.get("value"),
        textures=tuple(_parse_texture(child) for child in element.findall("texture")),
    )


def _parse_material(element: ET.Element) -> CatalogMaterial:
    return CatalogMaterial(
        id=element.get("ID", ""),
        name=element.get("ptag", ""),
        kind=element.get("type", ""),
        properties=tuple(
            _parse_property(child) for child in element.findall("property")
        ),
    )


def _parse_version(element: Optional[ET.Element]) -> CatalogVersion:
    if element is None:
        return CatalogVersion()
    return CatalogVersion(
        app=element.get("app", ""),
        build_number=_parse_int(element.get("build"), 0, "Version.build"),
        format_version=_parse_int(element.text, 0, "Version"),
        app_version=element.get("appVersion", ""),
    )


def _build_document(root: ET.Element) -> CatalogDocument:
    if root.tag != CATALOG_ROOT_TAG:
        raise CatalogError(
            "Unexpected catalog root element", details={"tag": root.tag}
        )

    use_root = _parse_int(root.findtext("useRootPath"), 0, "useRootPath")
    images: List[ImageFileEntry] = []
    for element in root.findall("Image"):
        images.append(
            ImageFileEntry(
                filename=element.get("filename", ""),
                colorspace=Colorspace.from_name(element.get("colorspace")),
            )
        )

    return CatalogDocument(
        use_root_texture_path=use_root == 1,
        root_texture_path=root.findtext("RootPath"),
        version=_parse_version(root.find("Version")),
        materials=tuple(_parse_material(child) for child in root.findall("Material")),
        image_files=tuple(images),
    )


def load_catalog_from_string(content: Optional[str]) -> Optional[CatalogDocument]:
    """Parse catalog XML text.

    Args:
        content: XML document text.

    Returns:
        Optional[CatalogDocument]: The document, or None when the text is
        empty or cannot be converted. A partially valid document is never
        returned.
    """
    if not content:
        return None
    try:
        root = ET.fromstring(content)
        return _build_document(root)
    except ET.ParseError as exc:
        logger.debug("Catalog XML could not be parsed: %s", exc)
    except CatalogError as exc:
        logger.debug("Catalog document rejected: %s", exc)
    return None


def load_catalog(
    path: Path, fs: Optional[FileSystem] = None
) -> Optional[CatalogDocument]:
    """Read and parse a catalog document from disk.

    Args:
        path: Path to the catalog XML file.
        fs: File system implementation.

    Returns:
        Optional[CatalogDocument]: The document, or None when absent or invalid.
    """
    try:
        content = (fs or DefaultFileSystem()).read_text(Path(path))
    except FileSystemError as exc:
        logger.debug("Catalog file unreadable: %s (%s)", path, exc)
        return None
    return load_catalog_from_string(content)
