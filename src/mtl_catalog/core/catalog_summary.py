"""Human-readable listing of a catalog document."""

from typing import List, Sequence

from .catalog import CatalogDocument, CatalogMaterial, CatalogProperty, CatalogTextureRef
from .mapping import MATERIAL_PARAMETERS, MappingRow

INDENT = "  "


def _format_number(value: float) -> str:
    return f"{value:g}"


def _describe_texture(document: CatalogDocument, texture: CatalogTextureRef) -> str:
    filename = document.texture_filename(texture) or "<missing>"
    label = texture.name or filename
    wrap = f"{_format_number(texture.wrap_u)} x {_format_number(texture.wrap_v)}"
    parts = [f"Texture: {label} ({filename})", f"Wrap {wrap}", texture.uv_set.value]
    if texture.channel_explicit:
        parts.append(f"{texture.channel.value} channel")
    return ", ".join(parts)


def _describe_property(
    document: CatalogDocument, prop: CatalogProperty, depth: int
) -> List[str]:
    line = f"{INDENT * depth}{prop.name}"
    if prop.vector_length:
        line += ": " + ", ".join(_format_number(v) for v in prop.values)
    lines = [line]
    for texture in prop.textures:
        lines.append(f"{INDENT * (depth + 1)}{_describe_texture(document, texture)}")
    return lines


def _mapped_properties(
    material: CatalogMaterial, mapping: Sequence[MappingRow]
) -> List[CatalogProperty]:
    properties: List[CatalogProperty] = []
    for row in mapping:
        prop = row.find_property(material)
        if prop is not None and prop not in properties:
            properties.append(prop)
    return properties


def describe_catalog(
    document: CatalogDocument,
    debug: bool = False,
    mapping: Sequence[MappingRow] = MATERIAL_PARAMETERS,
) -> str:
    """Render the listing an inspector shows for a catalog asset.

    Only properties the mapping table reads are listed, in table order.
    Debug mode adds the version stamp and every unmapped property.

    Args:
        document: Parsed catalog document.
        debug: Include the version stamp and unmapped properties.
        mapping: Mapping table rows.

    Returns:
        str: Newline separated listing.
    """
    lines: List[str] = []
    if debug:
        version = document.version
        lines.append(
            f"Version: {version.app or '<unknown>'} {version.app_version}".rstrip()
            + f" (build {version.build_number}, format {version.format_version})"
        )
    if document.use_root_texture_path:
        lines.append(f"Root Texture Path: {document.root_texture_path or ''}")
    if document.image_files and debug:
        lines.append("Images:")
        for index, image in enumerate(document.image_files):
            colorspace = image.colorspace.value if image.colorspace else "unspecified"
            lines.append(f"{INDENT}[{index}] {image.filename} ({colorspace})")

    for material in document.materials:
        header = f"Material: {material.name}"
        if debug:
            header += f" (ID {material.id}, type {material.kind or '<none>'})"
        lines.append(header)
        mapped = _mapped_properties(material, mapping)
        for prop in mapped:
            lines.extend(_describe_property(document, prop, 1))
        if debug:
            for prop in material.properties:
                if prop not in mapped:
                    lines.extend(_describe_property(document, prop, 1))
    return "\n".join(lines)
