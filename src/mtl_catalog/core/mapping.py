"""Mapping of catalog properties onto target material parameter slots."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .catalog import CatalogMaterial, CatalogProperty, Channel, Colorspace


# Target texture slots.
SLOT_MAIN_TEX = "MainTex"
SLOT_BUMP_MAP = "BumpMap"
SLOT_OCCLUSION_MAP = "OcclusionMap"
SLOT_EMISSION_MAP = "EmissionMap"
SLOT_DETAIL_MASK = "DetailMask"
SLOT_DETAIL_ALBEDO_MAP = "DetailAlbedoMap"
SLOT_DETAIL_NORMAL_MAP = "DetailNormalMap"
SLOT_METALLIC_GLOSS_MAP = "MetallicGlossMap"
SLOT_PARALLAX_MAP = "ParallaxMap"

# Target scalar slots.
SLOT_BUMP_SCALE = "BumpScale"
SLOT_DETAIL_NORMAL_MAP_SCALE = "DetailNormalMapScale"
SLOT_METALLIC = "Metallic"
SLOT_GLOSSINESS = "Glossiness"
SLOT_PARALLAX = "Parallax"

# Catalog property names.
PROP_ALBEDO = "Albedo"
PROP_OPACITY = "Opacity"
PROP_NORMAL = "Normal"
PROP_NORMAL_SCALE = "Normal Scale"
PROP_AMBIENT_OCCLUSION = "Ambient Occlusion"
PROP_EMISSION = "Emission"
PROP_EMISSIVE_LEVEL = "Emissive Level"
PROP_DETAIL_MASK = "Detail Mask"
PROP_DETAIL_ALBEDO = "Detail Albedo x2"
PROP_DETAIL_NORMAL = "Detail Normal"
PROP_DETAIL_NORMAL_SCALE = "Detail Normal Scale"
PROP_METALLIC = "Metallic"
PROP_BUMP = "Bump"
PROP_HEIGHT_SCALE = "Height Scale"
PROP_SMOOTHNESS = "Smoothness"

NORMAL_MAP_SLOTS = frozenset({SLOT_BUMP_MAP, SLOT_DETAIL_NORMAL_MAP})
DETAIL_SLOTS = frozenset({SLOT_DETAIL_ALBEDO_MAP, SLOT_DETAIL_NORMAL_MAP})


@dataclass(frozen=True)
class MappingRow:
    """One catalog property to target slot mapping.

    Attributes:
        source_property: Catalog property name.
        texture_slot: Target texture slot, tried first when set.
        scalar_slot: Target scalar/vector slot used when no texture resolves.
        expected_channel: Channel the target shading model reads.
        expected_colorspace: Colorspace the target slot expects.
        aliases: Alternative property names accepted for this row.
    """

    source_property: str
    texture_slot: Optional[str] = None
    scalar_slot: Optional[str] = None
    expected_channel: Optional[Channel] = None
    expected_colorspace: Optional[Colorspace] = None
    aliases: Tuple[str, ...] = ()

    def find_property(self, material: CatalogMaterial) -> Optional[CatalogProperty]:
        """Return the material property this row reads, if present."""
        for name in (self.source_property, *self.aliases):
            prop = material.get_property(name)
            if prop is not None:
                return prop
        return None


_SRGB = Colorspace.SRGB
_LINEAR = Colorspace.LINEAR

MATERIAL_PARAMETERS: Tuple[MappingRow, ...] = (
    MappingRow(PROP_ALBEDO, SLOT_MAIN_TEX, None, None, _SRGB),
    MappingRow(PROP_NORMAL, SLOT_BUMP_MAP),
    MappingRow(PROP_NORMAL_SCALE, None, SLOT_BUMP_SCALE),
    MappingRow(
        PROP_AMBIENT_OCCLUSION, SLOT_OCCLUSION_MAP, None, Channel.GREEN, _LINEAR
    ),
    MappingRow(PROP_EMISSION, SLOT_EMISSION_MAP, None, None, _SRGB),
    MappingRow(PROP_DETAIL_MASK, SLOT_DETAIL_MASK, None, Channel.ALPHA, _LINEAR),
    MappingRow(
        PROP_DETAIL_ALBEDO,
        SLOT_DETAIL_ALBEDO_MAP,
        None,
        None,
        _SRGB,
        aliases=("Detail Albedo",),
    ),
    MappingRow(PROP_DETAIL_NORMAL, SLOT_DETAIL_NORMAL_MAP),
    MappingRow(PROP_DETAIL_NORMAL_SCALE, None, SLOT_DETAIL_NORMAL_MAP_SCALE),
    MappingRow(
        PROP_METALLIC, SLOT_METALLIC_GLOSS_MAP, SLOT_METALLIC, Channel.RED, _LINEAR
    ),
    MappingRow(
        PROP_BUMP,
        SLOT_PARALLAX_MAP,
        None,
        Channel.GREEN,
        _LINEAR,
        aliases=("Height",),
    ),
    MappingRow(PROP_HEIGHT_SCALE, None, SLOT_PARALLAX),
    MappingRow(
        PROP_SMOOTHNESS,
        SLOT_METALLIC_GLOSS_MAP,
        SLOT_GLOSSINESS,
        Channel.ALPHA,
        _LINEAR,
    ),
)
