"""Tests for the catalog property mapping table."""

from mtl_catalog.core.catalog import CatalogMaterial, CatalogProperty, Channel, Colorspace
from mtl_catalog.core.mapping import (
    MATERIAL_PARAMETERS,
    PROP_BUMP,
    PROP_DETAIL_ALBEDO,
    PROP_METALLIC,
    PROP_NORMAL_SCALE,
    PROP_SMOOTHNESS,
    SLOT_METALLIC_GLOSS_MAP,
    MappingRow,
)


def _row(name: str) -> MappingRow:
    return next(row for row in MATERIAL_PARAMETERS if row.source_property == name)


def test_metallic_and_smoothness_share_texture_slot():
    metallic = _row(PROP_METALLIC)
    smoothness = _row(PROP_SMOOTHNESS)
    assert metallic.texture_slot == smoothness.texture_slot == SLOT_METALLIC_GLOSS_MAP
    assert metallic.expected_channel is Channel.RED
    assert smoothness.expected_channel is Channel.ALPHA
    assert metallic.scalar_slot == "Metallic"
    assert smoothness.scalar_slot == "Glossiness"


def test_scale_rows_are_scalar_only():
    row = _row(PROP_NORMAL_SCALE)
    assert row.texture_slot is None
    assert row.scalar_slot == "BumpScale"


def test_rows_keep_table_order():
    names = [row.source_property for row in MATERIAL_PARAMETERS]
    assert names[0] == "Albedo"
    assert names[-1] == PROP_SMOOTHNESS
    assert names.index(PROP_METALLIC) < names.index(PROP_SMOOTHNESS)


def test_colour_slots_expect_srgb_and_data_slots_expect_linear():
    assert _row("Albedo").expected_colorspace is Colorspace.SRGB
    assert _row("Ambient Occlusion").expected_colorspace is Colorspace.LINEAR
    assert _row("Normal").expected_colorspace is None


def test_find_property_accepts_aliases():
    """Rows match their alias when the primary name is absent."""
    material = CatalogMaterial(
        id="1",
        name="Hull",
        properties=(
            CatalogProperty("Detail Albedo"),
            CatalogProperty("Height"),
        ),
    )
    assert _row(PROP_DETAIL_ALBEDO).find_property(material).name == "Detail Albedo"
    assert _row(PROP_BUMP).find_property(material).name == "Height"
    assert _row(PROP_METALLIC).find_property(material) is None


def test_find_property_prefers_primary_name():
    material = CatalogMaterial(
        id="1",
        name="Hull",
        properties=(CatalogProperty("Height"), CatalogProperty("Bump")),
    )
    assert _row(PROP_BUMP).find_property(material).name == "Bump"
