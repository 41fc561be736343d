import pytest

from pxr import Usd, UsdShade

from mtl_catalog.core.exceptions import MaterialAssetError
from mtl_catalog.core.target_material import (
    BlendMode,
    Color,
    TargetMaterial,
    TextureResource,
    setup_blend_mode,
)
from mtl_catalog.usd.material_writer import (
    author_material,
    material_from_prim,
    material_prim_name,
    read_material,
    write_material,
)


def _hull_material():
    material = TargetMaterial("Hull", shader="Standard")
    material.set_color("Color", Color(1.0, 0.5, 0.25, 0.5))
    material.set_float("Metallic", 0.75)
    material.set_vector("Tint", (0.5, 0.25))
    material.set_texture("MainTex", TextureResource("Assets/Ships/Textures/hull.png"))
    material.set_texture("BumpMap", None)
    material.set_texture_scale("MainTex", (2.0, 3.0))
    material.enable_keyword("EMISSION")
    setup_blend_mode(material, BlendMode.FADE)
    return material


def test_author_material_layout():
    """Ensure the material prim, surface shader and inputs are authored."""
    stage = Usd.Stage.CreateInMemory()

    usd_material = author_material(stage, _hull_material())

    assert usd_material.GetPath().pathString == "/mtl/Hull"
    shader = UsdShade.Shader(stage.GetPrimAtPath("/mtl/Hull/Surface"))
    assert shader.GetIdAttr().Get() == "Standard"
    assert shader.GetInput("floats:Metallic").Get() == pytest.approx(0.75)
    source = usd_material.GetSurfaceOutput().GetConnectedSource()
    assert source[0].GetPath().pathString == "/mtl/Hull/Surface"


def test_material_round_trips_through_layer(tmp_path):
    """Ensure a written material reads back with the same parameters."""
    material = _hull_material()
    path = tmp_path / "Materials" / "Hull.usda"

    write_material(material, path)
    loaded = read_material(path)

    assert path.exists()
    assert material.dirty is False
    assert loaded.dirty is False
    assert loaded.parameters() == material.parameters()


def test_invalid_identifier_keeps_material_name():
    """Ensure names that are not USD identifiers are sanitized on the prim only."""
    stage = Usd.Stage.CreateInMemory()

    usd_material = author_material(stage, TargetMaterial("Hull Plate-2"))
    loaded = material_from_prim(usd_material.GetPrim())

    assert material_prim_name("Hull Plate-2") == "Hull_Plate_2"
    assert usd_material.GetPrim().GetName() == "Hull_Plate_2"
    assert loaded.name == "Hull Plate-2"


def test_material_from_non_material_prim_raises():
    """Ensure non-material prims are rejected."""
    stage = Usd.Stage.CreateInMemory()
    prim = stage.DefinePrim("/mtl", "Scope")

    with pytest.raises(MaterialAssetError):
        material_from_prim(prim)


def test_read_layer_without_material_raises(tmp_path):
    """Ensure a layer with no material prim is an error."""
    path = tmp_path / "empty.usda"
    stage = Usd.Stage.CreateNew(str(path))
    stage.DefinePrim("/mtl", "Scope")
    stage.GetRootLayer().Save()

    with pytest.raises(MaterialAssetError):
        read_material(path)
