"""Persist target materials as UsdShade material layers.

Each material asset is a small ``.usda`` layer::

    /mtl                      (Scope, default prim)
        /<MaterialName>       (Material)
            /Surface          (Shader, id = shading template)

Parameters live on the surface shader as namespaced inputs
(``colors:``, ``floats:``, ``vectors:``, ``textures:``, ``tiling:``); keywords
and the render queue are custom attributes on the material prim and
override tags are stored in its customData.
"""

import logging
from pathlib import Path
from typing import Optional

from pxr import Gf, Sdf, Tf, Usd, UsdGeom, UsdShade

from ..core.exceptions import MaterialAssetError
from ..core.target_material import Color, TargetMaterial, TextureResource


logger = logging.getLogger(__name__)

MATERIAL_SCOPE = "/mtl"
SURFACE_SHADER_NAME = "Surface"

COLORS_NAMESPACE = "colors"
FLOATS_NAMESPACE = "floats"
VECTORS_NAMESPACE = "vectors"
TEXTURES_NAMESPACE = "textures"
TILING_NAMESPACE = "tiling"

KEYWORDS_ATTR = "mtlcatalog:keywords"
RENDER_QUEUE_ATTR = "mtlcatalog:renderQueue"
OVERRIDE_TAGS_KEY = "overrideTags"
SOURCE_NAME_KEY = "source_material_name"


def material_prim_name(name: str) -> str:
    """Return a valid USD prim name for a material name."""
    prim_name = name or "Material"
    if not Sdf.Path.IsValidIdentifier(prim_name):
        sanitized = Tf.MakeValidIdentifier(prim_name)
        logger.debug(
            "Material name '%s' is not a valid USD identifier; using '%s'.",
            prim_name,
            sanitized,
        )
        prim_name = sanitized
    return prim_name


def _split_input_name(base_name: str):
    namespace, _, key = base_name.partition(":")
    return namespace, key


def author_material(
    stage: Usd.Stage, material: TargetMaterial, parent_path: str = MATERIAL_SCOPE
) -> UsdShade.Material:
    """Author ``material`` under ``parent_path`` on ``stage``.

    Args:
        stage: Stage to author into.
        material: Target material to write.
        parent_path: Scope the material prim is placed under.

    Returns:
        UsdShade.Material: The authored material prim.
    """
    UsdGeom.Scope.Define(stage, parent_path)
    material_path = f"{parent_path}/{material_prim_name(material.name)}"
    usd_material = UsdShade.Material.Define(stage, material_path)
    prim = usd_material.GetPrim()
    prim.SetCustomDataByKey(SOURCE_NAME_KEY, material.name)
    prim.SetMetadata("displayName", material.name)

    shader = UsdShade.Shader.Define(stage, f"{material_path}/{SURFACE_SHADER_NAME}")
    if material.shader:
        shader.CreateIdAttr(material.shader)
    shader.CreateOutput("surface", Sdf.ValueTypeNames.Token)
    usd_material.CreateSurfaceOutput().ConnectToSource(
        shader.ConnectableAPI(), "surface"
    )

    for name, color in sorted(material.colors.items()):
        shader.CreateInput(
            f"{COLORS_NAMESPACE}:{name}", Sdf.ValueTypeNames.Color4f
        ).Set(Gf.Vec4f(*color))
    for name, value in sorted(material.floats.items()):
        shader.CreateInput(f"{FLOATS_NAMESPACE}:{name}", Sdf.ValueTypeNames.Float).Set(
            value
        )
    for name, vector in sorted(material.vectors.items()):
        shader.CreateInput(
            f"{VECTORS_NAMESPACE}:{name}", Sdf.ValueTypeNames.Float4
        ).Set(Gf.Vec4f(*vector))
    for slot, texture in sorted(material.textures.items()):
        # An empty asset path records an explicitly cleared slot.
        shader.CreateInput(
            f"{TEXTURES_NAMESPACE}:{slot}", Sdf.ValueTypeNames.Asset
        ).Set(Sdf.AssetPath(texture.path if texture else ""))
    for slot, scale in sorted(material.texture_scales.items()):
        shader.CreateInput(
            f"{TILING_NAMESPACE}:{slot}", Sdf.ValueTypeNames.Float2
        ).Set(Gf.Vec2f(*scale))

    prim.CreateAttribute(KEYWORDS_ATTR, Sdf.ValueTypeNames.StringArray).Set(
        sorted(material.keywords)
    )
    prim.CreateAttribute(RENDER_QUEUE_ATTR, Sdf.ValueTypeNames.Int).Set(
        material.render_queue
    )
    for tag, value in sorted(material.override_tags.items()):
        prim.SetCustomDataByKey(f"{OVERRIDE_TAGS_KEY}:{tag}", value)
    return usd_material


def _surface_shader(usd_material: UsdShade.Material) -> Optional[UsdShade.Shader]:
    prim = usd_material.GetPrim().GetChild(SURFACE_SHADER_NAME)
    if not prim or not prim.IsValid():
        return None
    return UsdShade.Shader(prim)


def material_from_prim(prim: Usd.Prim) -> TargetMaterial:
    """Rebuild a target material from an authored material prim.

    Raises:
        MaterialAssetError: If the prim is not a material.
    """
    usd_material = UsdShade.Material(prim)
    if not usd_material:
        raise MaterialAssetError(
            "Prim is not a material", details={"prim": str(prim.GetPath())}
        )
    name = prim.GetCustomDataByKey(SOURCE_NAME_KEY) or prim.GetName()
    material = TargetMaterial(name)

    shader = _surface_shader(usd_material)
    if shader is not None:
        material.shader = shader.GetIdAttr().Get() or None
        for shader_input in shader.GetInputs():
            namespace, key = _split_input_name(shader_input.GetBaseName())
            value = shader_input.Get()
            if value is None:
                continue
            if namespace == COLORS_NAMESPACE:
                material.colors[key] = Color(*(float(v) for v in value))
            elif namespace == FLOATS_NAMESPACE:
                material.floats[key] = float(value)
            elif namespace == VECTORS_NAMESPACE:
                material.vectors[key] = tuple(float(v) for v in value)
            elif namespace == TEXTURES_NAMESPACE:
                material.textures[key] = (
                    TextureResource(value.path) if value.path else None
                )
            elif namespace == TILING_NAMESPACE:
                material.texture_scales[key] = (float(value[0]), float(value[1]))

    keywords = prim.GetAttribute(KEYWORDS_ATTR)
    if keywords and keywords.Get() is not None:
        material.keywords = set(keywords.Get())
    render_queue = prim.GetAttribute(RENDER_QUEUE_ATTR)
    if render_queue and render_queue.Get() is not None:
        material.render_queue = int(render_queue.Get())
    tags = prim.GetCustomDataByKey(OVERRIDE_TAGS_KEY) or {}
    material.override_tags = {tag: str(value) for tag, value in tags.items()}
    material.dirty = False
    return material


def write_material(material: TargetMaterial, path: Path) -> Path:
    """Write ``material`` to a standalone layer at ``path``, replacing it.

    Raises:
        MaterialAssetError: If the layer cannot be exported.
    """
    stage = Usd.Stage.CreateInMemory()
    usd_material = author_material(stage, material)
    stage.SetDefaultPrim(stage.GetPrimAtPath(MATERIAL_SCOPE))
    logger.debug("Writing material %s to %s", material.name, path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        exported = stage.GetRootLayer().Export(str(path))
    except Tf.ErrorException as exc:
        raise MaterialAssetError(
            f"Failed to write material {material.name}",
            details={"path": str(path), "error": str(exc)},
        ) from exc
    if not exported:
        raise MaterialAssetError(
            f"Failed to write material {material.name}", details={"path": str(path)}
        )

    # Layers already open in this process must see the new contents.
    layer = Sdf.Layer.Find(str(path))
    if layer is not None:
        layer.Reload(force=True)
    material.dirty = False
    logger.debug("Wrote %s", usd_material.GetPath())
    return path


def read_material(path: Path) -> TargetMaterial:
    """Read the first material authored in the layer at ``path``.

    Raises:
        MaterialAssetError: If the layer cannot be opened or holds no material.
    """
    try:
        stage = Usd.Stage.Open(str(path))
    except Tf.ErrorException as exc:
        raise MaterialAssetError(
            "Failed to open material layer",
            details={"path": str(path), "error": str(exc)},
        ) from exc
    if stage is None:
        raise MaterialAssetError(
            "Failed to open material layer", details={"path": str(path)}
        )
    for prim in stage.Traverse():
        if prim.IsA(UsdShade.Material):
            return material_from_prim(prim)
    raise MaterialAssetError("Layer holds no material", details={"path": str(path)})
