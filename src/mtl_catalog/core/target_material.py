"""In-memory form of a target material resource for the fixed shading model."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, NamedTuple, Optional, Set, Tuple

from .mapping import (
    DETAIL_SLOTS,
    NORMAL_MAP_SLOTS,
    SLOT_METALLIC_GLOSS_MAP,
    SLOT_PARALLAX_MAP,
)
from .paths import file_stem


DEFAULT_SHADER = "Standard"

COLOR_BASE = "Color"
COLOR_EMISSION = "EmissionColor"

FLOAT_UV_SEC = "UVSec"
FLOAT_SMOOTHNESS_CHANNEL = "SmoothnessTextureChannel"
FLOAT_SRC_BLEND = "SrcBlend"
FLOAT_DST_BLEND = "DstBlend"
FLOAT_Z_WRITE = "ZWrite"

KEYWORD_NORMALMAP = "NORMALMAP"
KEYWORD_PARALLAXMAP = "PARALLAXMAP"
KEYWORD_METALLICGLOSSMAP = "METALLICGLOSSMAP"
KEYWORD_DETAIL = "DETAIL_MULX2"
KEYWORD_EMISSION = "EMISSION"
KEYWORD_ALPHATEST = "ALPHATEST_ON"
KEYWORD_ALPHABLEND = "ALPHABLEND_ON"
KEYWORD_ALPHAPREMULTIPLY = "ALPHAPREMULTIPLY_ON"

TAG_RENDER_TYPE = "RenderType"

# Blend factor values understood by the shading model.
BLEND_ZERO = 0
BLEND_ONE = 1
BLEND_SRC_ALPHA = 5
BLEND_ONE_MINUS_SRC_ALPHA = 10

SMOOTHNESS_FROM_METALLIC_ALPHA = 0.0
SMOOTHNESS_FROM_ALBEDO_ALPHA = 1.0

EMISSION_EPSILON = 0.1 / 255.0


class Color(NamedTuple):
    r: float
    g: float
    b: float
    a: float = 1.0

    @property
    def max_component(self) -> float:
        """Largest of the colour channels, ignoring alpha."""
        return max(self.r, self.g, self.b)

    def scaled(self, factor: float) -> "Color":
        return Color(self.r * factor, self.g * factor, self.b * factor, self.a * factor)


WHITE = Color(1.0, 1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0, 1.0)

Vector4 = Tuple[float, float, float, float]


@dataclass(frozen=True)
class TextureResource:
    """An imported image resource known to the asset store."""

    path: str

    @property
    def name(self) -> str:
        return file_stem(self.path)


class BlendMode(Enum):
    OPAQUE = "opaque"
    CUTOUT = "cutout"
    FADE = "fade"
    TRANSPARENT = "transparent"


class TargetMaterial:
    """A material resource on the fixed physically-based shading model.

    Only the mapped subset of the shading model's parameters is modelled.
    Every write marks the material dirty so the host persists it.

    Attributes:
        name: Material name; the join key against catalog materials.
        shader: Shading template name, or None when unassigned.
        dirty: Whether the material has unsaved changes.
    """

    def __init__(self, name: str, shader: Optional[str] = None) -> None:
        self.name = name
        self.shader = shader
        self.colors: Dict[str, Color] = {}
        self.floats: Dict[str, float] = {}
        self.vectors: Dict[str, Vector4] = {}
        self.textures: Dict[str, Optional[TextureResource]] = {}
        self.texture_scales: Dict[str, Tuple[float, float]] = {}
        self.keywords: Set[str] = set()
        self.override_tags: Dict[str, str] = {}
        self.render_queue = -1
        self.dirty = False

    def __repr__(self) -> str:
        return f"TargetMaterial(name={self.name!r}, shader={self.shader!r})"

    def mark_dirty(self) -> None:
        self.dirty = True

    def set_shader(self, shader: str) -> None:
        if self.shader != shader:
            self.shader = shader
            self.mark_dirty()

    def set_color(self, name: str, color: Color) -> None:
        self.colors[name] = Color(*color)
        self.mark_dirty()

    def get_color(self, name: str, default: Color = BLACK) -> Color:
        return self.colors.get(name, default)

    def set_float(self, name: str, value: float) -> None:
        self.floats[name] = float(value)
        self.mark_dirty()

    def get_float(self, name: str, default: float = 0.0) -> float:
        return self.floats.get(name, default)

    def set_vector(self, name: str, value: Iterable[float]) -> None:
        components = list(value)[:4]
        components.extend([0.0] * (4 - len(components)))
        self.vectors[name] = tuple(float(v) for v in components)
        self.mark_dirty()

    def get_vector(self, name: str) -> Vector4:
        return self.vectors.get(name, (0.0, 0.0, 0.0, 0.0))

    def set_texture(self, slot: str, texture: Optional[TextureResource]) -> None:
        """Assign a texture to a slot; None explicitly clears the slot."""
        self.textures[slot] = texture
        self.mark_dirty()

    def get_texture(self, slot: str) -> Optional[TextureResource]:
        return self.textures.get(slot)

    def has_texture_slot(self, slot: str) -> bool:
        """Whether the slot was ever written, including explicit clears."""
        return slot in self.textures

    def set_texture_scale(self, slot: str, scale: Tuple[float, float]) -> None:
        self.texture_scales[slot] = (float(scale[0]), float(scale[1]))
        self.mark_dirty()

    def get_texture_scale(self, slot: str) -> Tuple[float, float]:
        return self.texture_scales.get(slot, (1.0, 1.0))

    def enable_keyword(self, keyword: str) -> None:
        self.keywords.add(keyword)
        self.mark_dirty()

    def disable_keyword(self, keyword: str) -> None:
        self.keywords.discard(keyword)
        self.mark_dirty()

    def is_keyword_enabled(self, keyword: str) -> bool:
        return keyword in self.keywords

    def set_override_tag(self, tag: str, value: str) -> None:
        if value:
            self.override_tags[tag] = value
        else:
            self.override_tags.pop(tag, None)
        self.mark_dirty()

    def set_render_queue(self, queue: int) -> None:
        self.render_queue = int(queue)
        self.mark_dirty()

    def parameters(self) -> dict:
        """Return a comparable snapshot of every parameter value."""
        return {
            "shader": self.shader,
            "colors": dict(self.colors),
            "floats": dict(self.floats),
            "vectors": dict(self.vectors),
            "textures": {
                slot: texture.path if texture else None
                for slot, texture in self.textures.items()
            },
            "texture_scales": dict(self.texture_scales),
            "keywords": sorted(self.keywords),
            "override_tags": dict(self.override_tags),
            "render_queue": self.render_queue,
        }


def setup_blend_mode(
    material: TargetMaterial, blend_mode: BlendMode, override_tags: bool = True
) -> None:
    """Configure blend factors, depth writes, keywords and queue for a mode.

    Args:
        material: Material to update.
        blend_mode: Mode to switch to.
        override_tags: Whether the host accepts render-type override tags.
    """
    if blend_mode is BlendMode.OPAQUE:
        tag, src, dst, z_write, queue = "", BLEND_ONE, BLEND_ZERO, 1, -1
        keyword = None
    elif blend_mode is BlendMode.CUTOUT:
        tag, src, dst, z_write, queue = (
            "TransparentCutout", BLEND_ONE, BLEND_ZERO, 1, 2450
        )
        keyword = KEYWORD_ALPHATEST
    elif blend_mode is BlendMode.FADE:
        tag, src, dst, z_write, queue = (
            "Transparent", BLEND_SRC_ALPHA, BLEND_ONE_MINUS_SRC_ALPHA, 0, 3000
        )
        keyword = KEYWORD_ALPHABLEND
    else:
        tag, src, dst, z_write, queue = (
            "Transparent", BLEND_ONE, BLEND_ONE_MINUS_SRC_ALPHA, 0, 3000
        )
        keyword = KEYWORD_ALPHAPREMULTIPLY

    if override_tags:
        material.set_override_tag(TAG_RENDER_TYPE, tag)
    material.set_float(FLOAT_SRC_BLEND, src)
    material.set_float(FLOAT_DST_BLEND, dst)
    material.set_float(FLOAT_Z_WRITE, z_write)
    for candidate in (KEYWORD_ALPHATEST, KEYWORD_ALPHABLEND, KEYWORD_ALPHAPREMULTIPLY):
        if candidate == keyword:
            material.enable_keyword(candidate)
        else:
            material.disable_keyword(candidate)
    material.set_render_queue(queue)


def blend_mode_of(material: TargetMaterial) -> BlendMode:
    if material.is_keyword_enabled(KEYWORD_ALPHABLEND):
        return BlendMode.FADE
    if material.is_keyword_enabled(KEYWORD_ALPHAPREMULTIPLY):
        return BlendMode.TRANSPARENT
    if material.is_keyword_enabled(KEYWORD_ALPHATEST):
        return BlendMode.CUTOUT
    return BlendMode.OPAQUE


def apply_slot_keywords(material: TargetMaterial, slot: str) -> None:
    """Enable the shading-model features a newly assigned texture needs."""
    if slot in NORMAL_MAP_SLOTS:
        material.enable_keyword(KEYWORD_NORMALMAP)
    if slot == SLOT_PARALLAX_MAP:
        material.enable_keyword(KEYWORD_PARALLAXMAP)
    if slot == SLOT_METALLIC_GLOSS_MAP:
        material.enable_keyword(KEYWORD_METALLICGLOSSMAP)
    if slot in DETAIL_SLOTS:
        material.enable_keyword(KEYWORD_DETAIL)
