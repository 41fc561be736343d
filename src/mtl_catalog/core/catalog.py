"""Typed representation of a parsed material catalog document."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .numeric import MAX_ARITY, parse_numeric_value


class Channel(Enum):
    RGB = "RGB"
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"
    ALPHA = "Alpha"

    @classmethod
    def from_name(cls, value: Optional[str]) -> Optional["Channel"]:
        if not value:
            return None
        normalized = value.strip().lower()
        for channel in cls:
            if channel.value.lower() == normalized:
                return channel
        return None


class UVSet(Enum):
    UV1 = "UV1"
    UV2 = "UV2"


class Colorspace(Enum):
    SRGB = "sRGB"
    LINEAR = "Linear"

    @classmethod
    def from_name(cls, value: Optional[str]) -> Optional["Colorspace"]:
        if not value:
            return None
        normalized = value.strip().lower()
        for colorspace in cls:
            if colorspace.value.lower() == normalized:
                return colorspace
        return None


@dataclass(frozen=True)
class CatalogVersion:
    """Version stamp of the authoring tool and exporter."""

    app: str = ""
    build_number: int = 0
    format_version: int = 0
    app_version: str = ""


@dataclass(frozen=True)
class ImageFileEntry:
    filename: str
    colorspace: Optional[Colorspace] = None


@dataclass(frozen=True)
class CatalogTextureRef:
    """A texture reference attached to a catalog property.

    Attributes:
        name: Display name of the texture layer.
        legacy_filename: Inline filename used by older documents.
        channel: Image channel the authoring tool reads.
        channel_explicit: Whether the document named a channel.
        wrap_u: Horizontal tiling.
        wrap_v: Vertical tiling.
        uv_set: UV set the texture is mapped through.
        uv_set_explicit: Whether the document named a UV set.
        image_index: Index into the image-file table, -1 when unset.
        uv_index: UV map index as exported.
        uv_name: UV map name as exported.
    """

    name: Optional[str] = None
    legacy_filename: Optional[str] = None
    channel: Channel = Channel.RGB
    channel_explicit: bool = False
    wrap_u: float = 1.0
    wrap_v: float = 1.0
    uv_set: UVSet = UVSet.UV1
    uv_set_explicit: bool = False
    image_index: int = -1
    uv_index: int = 0
    uv_name: Optional[str] = None


@dataclass(frozen=True)
class CatalogProperty:
    """A named material property with an optional literal and textures.

    The literal is parsed once on construction into ``vector`` and
    ``vector_length``.
    """

    name: str
    raw_value: Optional[str] = None
    textures: Tuple[CatalogTextureRef, ...] = ()
    vector: Tuple[float, ...] = field(init=False, default=(0.0,) * MAX_ARITY)
    vector_length: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.raw_value is None:
            return
        parsed = parse_numeric_value(self.raw_value, MAX_ARITY)
        object.__setattr__(self, "vector", parsed.values)
        object.__setattr__(self, "vector_length", parsed.count)

    @property
    def values(self) -> Tuple[float, ...]:
        """Return only the successfully parsed components."""
        return self.vector[: self.vector_length]


@dataclass(frozen=True)
class CatalogMaterial:
    id: str
    name: str
    kind: str = ""
    properties: Tuple[CatalogProperty, ...] = ()

    def get_property(self, name: str) -> Optional[CatalogProperty]:
        """Return the first property with the given name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(frozen=True)
class CatalogDocument:
    """Root of a catalog document.

    Attributes:
        use_root_texture_path: Whether textures resolve against root_texture_path.
        root_texture_path: Absolute texture directory outside the project.
        version: Authoring tool version stamp.
        materials: Materials in document order.
        image_files: Image-file table referenced by texture image indices.
    """

    use_root_texture_path: bool = False
    root_texture_path: Optional[str] = None
    version: CatalogVersion = field(default_factory=CatalogVersion)
    materials: Tuple[CatalogMaterial, ...] = ()
    image_files: Tuple[ImageFileEntry, ...] = ()

    def get_material(self, name: str) -> Optional[CatalogMaterial]:
        """Return the first material whose name matches.

        Duplicate names are not rejected; the first entry wins.
        """
        for material in self.materials:
            if material.name == name:
                return material
        return None

    def image_file(self, index: int) -> Optional[ImageFileEntry]:
        """Return the image-file entry at ``index`` when it is in range."""
        if index < 0 or index >= len(self.image_files):
            return None
        return self.image_files[index]

    def texture_filename(self, texture: CatalogTextureRef) -> Optional[str]:
        """Return the filename a texture reference points at.

        A set image index must be in range of the image-file table; an
        out-of-range index resolves to no texture. Unset indices fall back
        to the legacy inline filename.
        """
        if texture.image_index >= 0:
            entry = self.image_file(texture.image_index)
            if entry is None or not entry.filename:
                return None
            return entry.filename
        return texture.legacy_filename or None

    def texture_colorspace(self, texture: CatalogTextureRef) -> Optional[Colorspace]:
        entry = self.image_file(texture.image_index)
        if entry is None:
            return None
        return entry.colorspace
