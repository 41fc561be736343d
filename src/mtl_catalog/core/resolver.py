"""Resolve catalog materials into target material parameter assignments."""

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Sequence, Set, Tuple

from .catalog import CatalogDocument, CatalogMaterial, CatalogProperty, CatalogTextureRef, UVSet
from .consistency import ConsistencyChecker, ResolvedRow
from .diagnostics import Diagnostic
from .exceptions import ShaderTemplateError
from .interfaces import AssetStore
from .locator import ResourceLocator
from .mapping import (
    MATERIAL_PARAMETERS,
    MappingRow,
    PROP_ALBEDO,
    PROP_DETAIL_ALBEDO,
    PROP_EMISSION,
    PROP_EMISSIVE_LEVEL,
    PROP_OPACITY,
)
from .pending import PendingResourceQueue, PendingState, ResolvedTextureAssignment
from .settings import HostCapabilities
from .target_material import (
    BLACK,
    COLOR_BASE,
    COLOR_EMISSION,
    DEFAULT_SHADER,
    EMISSION_EPSILON,
    FLOAT_UV_SEC,
    KEYWORD_EMISSION,
    WHITE,
    BlendMode,
    Color,
    TargetMaterial,
    apply_slot_keywords,
    setup_blend_mode,
)


logger = logging.getLogger(__name__)

# Secondary UV flag written for the detail albedo's UV set.
DETAIL_UV_SET_FLAGS = {UVSet.UV1: 1.0, UVSet.UV2: 0.0}


@dataclass(frozen=True)
class ResolutionContext:
    """Where a material's textures are searched for and staged.

    Attributes:
        asset_directory: Directory of the owning mesh asset.
        search_paths: Directories from the asset up to the project root.
        texture_root: Absolute directory external texture filenames are
            relative to.
        force_import: Re-stage external textures even when imported copies
            exist, and overwrite queued requests.
    """

    asset_directory: str
    search_paths: Tuple[str, ...]
    texture_root: Optional[str] = None
    force_import: bool = False


@dataclass
class ResolutionResult:
    """Outcome of resolving one target material.

    Attributes:
        material: The updated target material.
        catalog_material: Catalog entry the material was resolved from.
        assignments: Texture assignments, applied or queued.
        diagnostics: Non-fatal wiring/channel/colorspace notices.
    """

    material: TargetMaterial
    catalog_material: CatalogMaterial
    assignments: List[ResolvedTextureAssignment] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def pending(self) -> List[ResolvedTextureAssignment]:
        return [a for a in self.assignments if a.state is not PendingState.APPLIED]

    @property
    def applied(self) -> List[ResolvedTextureAssignment]:
        return [a for a in self.assignments if a.state is PendingState.APPLIED]


def _color_from(prop: Optional[CatalogProperty], base: Color) -> Color:
    if prop is None or prop.vector_length != 3:
        return base
    r, g, b = prop.values
    return Color(r, g, b, base.a)


def _scalar_from(prop: Optional[CatalogProperty]) -> Optional[float]:
    if prop is None or prop.vector_length != 1:
        return None
    return prop.values[0]


def derive_base_color(material: CatalogMaterial) -> Color:
    """Base colour: white, Albedo RGB if given, alpha from Opacity."""
    color = _color_from(material.get_property(PROP_ALBEDO), WHITE)
    opacity = _scalar_from(material.get_property(PROP_OPACITY))
    if opacity is not None:
        color = color._replace(a=opacity)
    return color


def derive_emission_color(material: CatalogMaterial) -> Color:
    """Emission colour: black, Emission RGB if given, times Emissive Level."""
    color = _color_from(material.get_property(PROP_EMISSION), BLACK)
    level = _scalar_from(material.get_property(PROP_EMISSIVE_LEVEL))
    if level is not None:
        color = color.scaled(level)
    return color


class MaterialResolver:
    """Convert a catalog material entry into concrete parameter values.

    Args:
        store: Host asset store.
        queue: Shared pending resource queue.
        capabilities: Host features resolved at startup.
        mapping: Ordered mapping table rows.
        shader_name: Shading template every target material uses.
        locator: Optional locator override, built from the store by default.
    """

    def __init__(
        self,
        store: AssetStore,
        queue: PendingResourceQueue,
        capabilities: Optional[HostCapabilities] = None,
        mapping: Sequence[MappingRow] = MATERIAL_PARAMETERS,
        shader_name: str = DEFAULT_SHADER,
        locator: Optional[ResourceLocator] = None,
    ) -> None:
        self._store = store
        self._queue = queue
        self._capabilities = capabilities or store.capabilities
        self._mapping = tuple(mapping)
        self._shader_name = shader_name
        self._locator = locator or ResourceLocator(store)
        self._checker = ConsistencyChecker(self._capabilities)

    def resolve(
        self,
        material: TargetMaterial,
        document: CatalogDocument,
        context: ResolutionContext,
    ) -> Optional[ResolutionResult]:
        """Resolve ``material`` against its catalog entry.

        Args:
            material: Target material; its name is the catalog join key.
            document: Freshly loaded catalog document.
            context: Search and staging locations.

        Returns:
            Optional[ResolutionResult]: None when the catalog has no entry for
            the material.

        Raises:
            ShaderTemplateError: If the shading template is unavailable.
        """
        catalog_material = document.get_material(material.name)
        if catalog_material is None:
            logger.debug("Catalog has no definition for material %s", material.name)
            return None

        self._apply_shader(material)
        self._apply_colors(material, catalog_material)

        resolved_rows: List[ResolvedRow] = []
        cleared_slots: Set[str] = set()
        for row in self._mapping:
            prop = row.find_property(catalog_material)
            if prop is None:
                continue

            assignment = None
            if row.texture_slot:
                assignment = self._resolve_texture(
                    material, document, row, prop, context
                )
                if assignment is None:
                    cleared_slots.add(row.texture_slot)
                else:
                    resolved_rows.append((row, assignment))

            if assignment is None and row.scalar_slot:
                self._apply_scalar(material, row, prop)

        kept_rows, diagnostics = self._checker.check(
            material,
            resolved_rows,
            {prop.name for prop in catalog_material.properties},
        )

        assigned_slots = {row.texture_slot for row, _ in kept_rows}
        for slot in sorted(cleared_slots - assigned_slots):
            material.set_texture(slot, None)
            logger.debug("Clearing texture for %s: %s", material.name, slot)

        result = ResolutionResult(material, catalog_material, diagnostics=diagnostics)
        for _, assignment in kept_rows:
            result.assignments.append(self._apply_assignment(assignment, context))
        return result

    def _apply_shader(self, material: TargetMaterial) -> None:
        shader = self._store.find_shader(self._shader_name)
        if shader is None:
            raise ShaderTemplateError(
                f"Unable to find shader: {self._shader_name}",
                details={"material": material.name, "shader": self._shader_name},
            )
        material.set_shader(shader)

    def _apply_colors(
        self, material: TargetMaterial, catalog_material: CatalogMaterial
    ) -> None:
        base_color = derive_base_color(catalog_material)
        material.set_color(COLOR_BASE, base_color)
        logger.debug("Setting %s: Color to %s", material.name, tuple(base_color))
        if base_color.a < 1.0:
            setup_blend_mode(
                material,
                BlendMode.FADE,
                override_tags=self._capabilities.override_tag_on_create,
            )
            logger.debug("Setting %s: to Fade.", material.name)

        emission = derive_emission_color(catalog_material)
        if emission.max_component > EMISSION_EPSILON:
            material.enable_keyword(KEYWORD_EMISSION)
        material.set_color(COLOR_EMISSION, emission)
        logger.debug("Setting %s: Emission Color to %s", material.name, tuple(emission))

    def _apply_texture_settings(
        self,
        material: TargetMaterial,
        row: MappingRow,
        texture: CatalogTextureRef,
    ) -> None:
        if row.source_property not in (PROP_ALBEDO, PROP_DETAIL_ALBEDO):
            return
        if row.source_property == PROP_DETAIL_ALBEDO and texture.uv_set_explicit:
            material.set_float(FLOAT_UV_SEC, DETAIL_UV_SET_FLAGS[texture.uv_set])
        scale = (texture.wrap_u, texture.wrap_v)
        material.set_texture_scale(row.texture_slot, scale)
        logger.debug(
            "Setting %s: %s Wrap UV to %s", material.name, row.source_property, scale
        )

    def _resolve_texture(
        self,
        material: TargetMaterial,
        document: CatalogDocument,
        row: MappingRow,
        prop: CatalogProperty,
        context: ResolutionContext,
    ) -> Optional[ResolvedTextureAssignment]:
        for texture in prop.textures:
            self._apply_texture_settings(material, row, texture)
            filename = document.texture_filename(texture)
            if not filename:
                continue
            located = self._locator.locate(
                filename,
                context.search_paths,
                context.texture_root,
                context.asset_directory,
                force=context.force_import,
            )
            if not located.found:
                logger.debug(
                    "%s: no texture found for %s (%s)", material.name, prop.name, filename
                )
                continue
            return ResolvedTextureAssignment(
                material=material,
                target_slot=row.texture_slot,
                source_property=prop.name,
                resolved_path=located.path,
                resolved_channel=texture.channel if texture.channel_explicit else None,
                resolved_colorspace=document.texture_colorspace(texture),
                state=PendingState.PENDING,
                resource=located.resource,
            )
        return None

    def _apply_scalar(
        self, material: TargetMaterial, row: MappingRow, prop: CatalogProperty
    ) -> None:
        values = prop.values
        if len(values) == 1:
            material.set_float(row.scalar_slot, values[0])
            logger.debug("Setting %s: %s to %s", material.name, prop.name, values[0])
        elif len(values) > 1:
            vector = list(material.get_vector(row.scalar_slot))
            for index, value in enumerate(values):
                vector[index] = value
            material.set_vector(row.scalar_slot, vector)
            logger.debug("Setting %s: %s to %s", material.name, prop.name, vector)

    def _apply_assignment(
        self, assignment: ResolvedTextureAssignment, context: ResolutionContext
    ) -> ResolvedTextureAssignment:
        material = assignment.material
        if assignment.is_satisfied:
            material.set_texture(assignment.target_slot, assignment.resource)
            apply_slot_keywords(material, assignment.target_slot)
            assignment.state = PendingState.APPLIED
            logger.debug(
                "Setting %s: %s to %s",
                material.name,
                assignment.source_property,
                assignment.resolved_path,
            )
            return assignment

        if self._queue.register(assignment, force=context.force_import):
            logger.debug(
                "Deferred setting %s: %s to %s",
                material.name,
                assignment.source_property,
                assignment.resolved_path,
            )
            return self._queue.entry_for(material, assignment.target_slot) or assignment

        logger.debug(
            "%s: %s already has a texture waiting to be applied, skipping %s",
            material.name,
            assignment.target_slot,
            assignment.resolved_path,
        )
        return self._queue.entry_for(material, assignment.target_slot) or assignment
