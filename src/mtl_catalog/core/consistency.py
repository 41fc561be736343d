"""Cross-slot consistency checks for the fixed shading model.

Metallic and Smoothness share one texture slot: metallic is read from the
red channel and smoothness from the alpha channel of the same image, or
from the albedo alpha when the shader supports that toggle. Catalogs that
wire these differently are reported, never rejected.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .diagnostics import Diagnostic, DiagnosticKind
from .mapping import MappingRow, PROP_ALBEDO, PROP_METALLIC, PROP_SMOOTHNESS
from .paths import paths_match
from .pending import ResolvedTextureAssignment
from .settings import HostCapabilities
from .target_material import (
    FLOAT_SMOOTHNESS_CHANNEL,
    SMOOTHNESS_FROM_ALBEDO_ALPHA,
    SMOOTHNESS_FROM_METALLIC_ALPHA,
    TargetMaterial,
)


logger = logging.getLogger(__name__)

ResolvedRow = Tuple[MappingRow, ResolvedTextureAssignment]


def check_channels(material_name: str, rows: Sequence[ResolvedRow]) -> List[Diagnostic]:
    """Compare each resolved texture's channel and colorspace with the slot's."""
    diagnostics: List[Diagnostic] = []
    for row, assignment in rows:
        channel = assignment.resolved_channel
        if channel is not None and row.expected_channel is not None:
            if channel is not row.expected_channel:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.CHANNEL_MISMATCH,
                        material_name,
                        f"{material_name}'s {row.source_property} texture is read "
                        f"from the {channel.value} channel, but the shader reads "
                        f"the {row.expected_channel.value} channel. Your results "
                        "may not be as expected.",
                        row.source_property,
                    )
                )
        colorspace = assignment.resolved_colorspace
        if colorspace is not None and row.expected_colorspace is not None:
            if colorspace is not row.expected_colorspace:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.COLORSPACE_MISMATCH,
                        material_name,
                        f"{material_name}'s {row.source_property} image is "
                        f"{colorspace.value}, but the shader expects "
                        f"{row.expected_colorspace.value} data.",
                        row.source_property,
                    )
                )
    return diagnostics


def _albedo_toggle_enabled(
    material: TargetMaterial, capabilities: HostCapabilities
) -> bool:
    if not capabilities.albedo_alpha_smoothness:
        return False
    return (
        material.get_float(FLOAT_SMOOTHNESS_CHANNEL, SMOOTHNESS_FROM_METALLIC_ALPHA)
        == SMOOTHNESS_FROM_ALBEDO_ALPHA
    )


def _path(assignment: Optional[ResolvedTextureAssignment]) -> Optional[str]:
    return assignment.resolved_path if assignment is not None else None


class ConsistencyChecker:
    """Reconcile the Metallic, Smoothness and Albedo texture wiring.

    Args:
        capabilities: Host features; decides whether the albedo-alpha toggle exists.
    """

    def __init__(self, capabilities: Optional[HostCapabilities] = None) -> None:
        self._capabilities = capabilities or HostCapabilities()

    def check(
        self,
        material: TargetMaterial,
        rows: Sequence[ResolvedRow],
        present_properties: Set[str],
    ) -> Tuple[List[ResolvedRow], List[Diagnostic]]:
        """Run every check before assignments are applied.

        Args:
            material: Target material; its smoothness toggle may be switched.
            rows: Resolved texture rows in mapping-table order.
            present_properties: Catalog property names present on the material.

        Returns:
            Tuple[List[ResolvedRow], List[Diagnostic]]: The rows to apply, with
            redundant smoothness assignments removed, and the diagnostics.
        """
        name = material.name
        diagnostics = check_channels(name, rows)

        by_property: Dict[str, ResolvedTextureAssignment] = {
            row.source_property: assignment for row, assignment in rows
        }
        metal = _path(by_property.get(PROP_METALLIC))
        albedo = _path(by_property.get(PROP_ALBEDO))
        smooth = _path(by_property.get(PROP_SMOOTHNESS))
        supported = self._capabilities.albedo_alpha_smoothness

        if smooth is None:
            if PROP_SMOOTHNESS in present_properties:
                diagnostic = self._implicit_smoothness(material, metal, albedo)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)
            return list(rows), diagnostics

        suppress = False
        if metal is not None and paths_match(smooth, metal):
            suppress = True
            if supported:
                material.set_float(FLOAT_SMOOTHNESS_CHANNEL, SMOOTHNESS_FROM_METALLIC_ALPHA)
        elif albedo is not None and supported and paths_match(smooth, albedo):
            suppress = True
            material.set_float(FLOAT_SMOOTHNESS_CHANNEL, SMOOTHNESS_FROM_ALBEDO_ALPHA)
        elif metal is None:
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.METALLIC_FROM_SMOOTHNESS_RED,
                    name,
                    f"{name}'s Smoothness is driven by a texture but Metallic is "
                    "not. The shader will read metallic from the red channel of "
                    "the Smoothness texture, not the value specified.",
                    PROP_SMOOTHNESS,
                )
            )
        else:
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.SMOOTHNESS_WIRING_MISMATCH,
                    name,
                    f"The textures specified for {name}'s Metallic and Smoothness "
                    "don't match. The shader reads metallic from the red channel "
                    "and smoothness from the alpha channel of the same texture.",
                    PROP_SMOOTHNESS,
                )
            )

        if suppress:
            logger.debug("%s: Smoothness shares its texture; not assigning it.", name)
            rows = [
                (row, assignment)
                for row, assignment in rows
                if row.source_property != PROP_SMOOTHNESS
            ]
        return list(rows), diagnostics

    def _implicit_smoothness(
        self,
        material: TargetMaterial,
        metal: Optional[str],
        albedo: Optional[str],
    ) -> Optional[Diagnostic]:
        name = material.name
        if _albedo_toggle_enabled(material, self._capabilities):
            if metal is not None or albedo is not None:
                return Diagnostic(
                    DiagnosticKind.SMOOTHNESS_FROM_ALBEDO_ALPHA,
                    name,
                    f"{name}'s Smoothness is not driven by a texture. The shader "
                    "will read smoothness from the alpha channel of the Albedo "
                    "texture, not the value specified.",
                    PROP_SMOOTHNESS,
                )
            return None
        if metal is not None:
            return Diagnostic(
                DiagnosticKind.SMOOTHNESS_FROM_METALLIC_ALPHA,
                name,
                f"{name}'s Metallic is driven by a texture but Smoothness is not. "
                "The shader will read smoothness from the alpha channel of the "
                "Metallic texture, not the value specified.",
                PROP_SMOOTHNESS,
            )
        return None
