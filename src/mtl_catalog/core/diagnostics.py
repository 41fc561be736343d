"""Author-facing diagnostics for wiring, channel and colorspace problems."""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional, Sequence


logger = logging.getLogger(__name__)

NOTICE_TITLE = "Catalog Material Importer"


class DiagnosticKind(Enum):
    CHANNEL_MISMATCH = "channel_mismatch"
    COLORSPACE_MISMATCH = "colorspace_mismatch"
    SMOOTHNESS_FROM_ALBEDO_ALPHA = "smoothness_from_albedo_alpha"
    SMOOTHNESS_FROM_METALLIC_ALPHA = "smoothness_from_metallic_alpha"
    METALLIC_FROM_SMOOTHNESS_RED = "metallic_from_smoothness_red"
    SMOOTHNESS_WIRING_MISMATCH = "smoothness_wiring_mismatch"
    MISSING_MODEL = "missing_model"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal notice about how a catalog maps onto the shading model.

    Attributes:
        kind: Diagnostic category.
        subject: Material name, or asset path for pipeline diagnostics.
        message: Human-readable explanation.
        property_name: Catalog property the notice is about, if any.
    """

    kind: DiagnosticKind
    subject: str
    message: str
    property_name: Optional[str] = None


def format_notice(subject: str, diagnostics: Sequence[Diagnostic]) -> str:
    """Aggregate diagnostics into one multi-line notice.

    Args:
        subject: Material name or asset path the notice is about.
        diagnostics: Diagnostics to aggregate.

    Returns:
        str: Notice text, empty when there is nothing to report.
    """
    if not diagnostics:
        return ""
    lines = [f"{NOTICE_TITLE}: {len(diagnostics)} issue(s) for '{subject}'"]
    lines.extend(f"- {diagnostic.message}" for diagnostic in diagnostics)
    return "\n".join(lines)


def log_diagnostics(
    subject: str,
    diagnostics: Sequence[Diagnostic],
    active_logger: Optional[logging.Logger] = None,
) -> str:
    """Write a single multi-line warning for the diagnostics and return it."""
    notice = format_notice(subject, diagnostics)
    if notice:
        (active_logger or logger).warning(notice)
    return notice
