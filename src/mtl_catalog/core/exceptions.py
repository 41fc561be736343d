"""Custom exceptions for catalog material import."""

from typing import Any, Mapping, Optional


class MtlCatalogError(Exception):
    """Base exception for all mtl_catalog errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary of additional error context.
    """

    def __init__(
        self, message: str, details: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary of additional error context.
        """
        super().__init__(message)
        self._details = dict(details) if details else {}

    @property
    def message(self) -> str:
        """Return the human-readable error message."""
        if self.args:
            return str(self.args[0])
        return ""

    @property
    def details(self) -> Mapping[str, Any]:
        """Return an immutable view of error details."""
        return self._details

    def __str__(self) -> str:
        message = self.message
        if not self._details:
            return message
        return f"{message} (details={self._details!r})"


class CatalogError(MtlCatalogError):
    """Raised when a catalog document cannot be converted."""

    pass


class ShaderTemplateError(MtlCatalogError):
    """Raised when the target shading template is unavailable."""

    pass


class ValidationError(MtlCatalogError):
    """Raised when input validation fails."""

    pass


class FileSystemError(MtlCatalogError):
    """Raised when file system operations fail."""

    pass


class ConfigurationError(MtlCatalogError):
    """Raised when configuration is invalid."""

    pass


class MaterialAssetError(MtlCatalogError):
    """Raised when a material asset cannot be read or written."""

    pass
