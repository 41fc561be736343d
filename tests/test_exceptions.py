"""Tests for custom exception hierarchy."""

import pytest

from mtl_catalog.core.exceptions import (
    CatalogError,
    ConfigurationError,
    FileSystemError,
    MaterialAssetError,
    MtlCatalogError,
    ShaderTemplateError,
    ValidationError,
)


def test_base_exception_with_message():
    """Base exception stores message."""
    exc = MtlCatalogError("Test error")
    assert exc.message == "Test error"
    assert exc.details == {}
    assert str(exc) == "Test error"


def test_base_exception_with_details():
    """Base exception stores details and shows them in str()."""
    exc = MtlCatalogError("Test error", details={"key": "value", "code": 123})
    assert exc.message == "Test error"
    assert exc.details == {"key": "value", "code": 123}
    assert "details=" in str(exc)


def test_exception_inheritance():
    """All custom exceptions inherit from MtlCatalogError."""
    exceptions = [
        CatalogError,
        ShaderTemplateError,
        ValidationError,
        FileSystemError,
        ConfigurationError,
        MaterialAssetError,
    ]

    for exc_class in exceptions:
        exc = exc_class("Test message")
        assert isinstance(exc, MtlCatalogError)
        assert isinstance(exc, Exception)


def test_shader_template_error_with_details():
    """ShaderTemplateError carries the missing template name."""
    exc = ShaderTemplateError(
        "Unable to find shader", details={"shader": "Standard", "material": "Hull"}
    )
    assert exc.details["shader"] == "Standard"
    assert exc.details["material"] == "Hull"


def test_details_are_copied():
    """Mutating the source mapping does not change the exception."""
    details = {"path": "a"}
    exc = FileSystemError("boom", details=details)
    details["path"] = "b"
    assert exc.details["path"] == "a"


def test_catch_by_base_class():
    """Specific errors can be caught as MtlCatalogError."""
    with pytest.raises(MtlCatalogError):
        raise CatalogError("bad document")
