"""
Unit tests for custom exceptions.
"""
from core.exceptions import (
    ConfigurationError,
    DataNotFoundError,
    DonationSplitError,
    ExportError,
    FileProcessingError,
    MissingColumnsError,
    ParsingError,
    ValidationError,
)


def test_base_exception():
    """Test base exception class."""
    exc = DonationSplitError("Test error", details={"key": "value"})
    assert str(exc) == "Test error"
    assert exc.message == "Test error"
    assert exc.details == {"key": "value"}


def test_exception_hierarchy():
    """Test exception inheritance."""
    assert issubclass(FileProcessingError, DonationSplitError)
    assert issubclass(ValidationError, DonationSplitError)
    assert issubclass(ParsingError, DonationSplitError)
    assert issubclass(ExportError, DonationSplitError)
    assert issubclass(ConfigurationError, DonationSplitError)
    assert issubclass(DataNotFoundError, DonationSplitError)
    assert issubclass(MissingColumnsError, ConfigurationError)


def test_exception_with_details():
    """Test exception with details dictionary."""
    details = {"file_path": "/test/path", "line": 42}
    exc = ParsingError("Parsing failed", details=details)
    assert exc.message == "Parsing failed"
    assert exc.details["file_path"] == "/test/path"
    assert exc.details["line"] == 42


def test_exception_without_details():
    """Test exception without details."""
    exc = ExportError("Disk full")
    assert exc.message == "Disk full"
    assert exc.details == {}


def test_missing_columns_error_names_categories():
    """Test the missing column categories appear in message and details."""
    exc = MissingColumnsError(["date", "amount"], details={"headers": ["foo"]})
    assert exc.missing == ["date", "amount"]
    assert "date" in exc.message
    assert "amount" in exc.message
    assert exc.details["missing_columns"] == ["date", "amount"]
    assert exc.details["headers"] == ["foo"]
