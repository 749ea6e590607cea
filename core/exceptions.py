"""
Custom exceptions for better error handling.
"""
from typing import Any, Dict, List, Optional


class DonationSplitError(Exception):
    """Base exception for all donation split errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.
        
        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FileProcessingError(DonationSplitError):
    """Raised when file processing fails."""
    pass


class ValidationError(DonationSplitError):
    """Raised when bucket mapping input is invalid."""
    pass


class ParsingError(DonationSplitError):
    """Raised when a spreadsheet cannot be decoded into a grid."""
    pass


class ExportError(DonationSplitError):
    """Raised when CSV or Excel export fails."""
    pass


class ConfigurationError(DonationSplitError):
    """Raised when configuration is invalid."""
    pass


class MissingColumnsError(ConfigurationError):
    """Raised when the header row lacks a required date or amount column."""
    
    def __init__(self, missing: List[str], details: Optional[Dict[str, Any]] = None):
        self.missing = list(missing)
        super().__init__(
            f"Required columns not found: {', '.join(self.missing)}",
            details={"missing_columns": self.missing, **(details or {})}
        )


class DataNotFoundError(DonationSplitError):
    """Raised when required data is not found."""
    pass
