"""
Core processing modules for donation splitting.

This package contains:
- aggregate: Bucket summaries and run statistics
- cells: Date and amount interpretation of raw cells
- classify: Cent-key classification and duplicate detection
- columns: Header matching
- config: Application configuration and settings
- exceptions: Custom exception classes
- exporters: CSV and Excel export functionality
- logger: Logging configuration
- mapping: Bucket mapping import/export helpers
- parsing: Grid loading and record parsing
- schema: Pydantic models for data validation
"""
