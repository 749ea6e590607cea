"""
Service layer for business logic.

This package contains the pipeline entry point (run_pipeline) and the
DonationService class that adds file loading and report export.
"""
