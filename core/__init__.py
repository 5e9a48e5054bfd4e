"""
Core modules for quick note ingestion.

This package contains:
- config: Application configuration and settings
- exceptions: Custom exception classes
- logger: Logging configuration
- matching: Label resolution and category learning
- normalize: Provider output normalization
- schema: Pydantic models for data validation
"""
