"""
HTTP API for quick note ingestion.
"""
