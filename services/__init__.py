"""
Service layer for business logic.

This package contains service classes for bearer credential
verification, quick note parsing, and quick note processing.

NoteIngestService backs the /parse-note endpoint. NoteProcessor is a
library entry point for callers that own note persistence: it turns saved
quick notes into transactions resolved against the user's accounts and
categories, and moves each note from pending to success or error.
"""
