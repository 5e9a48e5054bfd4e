"""
Integration with the external extraction provider.

This package contains:
- client: REST client for the LLM extraction worker
"""
