"""
API package - HTTP boundary for the ingestion service.

This package provides:
- Pydantic param/payload models (validation at the boundary)
- Global middleware (request_id, error_envelope)
"""
