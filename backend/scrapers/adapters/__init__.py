"""Source-specific extractors."""
