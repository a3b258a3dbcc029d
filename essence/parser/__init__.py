"""HTML parsing helpers."""
