"""Composite flood inundation maps from per-reach FIM libraries."""

__version__ = "0.4.0"
