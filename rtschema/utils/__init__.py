"""Shared helpers: logging setup and YAML source locations."""
