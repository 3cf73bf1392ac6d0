"""Bundled default configuration (config.yaml)."""
