"""Importable package shipping a bundled default configuration."""
