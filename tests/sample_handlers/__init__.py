"""Importable subject types and renderers used by the registry tests."""
