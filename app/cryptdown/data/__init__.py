"""Bundled data files for cryptdown."""
