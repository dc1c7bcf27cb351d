"""Hierarchical virtual filesystem over a remote WebDAV store."""

__version__ = "0.1.0"
