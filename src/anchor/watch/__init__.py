"""Filesystem watch support for Anchor."""

from .service import DataFileWatcher

__all__ = ["DataFileWatcher"]
