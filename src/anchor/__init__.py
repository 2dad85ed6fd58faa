"""Anchor: catalog local folders and files and open them fast."""

from importlib import metadata as _metadata

DISTRIBUTION = "anchor-references"

__all__ = ["DISTRIBUTION", "__version__"]


def __getattr__(name: str):
    if name == "__version__":
        try:
            return _metadata.version(DISTRIBUTION)
        except _metadata.PackageNotFoundError:
            return "0.0.0+unknown"
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
