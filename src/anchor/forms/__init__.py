"""Reference authoring helpers."""

from .path_check import MISSING_PATH_WARNING, PathCheckAssistant
from .session import FormFields, ReferenceFormSession

__all__ = ["FormFields", "MISSING_PATH_WARNING", "PathCheckAssistant", "ReferenceFormSession"]
