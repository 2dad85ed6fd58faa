"""Errors raised while loading or saving Anchor configuration."""


class ConfigError(Exception):
    """Raised when configuration data cannot be parsed or validated."""
