"""Exceptions for custom-config."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or writing configuration file."""

    pass


class ConfigParseError(ConfigError):
    """Error parsing a serialized configuration document."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating configuration data."""

    pass
