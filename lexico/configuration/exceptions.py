class ConfigError(Exception):
    """Base exception for analysis configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when no configuration matches the requested id/version."""


class NoActiveConfigError(ConfigError):
    """Raised when no configuration is active for a purpose."""


class ConfigVersionConflictError(ConfigError):
    """Raised when publishing a version that is not exactly latest + 1."""


class InvalidConfigurationError(ConfigError):
    """Raised when a configuration declares unknown or misordered stages."""
