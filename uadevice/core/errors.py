"""Domain-specific errors for uadevice."""


class UADeviceError(Exception):
    """Base error for uadevice."""


class ConfigurationError(UADeviceError):
    """Raised when a rule record or rule file is malformed."""


class RulesLoadError(UADeviceError):
    """Raised when reading rule sources fails."""
