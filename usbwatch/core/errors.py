"""Domain-specific errors for usbwatch.

Discovery itself never raises; these cover the configuration and lifecycle
surfaces around it.
"""


class UsbwatchError(Exception):
    """Base error for usbwatch."""


class ConfigLoadError(UsbwatchError):
    """Raised when the config file exists but cannot be read."""


class ConfigValidationError(UsbwatchError):
    """Raised when the config file does not conform to schema or semantics."""


class PollerError(UsbwatchError):
    """Raised when the background poller is driven out of order."""
