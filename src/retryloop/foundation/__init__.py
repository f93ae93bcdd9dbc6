"""Foundation layer: configuration and terminal error types."""

from .config import LoggingSettings, RetryloopSettings, RetrySettings, clear_settings_cache, get_settings
from .errors import AttemptRecord, InterruptedWait, RetryError

__all__ = [
    "AttemptRecord",
    "InterruptedWait",
    "LoggingSettings",
    "RetryError",
    "RetryloopSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
