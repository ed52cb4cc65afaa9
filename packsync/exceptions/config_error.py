"""
PackSync - Configuration Error Exception

Exception raised when configuration or security settings are invalid.

Author: PackSync Project
"""

from .packsync_error import PackSyncError


class PackSyncConfigError(PackSyncError):
    """Exception for invalid configuration."""
    pass
