"""
PackSync - Authentication Error Exception

Exception raised when the challenge handshake or request signing fails.

Author: PackSync Project
"""

from .packsync_error import PackSyncError


class PackSyncAuthError(PackSyncError):
    """Exception for authentication errors."""
    pass
