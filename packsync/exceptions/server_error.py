"""
PackSync - Server Error Exception

Exception raised for transport failures and unexpected server responses.

Author: PackSync Project
"""

from .packsync_error import PackSyncError


class PackSyncServerError(PackSyncError):
    """Exception for server errors."""
    pass
