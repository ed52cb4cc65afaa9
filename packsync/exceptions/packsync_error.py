"""
PackSync - Base Error Exception

Base exception class for all PackSync errors.

Author: PackSync Project
"""


class PackSyncError(Exception):
    """Base exception for PackSync errors."""
    pass
