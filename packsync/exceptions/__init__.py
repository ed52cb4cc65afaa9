"""
PackSync - Exceptions Package

Contains all exception classes raised by PackSync.

Author: PackSync Project
"""

from .packsync_error import PackSyncError
from .auth_error import PackSyncAuthError
from .server_error import PackSyncServerError
from .config_error import PackSyncConfigError

__all__ = [
    'PackSyncError',
    'PackSyncAuthError',
    'PackSyncServerError',
    'PackSyncConfigError'
]
