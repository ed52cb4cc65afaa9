"""
PackSync - Operations Package

This package contains the sync client and its checksum and progress helpers.
"""

from .checksum import MISSING_CHECKSUM, compute_checksum
from .progress import ProgressSink
from .sync_client import SyncClient

__all__ = [
    'MISSING_CHECKSUM',
    'compute_checksum',
    'ProgressSink',
    'SyncClient'
]
