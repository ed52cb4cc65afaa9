"""
PackSync - Models Package

Contains the manifest data model and the sync phase enumeration.

Author: PackSync Project
"""

from .manifest import FileDescriptor, Manifest
from .sync_phase import SyncPhase

__all__ = [
    'FileDescriptor',
    'Manifest',
    'SyncPhase'
]
