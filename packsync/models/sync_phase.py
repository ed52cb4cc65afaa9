"""
PackSync - Sync Phase Model

Contains the SyncPhase enum describing where a sync job is in the
authenticate, manifest, download sequence.

Author: PackSync Project
"""

from enum import Enum


class SyncPhase(Enum):
    """
    Enum representing the phases of a single sync run.

    States:
    - IDLE: Job created, nothing sent yet
    - AUTHENTICATING: Handshake request to /authenticate in progress
    - MANIFEST_FETCH: Requesting /servermanifest.json
    - FILE_ITERATION: Walking the manifest, downloading changed files
    - DONE: Every file processed without error
    - FAILED: A phase failed and the run was aborted
    """
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    MANIFEST_FETCH = "manifest_fetch"
    FILE_ITERATION = "file_iteration"
    DONE = "done"
    FAILED = "failed"
