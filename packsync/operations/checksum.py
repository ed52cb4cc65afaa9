"""
PackSync - Checksum Module

Computes content hashes for local files so the sync client can skip files
that already match the server manifest.

Author: PackSync Project
"""

import hashlib
import logging
from pathlib import Path
from typing import Union

# Configure logging
logger = logging.getLogger(__name__)

# Returned for missing or unreadable files. Manifest checksums are never empty.
MISSING_CHECKSUM = ""


# ==================== File Hash Calculation ====================

def compute_checksum(file_path: Union[str, Path], chunk_size: int = 8192) -> str:
    """
    Calculate SHA-256 hash of a file using chunked reading.

    Args:
        file_path: Path to file to hash
        chunk_size: Size of chunks to read (default 8KB)

    Returns:
        str: Hex-encoded SHA-256 hash, or MISSING_CHECKSUM if the file does
             not exist or cannot be read
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        logger.debug(f"No local file at {file_path}")
        return MISSING_CHECKSUM

    sha256_hash = hashlib.sha256()

    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                sha256_hash.update(chunk)
    except OSError as e:
        logger.warning(f"Failed to read {file_path} for checksum: {e}")
        return MISSING_CHECKSUM

    hash_hex = sha256_hash.hexdigest()
    logger.debug(f"Calculated hash for {file_path.name}: {hash_hex}")
    return hash_hex
