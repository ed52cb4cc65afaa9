"""
PackSync - Protocol Constants

Request paths, header names and the Challenge header encoding shared by the
sync client, the security strategies and the server.

Author: PackSync Project
"""

import base64
import binascii
import secrets

from .exceptions import PackSyncAuthError

AUTHENTICATE_PATH = "/authenticate"
MANIFEST_PATH = "/servermanifest.json"
FILES_PATH_PREFIX = "/files/"

CHALLENGE_HEADER = "Challenge"
AUTHENTICATION_HEADER = "Authentication"
CHALLENGE_SIGNATURE_HEADER = "Challenge-Signature"


# ==================== Challenge Encoding ====================

def new_challenge() -> str:
    """Generate random challenge text for the next request."""
    return secrets.token_urlsafe(32)


def encode_challenge(challenge: str) -> str:
    """Encode challenge text for the Challenge response header (base64 of UTF-8)."""
    return base64.b64encode(challenge.encode("utf-8")).decode("ascii")


def decode_challenge(header_value) -> str:
    """
    Decode a Challenge header value back to challenge text.

    Args:
        header_value: Raw header value, may be None if the server sent none

    Returns:
        Decoded challenge text

    Raises:
        PackSyncAuthError: If the header is missing, not base64 or not UTF-8
    """
    if header_value is None:
        raise PackSyncAuthError(f"Server response has no {CHALLENGE_HEADER} header")

    try:
        raw = base64.b64decode(header_value, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PackSyncAuthError(f"Malformed {CHALLENGE_HEADER} header: {e}") from e
