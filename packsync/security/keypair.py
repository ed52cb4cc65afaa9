"""
PackSync - Key Pair Security Strategy

Challenge-response authentication with Ed25519 keys.

Client settings:
    private_key_path: PEM (PKCS#8) Ed25519 private key
    private_key_passphrase: optional passphrase for the key

Server settings:
    authorized_keys_path: file of OpenSSH "ssh-ed25519 AAAA..." lines

The client identifies itself by key fingerprint in the Authentication header.
Every server response carries a fresh challenge for that fingerprint; the
next signed request must carry an Ed25519 signature of exactly that
challenge in the Challenge-Signature header. Each issued challenge is
accepted at most once; a rejected signature does not consume it.

Author: PackSync Project
"""

import base64
import hashlib
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from fastapi import Request, Response

from ..exceptions import PackSyncAuthError, PackSyncConfigError
from ..protocol import (
    AUTHENTICATE_PATH,
    AUTHENTICATION_HEADER,
    CHALLENGE_HEADER,
    CHALLENGE_SIGNATURE_HEADER,
    encode_challenge,
    new_challenge
)
from .base import SecurityStrategy

# Configure logging
logger = logging.getLogger(__name__)


def key_fingerprint(public_key: Ed25519PublicKey) -> str:
    """SHA-256 hex digest of the raw public key bytes."""
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw
    )
    return hashlib.sha256(raw).hexdigest()


def load_authorized_keys(path: Path) -> Dict[str, Ed25519PublicKey]:
    """
    Read an authorized keys file.

    Blank lines and lines starting with '#' are ignored.

    Args:
        path: File containing one OpenSSH public key per line

    Returns:
        Mapping of fingerprint to public key

    Raises:
        PackSyncConfigError: If a line is not an Ed25519 public key
    """
    keys: Dict[str, Ed25519PublicKey] = {}
    for line_number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            public_key = serialization.load_ssh_public_key(line.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise PackSyncConfigError(f"{path}:{line_number}: invalid public key: {e}") from e
        if not isinstance(public_key, Ed25519PublicKey):
            raise PackSyncConfigError(f"{path}:{line_number}: only ssh-ed25519 keys are supported")
        keys[key_fingerprint(public_key)] = public_key
    return keys


class KeyPairSecurityStrategy(SecurityStrategy):
    """Ed25519 signature over the rolling challenge."""

    name = "keypair"

    def __init__(self):
        # Client state
        self.private_key: Optional[Ed25519PrivateKey] = None
        self.fingerprint: Optional[str] = None
        self.challenge: Optional[str] = None

        # Server state
        self.authorized_keys: Dict[str, Ed25519PublicKey] = {}
        self.issued_challenges: Dict[str, str] = {}
        self._lock = threading.Lock()

    def validate_configuration(self, settings: Dict[str, Any]):
        private_key_path = settings.get("private_key_path")
        authorized_keys_path = settings.get("authorized_keys_path")

        if not private_key_path and not authorized_keys_path:
            raise PackSyncConfigError(
                "Key pair security requires 'private_key_path' (client) or 'authorized_keys_path' (server)"
            )
        for key, value in (("private_key_path", private_key_path), ("authorized_keys_path", authorized_keys_path)):
            if value and not Path(value).is_file():
                raise PackSyncConfigError(f"'{key}' does not point to a file: {value}")

    def initialize(self, settings: Dict[str, Any]):
        private_key_path = settings.get("private_key_path")
        if private_key_path:
            passphrase = settings.get("private_key_passphrase")
            try:
                private_key = serialization.load_pem_private_key(
                    Path(private_key_path).read_bytes(),
                    password=passphrase.encode("utf-8") if passphrase else None
                )
            except (ValueError, TypeError) as e:
                raise PackSyncConfigError(f"Cannot load private key {private_key_path}: {e}") from e
            if not isinstance(private_key, Ed25519PrivateKey):
                raise PackSyncConfigError(f"{private_key_path} is not an Ed25519 private key")
            self.use_private_key(private_key)

        authorized_keys_path = settings.get("authorized_keys_path")
        if authorized_keys_path:
            self.authorized_keys = load_authorized_keys(Path(authorized_keys_path))
            logger.info(f"Loaded {len(self.authorized_keys)} authorized key(s)")

    def use_private_key(self, private_key: Ed25519PrivateKey):
        """Install the client identity directly instead of loading it from a file."""
        self.private_key = private_key
        self.fingerprint = key_fingerprint(private_key.public_key())
        logger.debug(f"Using client key {self.fingerprint}")

    # ==================== Client Side ====================

    def prepare_connection(self, request: requests.Request):
        if self.private_key is None:
            raise PackSyncConfigError("Key pair security has no private key configured")
        request.headers[AUTHENTICATION_HEADER] = self.fingerprint

    def complete_authentication(self, challenge: str):
        if not challenge.strip():
            raise PackSyncAuthError("Server sent an empty challenge")
        self.challenge = challenge

    def sign_request(self, request: requests.Request):
        if self.challenge is None:
            raise PackSyncAuthError("Cannot sign request before authentication completed")
        signature = self.private_key.sign(self.challenge.encode("utf-8"))
        request.headers[CHALLENGE_SIGNATURE_HEADER] = base64.b64encode(signature).decode("ascii")

    # ==================== Server Side ====================

    def accept_connection_request(self, request: Request) -> bool:
        fingerprint = request.headers.get(AUTHENTICATION_HEADER)
        public_key = self.authorized_keys.get(fingerprint) if fingerprint else None
        if public_key is None:
            logger.warning(f"Rejected {request.url.path}: unknown client key {fingerprint}")
            return False

        if request.url.path == AUTHENTICATE_PATH:
            return True

        with self._lock:
            issued = self.issued_challenges.get(fingerprint)
        if issued is None:
            logger.warning(f"Rejected {request.url.path}: no outstanding challenge for {fingerprint}")
            return False

        try:
            signature = base64.b64decode(request.headers.get(CHALLENGE_SIGNATURE_HEADER, ""), validate=True)
            public_key.verify(signature, issued.encode("utf-8"))
        except (ValueError, InvalidSignature):
            # A failed attempt leaves the issued challenge for the real client
            logger.warning(f"Rejected {request.url.path}: bad challenge signature from {fingerprint}")
            return False

        # Consume only if no concurrent request used it first
        with self._lock:
            if self.issued_challenges.get(fingerprint) != issued:
                logger.warning(f"Rejected {request.url.path}: challenge for {fingerprint} already used")
                return False
            del self.issued_challenges[fingerprint]

        return True

    def on_response_sent(self, request: Request, response: Response):
        challenge = new_challenge()
        fingerprint = request.headers.get(AUTHENTICATION_HEADER)
        if fingerprint in self.authorized_keys:
            with self._lock:
                self.issued_challenges[fingerprint] = challenge
        response.headers[CHALLENGE_HEADER] = encode_challenge(challenge)
