"""
PackSync - Password Security Strategy

Shared-secret authentication. Both sides hash the configured password with
SHA-256; the client sends the upper-case hex digest in the Authentication
header of every request and the server compares it in constant time.

Author: PackSync Project
"""

import hashlib
import logging
import secrets
from typing import Any, Dict

import requests
from fastapi import Request, Response

from ..exceptions import PackSyncConfigError
from ..protocol import AUTHENTICATION_HEADER, CHALLENGE_HEADER, encode_challenge, new_challenge
from .base import SecurityStrategy

# Configure logging
logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Return the upper-case SHA-256 hex digest sent on the wire."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest().upper()


class PasswordSecurityStrategy(SecurityStrategy):
    """Shared-secret strategy configured with security.password."""

    name = "password"

    def __init__(self):
        self.password_hash = ""

    def validate_configuration(self, settings: Dict[str, Any]):
        password = settings.get("password")
        if not isinstance(password, str) or not password:
            raise PackSyncConfigError("Password security requires a non-empty 'password' setting")

    def initialize(self, settings: Dict[str, Any]):
        self.password_hash = hash_password(settings["password"])
        logger.debug("Password security initialized")

    # ==================== Client Side ====================

    def prepare_connection(self, request: requests.Request):
        if not self.password_hash:
            raise PackSyncConfigError("Password security used before initialize()")
        request.headers[AUTHENTICATION_HEADER] = self.password_hash

    def complete_authentication(self, challenge: str):
        # The password already travels on every request; the challenge carries no session state.
        logger.debug("Challenge received")

    def sign_request(self, request: requests.Request):
        pass

    # ==================== Server Side ====================

    def accept_connection_request(self, request: Request) -> bool:
        supplied = request.headers.get(AUTHENTICATION_HEADER)
        if not supplied:
            logger.warning(f"Rejected {request.url.path}: no {AUTHENTICATION_HEADER} header")
            return False

        if not secrets.compare_digest(supplied.upper().encode("utf-8"), self.password_hash.encode("utf-8")):
            logger.warning(f"Rejected {request.url.path}: wrong password")
            return False

        return True

    def on_response_sent(self, request: Request, response: Response):
        response.headers[CHALLENGE_HEADER] = encode_challenge(new_challenge())
