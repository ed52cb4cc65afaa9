"""
PackSync - No Security Strategy

Accepts every request. The server still rotates a random challenge so the
client handshake is identical for every strategy.

Author: PackSync Project
"""

import logging

import requests
from fastapi import Request, Response

from ..protocol import CHALLENGE_HEADER, encode_challenge, new_challenge
from .base import SecurityStrategy

# Configure logging
logger = logging.getLogger(__name__)


class NoSecurityStrategy(SecurityStrategy):
    """Strategy for trusted networks: nothing is attached and nothing is checked."""

    name = "none"

    def prepare_connection(self, request: requests.Request):
        pass

    def complete_authentication(self, challenge: str):
        logger.debug("Challenge ignored (no security configured)")

    def sign_request(self, request: requests.Request):
        pass

    def accept_connection_request(self, request: Request) -> bool:
        return True

    def on_response_sent(self, request: Request, response: Response):
        response.headers[CHALLENGE_HEADER] = encode_challenge(new_challenge())
