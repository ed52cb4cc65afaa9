"""
PackSync - Security Strategy Interface

Defines the capability set every authentication scheme provides. The client
half intercepts each outbound request; the server half validates each
inbound request and decorates each response with a fresh challenge.

Author: PackSync Project
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import requests
from fastapi import Request, Response


class SecurityStrategy(ABC):
    """
    Pluggable authentication policy shared by client and server.

    Client call order for one sync run:
        /authenticate        prepare_connection, complete_authentication
        /servermanifest.json prepare_connection, sign_request, complete_authentication
        /files/...           prepare_connection, sign_request, complete_authentication

    complete_authentication runs after every response because the server
    rotates the challenge on each one.
    """

    name = "abstract"

    # ==================== Configuration ====================

    def validate_configuration(self, settings: Dict[str, Any]):
        """
        Check the security settings section before initialize() is called.

        Default is no configuration needed.

        Raises:
            PackSyncConfigError: If required settings are missing or invalid
        """

    def initialize(self, settings: Dict[str, Any]):
        """Load keys or secrets from validated settings. Default is no initialization needed."""

    # ==================== Client Side ====================

    @abstractmethod
    def prepare_connection(self, request: requests.Request):
        """
        Attach headers or credentials to a request before it is sent.

        Must not perform network I/O.

        Args:
            request: Unsent request whose headers may be modified
        """

    @abstractmethod
    def complete_authentication(self, challenge: str):
        """
        Consume the decoded challenge from the latest response.

        Args:
            challenge: Challenge text (already base64 and UTF-8 decoded)

        Raises:
            PackSyncAuthError: If the challenge is malformed
        """

    @abstractmethod
    def sign_request(self, request: requests.Request):
        """
        Attach proof of authentication to a manifest or file request.

        Args:
            request: Unsent request whose headers may be modified

        Raises:
            PackSyncAuthError: If no session has been established yet
        """

    # ==================== Server Side ====================

    @abstractmethod
    def accept_connection_request(self, request: Request) -> bool:
        """
        Validate an inbound request.

        Args:
            request: Incoming HTTP request

        Returns:
            True to let the request through, False to reject it
        """

    @abstractmethod
    def on_response_sent(self, request: Request, response: Response):
        """
        Decorate the response to an accepted request.

        Implementations must set the Challenge header.

        Args:
            request: The request being answered
            response: Outgoing response, headers still mutable
        """
