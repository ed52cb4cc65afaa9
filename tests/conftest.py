"""
Shared fixtures for PackSync tests.

HTTP traffic from the sync client is answered by transport adapters mounted
on a real requests.Session, so no sockets are opened.
"""

import hashlib
import io
import threading
from typing import Dict, List, Optional
from urllib.parse import unquote, urlparse

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from packsync.models import FileDescriptor, Manifest
from packsync.operations import ProgressSink
from packsync.security import SecurityStrategy

SERVER_URL = "http://pack.test"

# base64 of "CHALLENGE"
CHALLENGE_HEADER_VALUE = "Q0hBTExFTkdF"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_response(request, status_code: int, body: bytes, headers: Dict[str, str]) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.headers = CaseInsensitiveDict(headers)
    response.raw = io.BytesIO(body)
    response.url = request.url
    response.request = request
    return response


class FakePackServer(BaseAdapter):
    """Answers /authenticate, /servermanifest.json and /files/... from memory."""

    def __init__(self, manifest: Manifest, files: Optional[Dict[str, bytes]] = None):
        super().__init__()
        self.manifest = manifest
        self.files = files or {}
        self.manifest_body: Optional[bytes] = None
        self.challenge: Optional[str] = CHALLENGE_HEADER_VALUE
        self.send_content_length = True
        self.status_overrides: Dict[str, int] = {}
        self.failures: Dict[str, Exception] = {}
        self.block_until: Optional[threading.Event] = None
        self.requests: List[requests.PreparedRequest] = []

    @property
    def paths(self) -> List[str]:
        return [urlparse(r.url).path for r in self.requests]

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        if self.block_until is not None:
            self.block_until.wait()

        self.requests.append(request)
        path = urlparse(request.url).path

        if path in self.failures:
            raise self.failures[path]

        status_code = 200
        if path == "/authenticate":
            body = b""
        elif path == "/servermanifest.json":
            body = self.manifest_body if self.manifest_body is not None else self.manifest.to_json().encode("utf-8")
        elif path.startswith("/files/"):
            name = unquote(path[len("/files/"):])
            body = self.files.get(name, b"")
            if name not in self.files:
                status_code = 404
        else:
            body = b""
            status_code = 404

        status_code = self.status_overrides.get(path, status_code)

        headers = {}
        if self.challenge is not None:
            headers["Challenge"] = self.challenge
        if self.send_content_length:
            headers["Content-Length"] = str(len(body))
        return build_response(request, status_code, body, headers)

    def close(self):
        pass


class AppAdapter(BaseAdapter):
    """Forwards requests to a FastAPI TestClient."""

    def __init__(self, test_client):
        super().__init__()
        self.test_client = test_client
        self.paths: List[str] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parsed = urlparse(request.url)
        self.paths.append(parsed.path)
        result = self.test_client.request(request.method, parsed.path, headers=dict(request.headers))
        return build_response(request, result.status_code, result.content, dict(result.headers.items()))

    def close(self):
        pass


class RecordingStrategy(SecurityStrategy):
    """Client-side strategy that records every hook call in order."""

    name = "recording"

    def __init__(self):
        self.events = []

    def prepare_connection(self, request):
        self.events.append(("prepare", urlparse(request.url).path))
        request.headers["Authentication"] = "token"

    def complete_authentication(self, challenge):
        self.events.append(("challenge", challenge))

    def sign_request(self, request):
        self.events.append(("sign", urlparse(request.url).path))

    def accept_connection_request(self, request):
        return True

    def on_response_sent(self, request, response):
        pass


class RecordingProgressSink(ProgressSink):
    """Keeps every progress message; written from the download worker thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._messages: List[str] = []

    def add_progress_message(self, message):
        with self._lock:
            self._messages.append(message)

    @property
    def messages(self) -> List[str]:
        with self._lock:
            return list(self._messages)


def make_manifest(*entries) -> Manifest:
    """Build a manifest from (file_name, checksum, mod_id) tuples."""
    return Manifest(files=tuple(
        FileDescriptor(file_name=name, checksum=checksum, owner_module_id=mod_id)
        for name, checksum, mod_id in entries
    ))


def session_for(adapter: BaseAdapter) -> requests.Session:
    session = requests.Session()
    session.mount(SERVER_URL, adapter)
    return session


@pytest.fixture
def recording_strategy():
    return RecordingStrategy()
