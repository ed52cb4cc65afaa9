"""
PackSync - Sync Client Module

Downloads the modpack published by a PackSync server into a local folder.
One background job per client runs the whole sequence:

1. Authenticate (GET /authenticate) and hand the challenge to the security strategy
2. Fetch the manifest (GET /servermanifest.json)
3. Download every non-excluded file whose local checksum differs

Author: PackSync Project
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union
from urllib.parse import quote

import requests
from pydantic import ValidationError

from ..exceptions import PackSyncAuthError, PackSyncError, PackSyncServerError
from ..models import FileDescriptor, Manifest, SyncPhase
from ..protocol import (
    AUTHENTICATE_PATH,
    CHALLENGE_HEADER,
    FILES_PATH_PREFIX,
    MANIFEST_PATH,
    decode_challenge
)
from ..security import SecurityStrategy
from .checksum import compute_checksum
from .progress import ProgressSink

# Configure logging
logger = logging.getLogger(__name__)

# Minimum wall-clock time between two progress messages for one file
PROGRESS_INTERVAL_SECONDS = 1.0

DOWNLOAD_CHUNK_SIZE = 8192


class SyncClient:
    """
    Mirrors a server modpack into output_dir.

    The download starts as soon as the client is constructed. Callers block on
    wait_for_result() and may then read the manifest with get_manifest().

    Responsibilities:
    - Drive authenticate, manifest and file requests in order on one worker thread
    - Route every request through the security strategy
    - Skip files whose SHA-256 already matches the manifest
    - Report download progress to the progress sink
    """

    def __init__(self, output_dir: Union[str, Path], security_strategy: SecurityStrategy,
                 excluded_mod_ids: Optional[Iterable[str]], remote_server: Optional[str],
                 progress_sink: Optional[ProgressSink] = None,
                 session: Optional[requests.Session] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the client and start the download job.

        Args:
            output_dir: Folder the modpack files are written to
            security_strategy: Authentication scheme applied to every request
            excluded_mod_ids: Mod ids whose files are never downloaded
            remote_server: Server base URL (e.g., "http://pack.example.com:8080").
                           If empty, the job fails immediately without network access.
            progress_sink: Receives human-readable progress messages
            session: requests session to send through; a private one is created if None
            clock: Monotonic time source used to pace progress messages
        """
        self.output_dir = Path(output_dir)
        self.security = security_strategy
        self.excluded_mod_ids = frozenset(excluded_mod_ids or ())
        self.progress = progress_sink or ProgressSink()
        self.server = (remote_server or "").strip().rstrip("/")

        self._owns_session = session is None
        self.session = session or requests.Session()
        self._clock = clock

        self._phase = SyncPhase.IDLE
        self._manifest: Optional[Manifest] = None
        self._pending_files: Optional[Iterator[FileDescriptor]] = None

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="packsync-download")
        self._download_job = executor.submit(self._run)
        # The job keeps running; shutdown only stops the executor accepting more work
        executor.shutdown(wait=False)

    # ==================== Public API ====================

    def wait_for_result(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the download job finishes.

        Interrupting the wait (Ctrl+C) or hitting the timeout returns False
        but does not stop the job.

        Args:
            timeout: Optional number of seconds to wait

        Returns:
            True if every phase succeeded, False otherwise
        """
        try:
            return self._download_job.result(timeout=timeout)
        except KeyboardInterrupt:
            logger.warning("Interrupted while waiting for modpack download")
            return False
        except FuturesTimeoutError:
            logger.warning(f"Modpack download still running after {timeout}s")
            return False

    def get_manifest(self) -> Optional[Manifest]:
        """Return the fetched manifest, or None if it was never received."""
        return self._manifest

    @property
    def phase(self) -> SyncPhase:
        """Current phase of the download job."""
        return self._phase

    # ==================== Download Job ====================

    def _run(self) -> bool:
        try:
            if not self.server:
                logger.warning("No remote server configured - skipping modpack download")
                self._phase = SyncPhase.FAILED
                return False
            return self._connect_and_download(self.server)
        finally:
            if self._owns_session:
                self.session.close()

    def _connect_and_download(self, server: str) -> bool:
        try:
            self._authenticate(server)
            self._download_manifest(server)
            self._download_files(server)
        except Exception:
            self._phase = SyncPhase.FAILED
            logger.exception(f"Failed to download modpack from server: {server}")
            return False

        self._phase = SyncPhase.DONE
        return True

    def _authenticate(self, server: str):
        self._phase = SyncPhase.AUTHENTICATING
        logger.info(f"Authenticating to: {server}")
        self.progress.add_progress_message(f"Authenticating to: {server}")

        # Only the Challenge header matters; the body is discarded
        with self._send(server + AUTHENTICATE_PATH, sign=False) as response:
            self._process_challenge(response)

        logger.debug("Received challenge")

    def _download_manifest(self, server: str):
        self._phase = SyncPhase.MANIFEST_FETCH
        logger.info(f"Requesting server manifest from: {server}")
        self.progress.add_progress_message(f"Requesting server manifest from: {server}")

        with self._send(server + MANIFEST_PATH, sign=True) as response:
            self._process_challenge(response)
            try:
                manifest = Manifest.load(response.content)
            except ValidationError as e:
                raise PackSyncServerError(f"Server manifest is invalid: {e}") from e
            except requests.exceptions.RequestException as e:
                raise PackSyncServerError(f"Failed to download manifest: {e}") from e

        self._manifest = manifest
        logger.debug(f"Received manifest with {len(manifest.files)} files")
        self._pending_files = self._build_file_fetcher(manifest)

    def _build_file_fetcher(self, manifest: Manifest) -> Iterator[FileDescriptor]:
        if not self.excluded_mod_ids:
            return iter(manifest.files)
        return (
            descriptor for descriptor in manifest.files
            if descriptor.owner_module_id not in self.excluded_mod_ids
        )

    def _download_files(self, server: str):
        self._phase = SyncPhase.FILE_ITERATION
        self.output_dir.mkdir(parents=True, exist_ok=True)

        for descriptor in self._pending_files:
            self._download_file(server, descriptor)

        logger.info("Finished downloading modpack")

    def _download_file(self, server: str, descriptor: FileDescriptor):
        file_name = descriptor.file_name
        destination = self._resolve_destination(file_name)

        existing_checksum = compute_checksum(destination)
        if existing_checksum == descriptor.checksum:
            logger.debug(f"Found existing file {file_name} - skipping")
            return

        logger.info(f"Requesting file {file_name}")
        self.progress.add_progress_message(f"Requesting file {file_name}")
        url = server + FILES_PATH_PREFIX + quote(file_name, safe="/")

        try:
            with self._send(url, sign=True) as response:
                self._process_challenge(response)
                total_bytes = _content_length(response)

                destination.parent.mkdir(parents=True, exist_ok=True)
                bytes_written = 0
                last_report = self._clock()

                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        bytes_written += len(chunk)

                        now = self._clock()
                        if now - last_report < PROGRESS_INTERVAL_SECONDS:
                            continue
                        self._report_progress(file_name, bytes_written, total_bytes)
                        last_report = now
        except requests.exceptions.RequestException as e:
            raise PackSyncServerError(f"Failed to download file: {file_name}") from e
        except OSError as e:
            raise PackSyncError(f"Failed to write file: {destination}") from e

        logger.debug(f"Wrote {bytes_written} bytes to {destination}")

    # ==================== Helpers ====================

    def _send(self, url: str, sign: bool) -> requests.Response:
        """
        Send a GET request through the security strategy.

        Args:
            url: Full request URL
            sign: Whether sign_request() is applied after prepare_connection()

        Returns:
            Streaming response with a successful status

        Raises:
            PackSyncAuthError: If the server rejects the credentials (401/403)
            PackSyncServerError: If the request fails or returns another error status
        """
        request = requests.Request("GET", url)
        self.security.prepare_connection(request)
        if sign:
            self.security.sign_request(request)

        logger.debug(f"GET {url}")
        try:
            response = self.session.send(self.session.prepare_request(request), stream=True)
        except requests.exceptions.RequestException as e:
            raise PackSyncServerError(f"Cannot connect to {url}: {e}") from e

        if response.status_code in (401, 403):
            response.close()
            raise PackSyncAuthError(f"Server rejected {url} with status {response.status_code}")
        if response.status_code >= 400:
            response.close()
            raise PackSyncServerError(f"Request to {url} failed with status {response.status_code}")

        return response

    def _process_challenge(self, response: requests.Response):
        challenge_header = response.headers.get(CHALLENGE_HEADER)
        logger.debug(f"Got challenge {challenge_header}")
        self.security.complete_authentication(decode_challenge(challenge_header))

    def _resolve_destination(self, file_name: str) -> Path:
        output_root = self.output_dir.resolve()
        destination = (output_root / file_name).resolve()
        if not destination.is_relative_to(output_root) or destination == output_root:
            raise PackSyncError(f"Refusing to write outside output directory: {file_name}")
        return destination

    def _report_progress(self, file_name: str, bytes_written: int, total_bytes: Optional[int]):
        if total_bytes:
            percent = min(100, bytes_written * 100 // total_bytes)
            message = f"Downloaded {percent}% of {file_name}"
        else:
            message = f"Downloaded {bytes_written} bytes of {file_name}"
        logger.debug(message)
        self.progress.add_progress_message(message)


def _content_length(response: requests.Response) -> Optional[int]:
    """Return the Content-Length header as an int, or None if missing or invalid."""
    try:
        length = int(response.headers.get("Content-Length", ""))
    except ValueError:
        return None
    return length if length > 0 else None
