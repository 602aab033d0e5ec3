import re
import requests
import logging
from typing import Iterator, List, Optional
from urllib.parse import quote

from nestcam.auth.credential_store import CredentialProvider
from nestcam.errors import CredentialMissingError, FetchError

# Event snapshot ids look like "1698000000-labs"; anything else never reaches the URL
SNAPSHOT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

class NestClient:
    """Client for the Nest camera resource API (events and snapshot images)"""

    def __init__(self, credentials: CredentialProvider, nexus_host: str, camera_id: str,
                 events_endpoint: str, latest_image_endpoint: str, snapshot_endpoint: str,
                 timeout: float = 10, session: Optional[requests.Session] = None,
                 chunk_size: int = 8192):
        self.credentials = credentials
        self.nexus_host = nexus_host.rstrip("/")
        self.camera_id = camera_id
        self.events_endpoint = events_endpoint
        self.latest_image_endpoint = latest_image_endpoint
        self.snapshot_endpoint = snapshot_endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.chunk_size = chunk_size
        self.logger = logging.getLogger(__name__)

    def _url(self, endpoint: str) -> str:
        return f"{self.nexus_host}{endpoint.format(camera_id=self.camera_id)}"

    def _auth_headers(self, what: str) -> dict:
        token = self.credentials.session_token
        if not token:
            raise CredentialMissingError(
                f"Session token is missing; acquire tokens before fetching {what}"
            )
        return {"Authorization": f"Basic {token}"}

    def _failed(self, what: str, error: Exception) -> FetchError:
        """Log a failed fetch and reset credentials so the next cycle re-authenticates"""
        self.logger.error(f"Failed to retrieve {what} from the Nest API, refreshing tokens: {error}")
        self.credentials.reset()
        return FetchError(f"Failed to retrieve {what}: {error}")

    def fetch_events(self, start: Optional[int] = None, end: Optional[int] = None) -> List[dict]:
        """
        Retrieve recent motion and sound events, oldest first.

        Args:
            start: Unix timestamp in seconds where the window begins
            end: Unix timestamp in seconds where the window ends
        """
        headers = self._auth_headers("events")
        params = {}
        if start is not None:
            params["start_time"] = start
        if end is not None:
            params["end_time"] = end

        try:
            response = self.session.get(
                self._url(self.events_endpoint), headers=headers,
                params=params or None, timeout=self.timeout
            )
            response.raise_for_status()
            events = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise self._failed("events", e) from e

        if not isinstance(events, list):
            raise self._failed("events", ValueError(f"expected a JSON array, got {type(events).__name__}"))
        self.logger.debug(f"Retrieved {len(events)} events")
        return events

    def fetch_latest_snapshot(self) -> bytes:
        """Retrieve the most recent camera image as raw bytes"""
        headers = self._auth_headers("the latest snapshot")
        try:
            response = self.session.get(
                self._url(self.latest_image_endpoint), headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise self._failed("the latest snapshot", e) from e
        return response.content

    def fetch_snapshot(self, snapshot_id: str) -> Iterator[bytes]:
        """Stream the image of a single event snapshot in chunks"""
        if not snapshot_id or snapshot_id in (".", "..") or not SNAPSHOT_ID_PATTERN.match(snapshot_id):
            raise ValueError(f"Invalid snapshot id: {snapshot_id!r}")
        headers = self._auth_headers(f"snapshot {snapshot_id}")
        url = self._url(self.snapshot_endpoint) + quote(snapshot_id, safe="")

        try:
            response = self.session.get(
                url, headers=headers, params={"crop_type": "timeline", "width": 300},
                stream=True, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise self._failed(f"snapshot {snapshot_id}", e) from e
        return self._iter_chunks(response, snapshot_id)

    def _iter_chunks(self, response, snapshot_id: str) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            raise self._failed(f"snapshot {snapshot_id}", e) from e
        finally:
            response.close()

    def close(self):
        self.session.close()
