"""
NestCamera wires the credential layer, the resource client and the polling
feeds together. It is the object applications construct.
"""

import logging
import requests
from typing import Any, Callable, Dict, Iterator, Optional

from nestcam.auth.credential_store import CredentialStore
from nestcam.auth.token_exchange import TokenExchangeClient
from nestcam.config.settings import Settings
from nestcam.processing.snapshot_writer import SnapshotWriter
from nestcam.stream.nest_client import NestClient
from nestcam.stream.polling_hub import PollingHub, Subscription
from nestcam.utils.logger import log_performance

logger = logging.getLogger(__name__)

class NestCamera:
    """Exposes the Nest camera snapshot and event feeds"""

    def __init__(self, config: Dict[str, Any], http_session: Optional[requests.Session] = None):
        """
        Args:
            config: Configuration dictionary shaped like Settings.config
            http_session: Shared HTTP session; one is created (and closed by
                close()) when omitted
        """
        nest = config['nest']
        endpoints = config['endpoints']
        polling = config.get('polling', {})

        self._owns_session = http_session is None
        self.http_session = http_session or requests.Session()
        timeout = nest.get('request_timeout', 10)

        self.exchange_client = TokenExchangeClient(
            api_key=nest['api_key'],
            client_id=nest['client_id'],
            refresh_token=nest['refresh_token'],
            oauth_url=endpoints['oauth_url'],
            session_token_url=endpoints['session_token_url'],
            policy_id=endpoints.get('policy_id', 'authproxy-oauth-policy'),
            timeout=timeout,
            session=self.http_session
        )
        self.credentials = CredentialStore(self.exchange_client)
        self.client = NestClient(
            self.credentials,
            nexus_host=endpoints['nexus_host'],
            camera_id=nest.get('camera_id', ''),
            events_endpoint=endpoints['events'],
            latest_image_endpoint=endpoints['latest_image'],
            snapshot_endpoint=endpoints['snapshot'],
            timeout=timeout,
            session=self.http_session
        )
        self.hub = PollingHub(
            self.get_latest_snapshot,
            self.get_events,
            snapshot_interval_ms=polling.get('snapshot_interval_ms', 5000),
            event_interval_ms=polling.get('event_interval_ms', 3000),
            max_consecutive_failures=polling.get('max_consecutive_failures', 0)
        )
        self.snapshot_dir = config.get('output', {}).get('snapshot_dir', './assets')

    @classmethod
    def from_settings(cls, settings: Settings, http_session: Optional[requests.Session] = None) -> "NestCamera":
        return cls(settings.config, http_session=http_session)

    def init(self) -> "NestCamera":
        """Acquire fresh tokens up front and return self"""
        self.refresh_tokens()
        return self

    @log_performance(logger)
    def refresh_tokens(self) -> Optional[str]:
        """Drop cached tokens and acquire new ones. Returns the session token."""
        self.credentials.reset()
        return self.ensure_tokens()

    def ensure_tokens(self) -> Optional[str]:
        """Acquire whichever tokens are missing; None if an exchange failed"""
        access_token = self.credentials.get_access_token()
        if not access_token:
            return None
        return self.credentials.get_session_token(access_token)

    def get_events(self, start: Optional[int] = None, end: Optional[int] = None) -> list:
        self.ensure_tokens()
        return self.client.fetch_events(start, end)

    def get_latest_snapshot(self) -> bytes:
        self.ensure_tokens()
        return self.client.fetch_latest_snapshot()

    def get_snapshot(self, snapshot_id: str) -> Iterator[bytes]:
        self.ensure_tokens()
        return self.client.fetch_snapshot(snapshot_id)

    def save_snapshot(self, snapshot_id: str, writer: Optional[SnapshotWriter] = None) -> str:
        """Download a single event snapshot and write it to disk"""
        writer = writer or SnapshotWriter(self.snapshot_dir)
        return writer.write_stream(self.get_snapshot(snapshot_id), snapshot_id)

    def subscribe_to_latest_snapshot(self, on_snapshot: Callable[[bytes], Any],
                                     on_error: Optional[Callable[[Exception], Any]] = None,
                                     on_complete: Optional[Callable[[], Any]] = None) -> Subscription:
        """Receive the latest camera image on every snapshot tick"""
        return self.hub.subscribe_to_snapshots(on_snapshot, on_error, on_complete)

    def subscribe_to_events(self, on_event: Callable[[dict], Any],
                            on_error: Optional[Callable[[Exception], Any]] = None,
                            on_complete: Optional[Callable[[], Any]] = None) -> Subscription:
        """
        Receive the newest motion or sound event whenever the number of
        events reported by the camera changes.
        """
        return self.hub.subscribe_to_events(on_event, on_error, on_complete)

    def close(self):
        self.hub.stop()
        if self._owns_session:
            self.http_session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
