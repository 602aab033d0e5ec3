"""
Lazily memoized access and session tokens.

Both tokens are cached until reset() is called; there is no local expiry
tracking. Acquisition holds a per-token lock across the exchange so that
concurrent callers share one request instead of racing.
"""

import logging
import threading
from typing import Optional, Protocol

from nestcam.auth.token_exchange import TokenExchangeClient
from nestcam.errors import CredentialMissingError, ExchangeError


class CredentialProvider(Protocol):
    """What the resource client needs from the credential layer."""

    @property
    def session_token(self) -> Optional[str]:
        ...

    def get_access_token(self) -> Optional[str]:
        ...

    def get_session_token(self, access_token: Optional[str]) -> Optional[str]:
        ...

    def reset(self) -> None:
        ...


class CredentialStore:
    """Holds the current access token and session token."""

    def __init__(self, exchange_client: TokenExchangeClient):
        self._exchange = exchange_client
        self._access_token: Optional[str] = None
        self._session_token: Optional[str] = None
        self._access_lock = threading.Lock()
        self._session_lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def session_token(self) -> Optional[str]:
        return self._session_token

    def get_access_token(self) -> Optional[str]:
        """Return the cached access token, exchanging the refresh token if needed.

        Exchange failures are logged and yield None; nothing is cached so the
        next call tries again.
        """
        with self._access_lock:
            if self._access_token:
                return self._access_token
            try:
                token = self._exchange.exchange_refresh_token()
            except ExchangeError as e:
                self.logger.error(f"Failed to retrieve OAuth token from Nest API: {e}")
                return None
            self._access_token = token
            self.logger.info("Acquired OAuth access token")
            return token

    def get_session_token(self, access_token: Optional[str]) -> Optional[str]:
        """Return the cached session token, exchanging access_token if needed."""
        with self._session_lock:
            if self._session_token:
                return self._session_token
            if not access_token:
                raise CredentialMissingError(
                    "Access token is missing; call get_access_token() before requesting a session token"
                )
            try:
                token = self._exchange.exchange_session_token(access_token)
            except ExchangeError as e:
                self.logger.error(f"Failed to retrieve session token from Nest API: {e}")
                return None
            self._session_token = token
            self.logger.info("Acquired Nest session token")
            return token

    def reset(self) -> None:
        """Forget both tokens so the next acquisition exchanges again."""
        with self._access_lock, self._session_lock:
            if self._access_token or self._session_token:
                self.logger.info("Clearing cached OAuth and session tokens")
            self._access_token = None
            self._session_token = None
