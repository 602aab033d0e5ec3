import requests
import logging
from typing import Optional

from nestcam.errors import ExchangeError

class TokenExchangeClient:
    """Performs the two credential exchanges needed to call the Nest API.

    A long-lived refresh token is exchanged for a Google OAuth access token,
    and that access token is exchanged for a Nest session token (a JWT).
    Every call issues exactly one request and raises ExchangeError on failure.
    """

    def __init__(self, api_key: str, client_id: str, refresh_token: str,
                 oauth_url: str, session_token_url: str,
                 policy_id: str = "authproxy-oauth-policy",
                 timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.client_id = client_id
        self.refresh_token = refresh_token
        self.oauth_url = oauth_url
        self.session_token_url = session_token_url
        self.policy_id = policy_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def exchange_refresh_token(self) -> str:
        """Exchange the refresh token for a Google OAuth access token"""
        form = {
            "refresh_token": self.refresh_token,
            "client_id": self.client_id,
            "grant_type": "refresh_token"
        }
        self.logger.debug(f"Requesting OAuth access token from {self.oauth_url}")
        payload = self._post("OAuth token", self.oauth_url, data=form)
        return self._extract(payload, "access_token", "OAuth token")

    def exchange_session_token(self, access_token: str) -> str:
        """Exchange an OAuth access token for a Nest session token"""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "x-goog-api-key": self.api_key,
            "Accept": "application/json"
        }
        body = {
            "expire_after": "3600s",
            "policy_id": self.policy_id,
            "google_oauth_access_token": access_token,
            "embed_google_oauth_access_token": True
        }
        self.logger.debug(f"Requesting session token from {self.session_token_url}")
        payload = self._post("session token", self.session_token_url, headers=headers, json=body)
        return self._extract(payload, "jwt", "session token")

    def _post(self, what: str, url: str, **kwargs) -> dict:
        try:
            response = self.session.post(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise ExchangeError(f"Failed to retrieve {what}: {e}") from e
        except ValueError as e:
            raise ExchangeError(f"Malformed {what} response: {e}") from e

    def _extract(self, payload, field: str, what: str) -> str:
        token = payload.get(field) if isinstance(payload, dict) else None
        if not token:
            raise ExchangeError(f"{what} response has no '{field}' field")
        return token

    def close(self):
        self.session.close()
