"""
Authentication module for the Nest API.

Exchanges the long-lived refresh token for short-lived access and
session tokens and caches them until they are reset.
"""

from .token_exchange import TokenExchangeClient
from .credential_store import CredentialStore, CredentialProvider

__all__ = [
    "TokenExchangeClient",
    "CredentialStore",
    "CredentialProvider"
]
