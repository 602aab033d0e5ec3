"""
Error taxonomy for the Nest camera client.

- CredentialMissingError: an operation needed a token that was never acquired
- ExchangeError: a token exchange failed (network, HTTP status, bad JSON)
- FetchError: a resource fetch failed; credentials have already been reset
- FailureStreakError: a feed gave up after too many failed ticks in a row
"""


class NestError(Exception):
    """Base error for the Nest client (do not raise directly)."""


class CredentialMissingError(NestError):
    """A required access or session token is not available."""


class ExchangeError(NestError):
    """Exchanging one credential for another failed."""


class FetchError(NestError):
    """Fetching events or snapshots from the Nest API failed."""


class FailureStreakError(NestError):
    """A polled feed reached its consecutive failure threshold."""

    def __init__(self, feed: str, failures: int):
        super().__init__(f"Feed '{feed}' failed {failures} times in a row")
        self.feed = feed
        self.failures = failures


__all__ = [
    "NestError",
    "CredentialMissingError",
    "ExchangeError",
    "FetchError",
    "FailureStreakError",
]
