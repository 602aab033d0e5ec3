"""
Stream handling module for Nest cameras.

This module provides the client for the Nest resource API and the
polling feeds that share its results between subscribers.
"""

from .nest_client import NestClient
from .polling_hub import PollingHub, PolledFeed, Subscription

__all__ = [
    "NestClient",
    "PollingHub",
    "PolledFeed",
    "Subscription"
]
