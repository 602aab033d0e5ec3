"""
Nest Camera Client

A Python package for authenticating against the Nest camera cloud API and
polling the latest snapshot and the stream of motion and sound events.
"""

__version__ = "1.0.0"

# Package-level imports for easy access
from .config.settings import Settings
from .camera import NestCamera
from .stream.polling_hub import PollingHub, Subscription
from .processing.snapshot_writer import SnapshotWriter

__all__ = [
    "Settings",
    "NestCamera",
    "PollingHub",
    "Subscription",
    "SnapshotWriter"
]
