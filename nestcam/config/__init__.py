"""
Configuration management module.

Handles loading and managing application configuration from
YAML files and environment variables.
"""

from .settings import Settings

__all__ = [
    "Settings"
]
