"""
Adapters for Online Picket Line hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteKVStore
from .credentials import FileCredentialStore
from .api import PicketLineApiClient
from .homeassistant import HAClient, HALocationSource, HANotifier, LogNotifier

__all__ = [
    "SQLiteKVStore", "FileCredentialStore", "PicketLineApiClient",
    "HAClient", "HALocationSource", "HANotifier", "LogNotifier",
]
