"""
Port interfaces for Online Picket Line hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external collaborators.
"""

from .provider import DataProviderPort
from .credentials import CredentialStorePort
from .kvstore import KVStorePort
from .location import LocationSourcePort
from .notify import NotificationSinkPort

__all__ = [
    "DataProviderPort", "CredentialStorePort", "KVStorePort",
    "LocationSourcePort", "NotificationSinkPort",
]
