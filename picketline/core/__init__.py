"""
Core domain models and pure functions for Online Picket Line.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    BlocklistRecord, Coordinates, FetchResult, GeofenceRecord,
    ProximityResult, ProximityState, RefreshOutcome, Snapshot,
)
from .domain import normalize_host
from .blocklist import BlocklistIndex
from .geofence import evaluate
from .payload import to_snapshot

__all__ = [
    "BlocklistRecord", "Coordinates", "FetchResult", "GeofenceRecord",
    "ProximityResult", "ProximityState", "RefreshOutcome", "Snapshot",
    "normalize_host", "BlocklistIndex", "evaluate", "to_snapshot",
]
