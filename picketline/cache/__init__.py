"""
Snapshot caching for Online Picket Line.
"""

from .snapshot_cache import SnapshotCache, CACHE_KEY, HASH_KEY

__all__ = ["SnapshotCache", "CACHE_KEY", "HASH_KEY"]
