"""
Storage adapters for Online Picket Line hexagonal architecture.

This module contains storage adapters for persistence and durability.
"""

from .sqlite_kv import SQLiteKVStore

__all__ = ["SQLiteKVStore"]
