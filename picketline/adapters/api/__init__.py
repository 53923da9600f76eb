"""
Remote data provider adapter.
"""

from .client import PicketLineApiClient

__all__ = ["PicketLineApiClient"]
