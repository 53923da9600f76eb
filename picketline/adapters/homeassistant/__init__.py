"""
Home Assistant adapters: location source and notification sink.
"""

from .client import HAClient
from .location import HALocationSource
from .notifier import HANotifier, LogNotifier

__all__ = ["HAClient", "HALocationSource", "HANotifier", "LogNotifier"]
