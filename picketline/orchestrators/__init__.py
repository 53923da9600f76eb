"""
Orchestrators for Online Picket Line.

This module contains the orchestrators that coordinate
the flow between the core, the cache and the adapters.
"""
from .refresh import RefreshOrchestrator, RefreshState
from .monitor import ProximityMonitor
from .guard import DestinationGuard

__all__ = ["RefreshOrchestrator", "RefreshState", "ProximityMonitor", "DestinationGuard"]
