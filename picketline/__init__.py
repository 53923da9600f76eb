"""
Online Picket Line core.

Destination matching against an active labor dispute blocklist,
geofence proximity alerts and a conditionally refreshed snapshot cache.
"""

__version__ = "0.1.0"
