"""
Metrics definitions for Online Picket Line.

This module defines Prometheus metrics for monitoring refreshes,
destination checks and geofence alerts.
"""

from prometheus_client import Counter, Gauge

# 카운터 메트릭
refresh_outcomes = Counter(
    "refresh_outcomes_total",
    "Number of snapshot refresh outcomes",
    ["outcome", "reason"]
)

destination_checks = Counter(
    "destination_checks_total",
    "Number of destinations checked against the blocklist",
    ["result"]
)

geofence_entries = Counter(
    "geofence_entries_total",
    "Number of geofence entry events",
    ["action_type"]
)

notifications_failed = Counter(
    "notifications_failed_total",
    "Number of proximity notifications that could not be posted"
)

# 게이지 메트릭
snapshot_blocklist_size = Gauge(
    "snapshot_blocklist_size",
    "Number of blocklist records in the current snapshot"
)

snapshot_geofence_count = Gauge(
    "snapshot_geofence_count",
    "Number of geofences in the current snapshot"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
