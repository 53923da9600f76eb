"""
Observability for Online Picket Line.

Logging setup, Prometheus metrics and the HTTP surface.
"""
