"""
Common utilities for Online Picket Line.
"""
