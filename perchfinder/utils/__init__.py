# perchfinder/utils/__init__.py
"""
Utility package

Helpers shared by the engine, the Flask API and the recommendation client.
"""

from .datetime_utils import (
    DateTimeUtils,
    now, now_ms, parse_iso, to_iso,
    from_firestore,
)

__all__ = [
    'DateTimeUtils',
    'now', 'now_ms', 'parse_iso', 'to_iso',
    'from_firestore',
]
