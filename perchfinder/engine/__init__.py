# perchfinder/engine/__init__.py
"""
Recommendation statistics engine: water-wide aggregation, similar-conditions
scoring and payload/signature construction.
"""

from .aggregation import aggregate, tally_catches
from .similarity import score_similar, score_catch, match_window
from .payload import build_water_stats_payload, compute_signature

__all__ = [
    'aggregate', 'tally_catches',
    'score_similar', 'score_catch', 'match_window',
    'build_water_stats_payload', 'compute_signature',
]
