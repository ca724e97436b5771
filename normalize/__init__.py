"""
Normalize package: typed timeline events, the team index and the raw-item normalizer.
"""

from .events import normalize_event
from .teams import TeamIndex

__all__ = ["normalize_event", "TeamIndex"]
