"""Domain models for trackrules.

Usage:
    from trackrules.domain import TrackInfo, IntrospectionResult
"""

from .models import IntrospectionResult, TrackInfo

__all__ = [
    "TrackInfo",
    "IntrospectionResult",
]
