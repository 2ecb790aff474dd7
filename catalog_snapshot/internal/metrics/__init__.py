"""
Metrics for the catalog generator.
"""

from .prometheus import (
    API_CALLS,
    API_CALL_DURATION,
    WARNINGS,
    PUBLISHED_ENTITIES,
)

__all__ = [
    "API_CALLS",
    "API_CALL_DURATION",
    "WARNINGS",
    "PUBLISHED_ENTITIES",
]
