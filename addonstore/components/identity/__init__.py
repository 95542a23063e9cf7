"""
Identity component - validation and canonicalisation of external identifiers.
"""

from .component import is_valid, normalize, try_normalize

__all__ = [
    "is_valid",
    "normalize",
    "try_normalize",
]
