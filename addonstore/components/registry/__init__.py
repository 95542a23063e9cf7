"""
Registry component - addons and the content types they declare.
"""

from .component import AddonRegistry, RegistryState, is_valid_type

__all__ = [
    "AddonRegistry",
    "RegistryState",
    "is_valid_type",
]
