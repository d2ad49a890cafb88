"""
Utility functions for stormgraph.

This module contains low-level helpers used across the system.
No domain logic should live here.
"""

from stormgraph.utils.helpers import safe_mean, clamp
from stormgraph.utils.serialization import to_wire, camel_case

__all__ = [
    "safe_mean",
    "clamp",
    "to_wire",
    "camel_case",
]
