"""
Validation subsystem for stormgraph.

Structural checks run before every mutation; methodology checks describe
how well the whole model follows EventStorming practice. Both report
through result objects rather than exceptions.
"""

from stormgraph.validation.results import (
    ValidationResult,
    MethodologyIssue,
    MethodologyReport,
)
from stormgraph.validation.rules import EDGE_COMPATIBILITY, NODE_ROLES
from stormgraph.validation.validator import StructuralValidator
from stormgraph.validation.methodology import MethodologyValidator

__all__ = [
    "ValidationResult",
    "MethodologyIssue",
    "MethodologyReport",
    "EDGE_COMPATIBILITY",
    "NODE_ROLES",
    "StructuralValidator",
    "MethodologyValidator",
]
