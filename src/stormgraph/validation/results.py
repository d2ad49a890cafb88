from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validation pass or a mutation attempt.

    Rule violations are reported here, never raised. A mutation was
    committed only when `is_valid` is true.
    """

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, warnings: Iterable[str] = ()) -> "ValidationResult":
        return cls(is_valid=True, errors=[], warnings=list(warnings))

    @classmethod
    def failure(
        cls,
        errors: Iterable[str],
        warnings: Iterable[str] = (),
    ) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors), warnings=list(warnings))

    @classmethod
    def from_messages(
        cls,
        errors: Iterable[str],
        warnings: Iterable[str] = (),
    ) -> "ValidationResult":
        errors = list(errors)
        return cls(is_valid=not errors, errors=errors, warnings=list(warnings))

    @classmethod
    def combine(cls, results: Iterable["ValidationResult"]) -> "ValidationResult":
        """Concatenate messages; valid only if no result carries an error."""
        errors: List[str] = []
        warnings: List[str] = []
        for result in results:
            errors.extend(result.errors)
            warnings.extend(result.warnings)
        return cls.from_messages(errors, warnings)


@dataclass(frozen=True)
class MethodologyIssue:
    """
    One methodology rule breach.

    affected_nodes holds node ids taken from the graph, not from the
    message text.
    """

    code: str
    rule: str
    message: str
    affected_nodes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MethodologyReport:
    is_valid: bool
    violations: List[MethodologyIssue]
    warnings: List[MethodologyIssue]
    suggestions: List[str]
