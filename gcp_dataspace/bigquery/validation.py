"""Validation of BigQuery data addresses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..models import DataAddress
from . import schema


@dataclass(frozen=True)
class Violation:
    message: str
    path: Optional[str] = None


@dataclass
class ValidationResult:
    violations: List[Violation] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.violations

    @property
    def failure_detail(self) -> Optional[str]:
        if self.succeeded:
            return None
        return ", ".join(violation.message for violation in self.violations)


def validate_source_address(address: DataAddress) -> ValidationResult:
    """A BigQuery source must carry a non-blank query."""
    violations: List[Violation] = []

    query = address.get_string_property(schema.QUERY)
    if query is None or not query.strip():
        violations.append(Violation(f"Must have a {schema.QUERY} property", schema.QUERY))

    return ValidationResult(violations)
