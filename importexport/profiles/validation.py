"""Validation of key/value metadata against profile field rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, List, Literal, Mapping, Optional, Tuple

from importexport.exceptions import ProfileValidationError

ViolationKind = Literal["missing", "invalid_value"]

FieldRules = Mapping[str, Optional[AbstractSet[str]]]


@dataclass(frozen=True, slots=True)
class FieldViolation:
    field: str
    kind: ViolationKind
    section: str
    value: Optional[str] = None
    allowed: Tuple[str, ...] = ()

    def describe(self) -> str:
        if self.kind == "missing":
            return f'"{self.field}" is a required field in {self.section}.'
        return (
            f'"{self.value}" is not valid for "{self.field}" in {self.section}. '
            f'Valid values are "{",".join(self.allowed)}".'
        )


def collect_violations(
    section: str, rules: FieldRules, fields: Mapping[str, str]
) -> List[FieldViolation]:
    """
    Check candidate fields against rules and return every violation found.

    Args:
        section: Label for the section being checked, used in messages only
        rules: Field name to allowed values; None or empty accepts any value
        fields: Candidate field name to value

    Returns:
        Violations in rule order, empty when the fields pass
    """
    violations: List[FieldViolation] = []
    for field_name, allowed in rules.items():
        if field_name not in fields:
            violations.append(FieldViolation(field_name, "missing", section))
            continue

        value = fields[field_name]
        if allowed and value not in allowed:
            violations.append(
                FieldViolation(
                    field_name,
                    "invalid_value",
                    section,
                    value=value,
                    allowed=tuple(sorted(allowed)),
                )
            )
    return violations


def validate(section: str, rules: FieldRules, fields: Mapping[str, str]) -> None:
    """
    Validate fields against rules, raising once with all violations.

    Raises:
        ProfileValidationError: If any rule is not satisfied
    """
    violations = collect_violations(section, rules, fields)
    if violations:
        raise ProfileValidationError(section, violations)
