"""Exceptions raised while turning an oracle call into an Action.

Field-level problems are ``FieldIssue`` instances collected into a single
``ActionValidationError`` so the caller can name every offending field at
once instead of asking the user one field at a time.
"""

from typing import Any, List, Optional, Sequence, Tuple


class IntentError(Exception):
    """Base exception for all intent resolution errors."""


class UnknownAction(IntentError):
    """Raised when the oracle calls a function that is not in the registry."""

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"Unknown action function: {function_name!r}")


class OracleError(IntentError):
    """Raised when the language model returns no usable structured response."""


# ============================================================================
# Field issues
# ============================================================================

class FieldIssue(IntentError):
    """A single problem with one or more fields of a structured call."""

    fields: Tuple[str, ...] = ()

    def describe(self) -> str:
        return str(self)


class MissingRequiredField(FieldIssue):
    """Required field absent, null where null is not allowed, or blank."""

    def __init__(self, field: str):
        self.field = field
        self.fields = (field,)
        super().__init__(f"Missing required field: {field}")


class TypeMismatch(FieldIssue):
    """Field present but not of the declared type."""

    def __init__(self, field: str, expected: str, actual: Any):
        self.field = field
        self.expected = expected
        self.actual = actual
        self.fields = (field,)
        super().__init__(
            f"{field} must be a {expected}, got {type(actual).__name__} {actual!r}"
        )

    def describe(self) -> str:
        return f"expected a {self.expected}"


class UnexpectedField(FieldIssue):
    """Field not declared by the action schema (oracle contract breach)."""

    def __init__(self, field: str):
        self.field = field
        self.fields = (field,)
        super().__init__(f"Unexpected field: {field}")


class InvariantViolation(FieldIssue):
    """Cross-field or value constraint broken."""

    def __init__(self, fields: Sequence[str], reason: str):
        self.fields = tuple(fields)
        self.reason = reason
        super().__init__(f"{', '.join(self.fields)}: {reason}")

    def describe(self) -> str:
        return self.reason


class RangeInvariantViolation(InvariantViolation):
    """Lower bound not strictly below its paired upper bound."""

    def __init__(self, field_a: str, field_b: str, value_a: Any, value_b: Any):
        self.field_a = field_a
        self.field_b = field_b
        self.value_a = value_a
        self.value_b = value_b
        super().__init__(
            (field_a, field_b),
            f"{field_a} must be less than {field_b}, got {value_a} and {value_b}",
        )


# ============================================================================
# Aggregate
# ============================================================================

class ActionValidationError(IntentError):
    """Raised by the validator with every issue found in one structured call."""

    def __init__(self, function_name: str, issues: Sequence[FieldIssue]):
        self.function_name = function_name
        self.issues: List[FieldIssue] = list(issues)
        super().__init__(
            f"{function_name}: " + "; ".join(str(issue) for issue in self.issues)
        )

    def issues_of(self, issue_type: type) -> List[FieldIssue]:
        return [issue for issue in self.issues if isinstance(issue, issue_type)]

    @property
    def fields(self) -> List[str]:
        seen: List[str] = []
        for issue in self.issues:
            for field in issue.fields:
                if field not in seen:
                    seen.append(field)
        return seen

    @property
    def missing(self) -> List[str]:
        return [issue.field for issue in self.issues_of(MissingRequiredField)]

    @property
    def is_oracle_fault(self) -> bool:
        """True when the call broke the schema contract rather than lacking user input"""
        return bool(self.issues_of(UnexpectedField))

    def user_message(self) -> Optional[str]:
        """
        Render the clarification message, e.g.
        ``missing: specifiedToken, specifiedAmount, transferTo``.
        """
        parts = []
        if self.missing:
            parts.append("missing: " + ", ".join(self.missing))
        for issue in self.issues:
            if isinstance(issue, (MissingRequiredField, UnexpectedField)):
                continue
            parts.append(f"invalid: {', '.join(issue.fields)} ({issue.describe()})")
        return "; ".join(parts) or None
