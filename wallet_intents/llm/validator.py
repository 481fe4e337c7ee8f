"""
Action validator.

Turns a raw oracle call (wire field names, JSON values) into an immutable
Action record, or raises ActionValidationError listing every problem:

  1. unknown keys, missing required keys, blank values
  2. per-field type checks (numeric strings are accepted for numbers)
  3. cross-field invariants, only once every field is well-formed
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping

from wallet_intents.llm.actions import Action, ActionKind
from wallet_intents.llm.errors import (
    ActionValidationError,
    FieldIssue,
    InvariantViolation,
    MissingRequiredField,
    RangeInvariantViolation,
    TypeMismatch,
    UnexpectedField,
)
from wallet_intents.llm.schemas import (
    FieldSpec,
    FieldType,
    ParameterSchema,
    schema_for,
    schema_for_function,
)
from wallet_intents.llm.tokens import normalize_token

logger = logging.getLogger(__name__)

# Marks a key that was not sent at all (distinct from an explicit null)
_ABSENT = object()


# ============================================================================
# Field coercion
# ============================================================================

def to_decimal(value: Any) -> Decimal:
    """Coerce a JSON number or numeric string; raises ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest form, so 0.1 stays 0.1
        number = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}") from None
    else:
        raise ValueError(f"unsupported type {type(value).__name__}")

    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def _check_field(spec: FieldSpec, value: Any, issues: List[FieldIssue]) -> Any:
    """Return the coerced value, or record an issue and return _ABSENT."""
    if value is _ABSENT:
        if spec.required:
            issues.append(MissingRequiredField(spec.name))
            return _ABSENT
        return None

    if value is None or _is_blank(value):
        if spec.nullable:
            return None
        issues.append(MissingRequiredField(spec.name))
        return _ABSENT

    if spec.type is FieldType.number:
        try:
            return to_decimal(value)
        except ValueError:
            issues.append(TypeMismatch(spec.name, "number", value))
            return _ABSENT

    if not isinstance(value, str):
        issues.append(TypeMismatch(spec.name, "string", value))
        return _ABSENT
    if not spec.currency:
        return value.strip()

    token = normalize_token(value)
    if token:
        return token
    # e.g. a bare "$"
    if spec.nullable:
        return None
    issues.append(MissingRequiredField(spec.name))
    return _ABSENT


# ============================================================================
# Invariants (values keyed by wire name, already coerced and normalized)
# ============================================================================

def _check_positive_amount(values: Dict[str, Any], issues: List[FieldIssue]) -> None:
    amount = values.get("specifiedAmount")
    if amount is not None and amount <= 0:
        issues.append(InvariantViolation(
            ("specifiedAmount",), f"amount must be greater than zero, got {amount}"
        ))


def _check_distinct_tokens(values: Dict[str, Any], issues: List[FieldIssue]) -> None:
    buy, sell = values.get("tokenToBuy"), values.get("tokenToSell")
    if buy is not None and buy == sell:
        issues.append(InvariantViolation(
            ("tokenToBuy", "tokenToSell"), f"cannot buy and sell the same token ({buy})"
        ))


def _check_reference_token(values: Dict[str, Any], issues: List[FieldIssue]) -> None:
    buy, sell = values.get("tokenToBuy"), values.get("tokenToSell")
    reference = values.get("specifiedToken")
    if reference is None or buy is None or sell is None:
        return
    if reference not in (buy, sell):
        issues.append(InvariantViolation(
            ("specifiedToken",),
            f"amount must be given in {buy} or {sell}, got {reference}",
        ))


def _check_bounds(values: Dict[str, Any], issues: List[FieldIssue]) -> None:
    for name in ("buyMin", "buyMax", "sellMin", "sellMax"):
        bound = values.get(name)
        if bound is not None and bound < 0:
            issues.append(InvariantViolation((name,), f"price bound cannot be negative, got {bound}"))

    for low_name, high_name in (("buyMin", "buyMax"), ("sellMin", "sellMax")):
        low, high = values.get(low_name), values.get(high_name)
        if low is not None and high is not None and low >= high:
            issues.append(RangeInvariantViolation(low_name, high_name, low, high))


def _transfer_invariants(values, issues):
    _check_positive_amount(values, issues)


def _swap_invariants(values, issues):
    _check_positive_amount(values, issues)
    _check_distinct_tokens(values, issues)
    _check_reference_token(values, issues)


def _auto_trade_invariants(values, issues):
    _check_positive_amount(values, issues)
    _check_distinct_tokens(values, issues)
    _check_reference_token(values, issues)
    _check_bounds(values, issues)


INVARIANTS: Mapping[ActionKind, Callable[[Dict[str, Any], List[FieldIssue]], None]] = {
    ActionKind.transfer: _transfer_invariants,
    ActionKind.swap: _swap_invariants,
    ActionKind.auto_trade_setting: _auto_trade_invariants,
}


# ============================================================================
# Public interface
# ============================================================================

def validate_call(schema: ParameterSchema, raw_call: Mapping[str, Any]) -> Action:
    if not isinstance(raw_call, Mapping):
        raise TypeError(f"{schema.function_name} arguments must be a mapping, got {type(raw_call).__name__}")

    issues: List[FieldIssue] = []
    declared = set(schema.field_names)
    for name in raw_call:
        if name not in declared:
            issues.append(UnexpectedField(name))

    values: Dict[str, Any] = {}
    for spec in schema.fields:
        value = _check_field(spec, raw_call.get(spec.name, _ABSENT), issues)
        if value is not _ABSENT:
            values[spec.name] = value

    # Invariants are meaningless on partially typed input
    if not issues:
        INVARIANTS[schema.kind](values, issues)

    if issues:
        error = ActionValidationError(schema.function_name, issues)
        logger.debug(f"Rejected {schema.function_name} call: {error}")
        raise error

    return schema.model(**{schema.field(name).attribute: value for name, value in values.items()})


def validate_action(kind: ActionKind, raw_call: Mapping[str, Any]) -> Action:
    """Validate wire-format arguments for the given action kind."""
    return validate_call(schema_for(kind), raw_call)


def validate_function_call(function_name: str, raw_call: Mapping[str, Any]) -> Action:
    """Validate a call by its oracle function name; raises UnknownAction for strangers."""
    return validate_call(schema_for_function(function_name), raw_call)
