from wallet_intents.llm.actions import (
    Action,
    ActionKind,
    AutoTradeSetting,
    SwapAction,
    TransferAction,
)
from wallet_intents.llm.errors import (
    ActionValidationError,
    FieldIssue,
    IntentError,
    InvariantViolation,
    MissingRequiredField,
    OracleError,
    RangeInvariantViolation,
    TypeMismatch,
    UnexpectedField,
    UnknownAction,
)
from wallet_intents.llm.outcomes import Executable, NeedsInfo, OracleFailure, ResolvedIntent
from wallet_intents.llm.schemas import (
    SCHEMA_REGISTRY,
    FieldSpec,
    FieldType,
    ParameterSchema,
    schema_for,
    schema_for_function,
    tool_definitions,
)
from wallet_intents.llm.tokens import TOKEN_ALIASES, normalize_token
from wallet_intents.llm.validator import validate_action, validate_function_call

__all__ = [
    "Action",
    "ActionKind",
    "AutoTradeSetting",
    "SwapAction",
    "TransferAction",
    "ActionValidationError",
    "FieldIssue",
    "IntentError",
    "InvariantViolation",
    "MissingRequiredField",
    "OracleError",
    "RangeInvariantViolation",
    "TypeMismatch",
    "UnexpectedField",
    "UnknownAction",
    "Executable",
    "NeedsInfo",
    "OracleFailure",
    "ResolvedIntent",
    "SCHEMA_REGISTRY",
    "FieldSpec",
    "FieldType",
    "ParameterSchema",
    "schema_for",
    "schema_for_function",
    "tool_definitions",
    "TOKEN_ALIASES",
    "normalize_token",
    "validate_action",
    "validate_function_call",
]
