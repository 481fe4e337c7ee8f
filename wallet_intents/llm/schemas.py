"""
Action schema registry.

One ParameterSchema per ActionKind. The same objects are serialized into the
oracle's function definitions and walked by the validator, so the two can not
drift apart.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple, Type, get_args

from wallet_intents.llm.actions import (
  ActionKind,
  AutoTradeSetting,
  BaseAction,
  SwapAction,
  TransferAction,
)
from wallet_intents.llm.errors import UnknownAction


class FieldType(str, Enum):
  string = "string"
  number = "number"


@dataclass(frozen=True)
class FieldSpec:
  name: str
  attribute: str
  type: FieldType
  description: str
  required: bool = True
  nullable: bool = False
  # Currency fields are passed through normalize_token
  currency: bool = False

  def to_json_schema(self) -> Dict[str, Any]:
    if self.nullable:
      return {
        "anyOf": [{"type": self.type.value}, {"type": "null"}],
        "description": self.description,
      }
    return {"type": self.type.value, "description": self.description}


@dataclass(frozen=True)
class ParameterSchema:
  kind: ActionKind
  function_name: str
  description: str
  fields: Tuple[FieldSpec, ...]
  model: Type[BaseAction]

  def __post_init__(self) -> None:
    problems = self.model_mismatches()
    if problems:
      raise TypeError(
        f"{self.function_name} schema disagrees with {self.model.__name__}: " + "; ".join(problems)
      )

  def model_mismatches(self) -> List[str]:
    """Differences between the FieldSpecs and the Action model they build."""
    model_fields = {
      name: info for name, info in self.model.model_fields.items() if name != "kind"
    }
    attributes = {spec.attribute for spec in self.fields}
    problems = [
      f"{name} declared on only one side" for name in sorted(set(model_fields) ^ attributes)
    ]
    for spec in self.fields:
      info = model_fields.get(spec.attribute)
      if info is None:
        continue
      if info.alias != spec.name:
        problems.append(f"{spec.attribute} alias {info.alias!r} != {spec.name!r}")
      if info.is_required() != spec.required:
        problems.append(f"{spec.name} required={spec.required} but model says {info.is_required()}")
      allows_none = type(None) in get_args(info.annotation)
      if allows_none != spec.nullable:
        problems.append(f"{spec.name} nullable={spec.nullable} but model says {allows_none}")
    return problems

  @property
  def field_names(self) -> Tuple[str, ...]:
    return tuple(spec.name for spec in self.fields)

  @property
  def required_names(self) -> Tuple[str, ...]:
    return tuple(spec.name for spec in self.fields if spec.required)

  def field(self, name: str) -> FieldSpec:
    for spec in self.fields:
      if spec.name == name:
        return spec
    raise KeyError(name)

  def to_tool_definition(self) -> Dict[str, Any]:
    """OpenAI-style function definition, as accepted by ``bind_tools``."""
    return {
      "type": "function",
      "function": {
        "name": self.function_name,
        "description": self.description,
        "parameters": {
          "type": "object",
          "properties": {spec.name: spec.to_json_schema() for spec in self.fields},
          "additionalProperties": False,
          "required": list(self.required_names),
        },
      },
    }


_CURRENCY_HINT = (
  "Currencies accepted are USDC, ETH, BTC, and any other ERC20 token. Try to account "
  "for user abbreviations and full names, always interpret USD as USDC and Ethereum as ETH."
)


# ============================================================================
# TRANSFER
# ============================================================================

TRANSFER_SCHEMA = ParameterSchema(
  kind=ActionKind.transfer,
  function_name="transfer_tokens",
  description=(
    "Transfer or Send Tokens to another user, given the specified amount, currency "
    "and the receiver's name. " + _CURRENCY_HINT
  ),
  fields=(
    FieldSpec(
      "specifiedToken", "token", FieldType.string,
      "The currency of the token to transfer.",
      currency=True,
    ),
    FieldSpec(
      "specifiedAmount", "amount", FieldType.number,
      "The amount of tokens to transfer, can be in decimals or floating point numbers.",
    ),
    FieldSpec(
      "transferTo", "recipient", FieldType.string,
      "The name of the user to transfer the tokens to.",
    ),
  ),
  model=TransferAction,
)


# ============================================================================
# SWAP
# ============================================================================

SWAP_SCHEMA = ParameterSchema(
  kind=ActionKind.swap,
  function_name="swap_tokens",
  description=(
    "Buy or sell tokens between two specified currencies. The specifiedAmount and "
    "specifiedToken fields represent whatever value is mentioned by the user, no matter "
    "if the specifiedToken is the one selling or buying. " + _CURRENCY_HINT
  ),
  fields=(
    FieldSpec(
      "tokenToBuy", "token_to_buy", FieldType.string,
      "The specified token currency to buy.",
      currency=True,
    ),
    FieldSpec(
      "tokenToSell", "token_to_sell", FieldType.string,
      "The specified token currency to sell.",
      currency=True,
    ),
    FieldSpec(
      "specifiedAmount", "amount", FieldType.number,
      "The amount of tokens to buy or sell, whichever one the user mentions a value for, "
      "can be in decimals or floating point numbers.",
    ),
    FieldSpec(
      "specifiedToken", "reference_token", FieldType.string,
      "The token currency which the user is referencing when giving the specified amount. "
      "Must be either tokenToBuy or tokenToSell.",
      currency=True,
    ),
  ),
  model=SwapAction,
)


# ============================================================================
# AUTO TRADE SETTING
# ============================================================================

AUTO_TRADE_SCHEMA = ParameterSchema(
  kind=ActionKind.auto_trade_setting,
  function_name="settingAI",
  description=(
    "Sets certain attributes that might be used for AI trading algorithm in order to help "
    "the user buy or sell their tokens when their mentioned conditions are met. Note that "
    "not all parameters are required, if the users did not provide any of the fields, set "
    "those fields as null. " + _CURRENCY_HINT
  ),
  fields=(
    FieldSpec(
      "tokenToBuy", "token_to_buy", FieldType.string,
      "The specified token currency to buy.",
      nullable=True, currency=True,
    ),
    FieldSpec(
      "tokenToSell", "token_to_sell", FieldType.string,
      "The specified token currency to sell.",
      nullable=True, currency=True,
    ),
    FieldSpec(
      "specifiedAmount", "amount", FieldType.number,
      "The amount of tokens to trade, can be in decimals or floating point numbers. "
      "However, if the user doesn't specify the amount, it means they want to use all "
      "their funds to buy or sell the token, so the default value should be null.",
      nullable=True,
    ),
    FieldSpec(
      "specifiedToken", "reference_token", FieldType.string,
      "The token currency which the user is referencing when giving the specified amount.",
      nullable=True, currency=True,
    ),
    FieldSpec(
      "buyMax", "buy_max", FieldType.number,
      "If the user wants to buy tokens, buyMax represents the upper bound of the range of "
      "price that should trigger the AI algorithm for a trade. For example, if the user "
      "specified to buy ethereum when the price drops to $100, buyMax's value should then "
      "be 100 since the range to buy is now $0-$100. This field should default to null.",
      required=False, nullable=True,
    ),
    FieldSpec(
      "buyMin", "buy_min", FieldType.number,
      "If the user wants to buy tokens, buyMin represents the lower bound of the range of "
      "price that should trigger the AI algorithm for a trade. For example, if the user "
      "specified to buy ethereum when the price rises to $50, buyMin's value should then "
      "be 50 since the range to buy is now $50-$infinity. This field should default to null.",
      required=False, nullable=True,
    ),
    FieldSpec(
      "sellMax", "sell_max", FieldType.number,
      "If the user wants to sell tokens, sellMax represents the upper bound of the range of "
      "price that should trigger the AI algorithm for a trade. For example, if the user "
      "mentioned to sell USDC for ETH when the price of ETH drops to $10, sellMax's value "
      "should then be 10 since the range to sell USDC is now $0-$10. This field should "
      "default to null.",
      required=False, nullable=True,
    ),
    FieldSpec(
      "sellMin", "sell_min", FieldType.number,
      "If the user wants to sell tokens, sellMin represents the lower bound of the range of "
      "price that should trigger the AI algorithm for a trade. For example, if the user "
      "mentioned to sell USDC for ETH when the price of ETH rises to $20, sellMin's value "
      "should then be 20 since the range to sell USDC is now $20-$infinity. This field "
      "should default to null.",
      required=False, nullable=True,
    ),
  ),
  model=AutoTradeSetting,
)


# ============================================================================
# REGISTRY
# ============================================================================

SCHEMA_REGISTRY: Mapping[ActionKind, ParameterSchema] = MappingProxyType({
  schema.kind: schema for schema in (TRANSFER_SCHEMA, SWAP_SCHEMA, AUTO_TRADE_SCHEMA)
})

FUNCTION_REGISTRY: Mapping[str, ParameterSchema] = MappingProxyType({
  schema.function_name: schema for schema in SCHEMA_REGISTRY.values()
})


def schema_for(kind: ActionKind) -> ParameterSchema:
  return SCHEMA_REGISTRY[ActionKind(kind)]


def schema_for_function(function_name: str) -> ParameterSchema:
  try:
    return FUNCTION_REGISTRY[function_name]
  except KeyError:
    raise UnknownAction(function_name) from None


def tool_definitions() -> List[Dict[str, Any]]:
  return [schema.to_tool_definition() for schema in SCHEMA_REGISTRY.values()]
