from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
  """Wallet actions an utterance can resolve to."""

  transfer = "transfer"
  swap = "swap"
  auto_trade_setting = "auto_trade_setting"


class BaseAction(BaseModel):
  """Immutable, executable action record. Aliases are the oracle wire names."""

  model_config = ConfigDict(frozen=True, populate_by_name=True)

  def to_call(self) -> Dict[str, Any]:
    """Wire-format arguments, accepted back by the validator unchanged."""
    return self.model_dump(mode="json", by_alias=True, exclude={"kind"})

  def to_record(self) -> Dict[str, Any]:
    """Consumer-facing record: kind discriminator plus wire fields."""
    return self.model_dump(mode="json", by_alias=True)


class TransferAction(BaseAction):
  """Send tokens to another user."""

  kind: Literal[ActionKind.transfer] = ActionKind.transfer
  token: str = Field(..., alias="specifiedToken", min_length=1)
  amount: Decimal = Field(..., alias="specifiedAmount", gt=0)
  recipient: str = Field(..., alias="transferTo", min_length=1)


class SwapAction(BaseAction):
  """Buy one token with another; amount is denominated in reference_token."""

  kind: Literal[ActionKind.swap] = ActionKind.swap
  token_to_buy: str = Field(..., alias="tokenToBuy", min_length=1)
  token_to_sell: str = Field(..., alias="tokenToSell", min_length=1)
  amount: Decimal = Field(..., alias="specifiedAmount", gt=0)
  reference_token: str = Field(..., alias="specifiedToken", min_length=1)


class AutoTradeSetting(BaseAction):
  """
  Conditions for the auto-trading algorithm.

  A None amount means "use all available funds". A missing lower bound reads
  as 0 and a missing upper bound as unbounded.
  """

  kind: Literal[ActionKind.auto_trade_setting] = ActionKind.auto_trade_setting
  token_to_buy: Optional[str] = Field(..., alias="tokenToBuy")
  token_to_sell: Optional[str] = Field(..., alias="tokenToSell")
  amount: Optional[Decimal] = Field(..., alias="specifiedAmount", gt=0)
  reference_token: Optional[str] = Field(..., alias="specifiedToken")
  buy_min: Optional[Decimal] = Field(default=None, alias="buyMin", ge=0)
  buy_max: Optional[Decimal] = Field(default=None, alias="buyMax", ge=0)
  sell_min: Optional[Decimal] = Field(default=None, alias="sellMin", ge=0)
  sell_max: Optional[Decimal] = Field(default=None, alias="sellMax", ge=0)

  @property
  def uses_all_funds(self) -> bool:
    return self.amount is None

  @property
  def buy_range(self) -> Tuple[Decimal, Optional[Decimal]]:
    return (self.buy_min if self.buy_min is not None else Decimal(0), self.buy_max)

  @property
  def sell_range(self) -> Tuple[Decimal, Optional[Decimal]]:
    return (self.sell_min if self.sell_min is not None else Decimal(0), self.sell_max)


Action = Union[TransferAction, SwapAction, AutoTradeSetting]
