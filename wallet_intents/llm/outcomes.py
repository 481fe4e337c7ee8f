from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from wallet_intents.llm.actions import AutoTradeSetting, SwapAction, TransferAction


class Executable(BaseModel):
  """Utterance fully resolved to a valid action."""

  model_config = ConfigDict(frozen=True)

  status: Literal["executable"] = "executable"
  action: Union[TransferAction, SwapAction, AutoTradeSetting] = Field(..., discriminator="kind")

  def to_record(self) -> Dict[str, Any]:
    return {"status": self.status, "action": self.action.to_record()}


class NeedsInfo(BaseModel):
  """Required information is missing or unclear; nothing was resolved."""

  model_config = ConfigDict(frozen=True)

  status: Literal["needs_info"] = "needs_info"
  message: str
  fields: List[str] = Field(default_factory=list)

  def to_record(self) -> Dict[str, Any]:
    return self.model_dump(mode="json")


class OracleFailure(BaseModel):
  """The oracle gave no usable structured response. Transient: the caller may retry."""

  model_config = ConfigDict(frozen=True)

  status: Literal["oracle_failure"] = "oracle_failure"
  reason: str

  def to_record(self) -> Dict[str, Any]:
    return self.model_dump(mode="json")


ResolvedIntent = Union[Executable, NeedsInfo, OracleFailure]
