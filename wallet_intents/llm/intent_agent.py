"""
Intent Agent - LangGraph-based resolver from an utterance to an Action.

Flow:
  START → extract → [validate] → END

extract issues exactly one tool-calling request to the chat model; there is
no retry, planning loop or confirmation round-trip. Retry policy belongs to
whoever calls resolve().
"""

import asyncio
import logging
import re
from typing import Any, Callable, Dict, List, Literal, Optional, TypedDict

from langchain_google_genai import ChatGoogleGenerativeAI
from langgraph.graph import END, START, StateGraph

from wallet_intents.core import settings
from wallet_intents.llm.errors import ActionValidationError, OracleError, UnknownAction
from wallet_intents.llm.outcomes import Executable, NeedsInfo, OracleFailure, ResolvedIntent
from wallet_intents.llm.schemas import tool_definitions
from wallet_intents.llm.validator import validate_function_call

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a blockchain application bot. You help users parse parameters for actions they want to do on their wallets, so under no circumstances should you hallucinate factual information.

User confirmation is handled elsewhere. Do not under any circumstances ask for confirmation.

You should use function calls. Your only purpose is to help the user with their wallet actions using function calls. Only if the user does not provide enough information for the required fields, return a message that tells the user which information is missing.

The bot also has an AI setting feature, where the user can tell the AI to make some trading decisions for them given a few requirements; for this feature look into the function definitions and call settingAI. If the user does not provide you with trading limits, do not ask for confirmation and proceed with function calling."""


# ============================================================================
# State Definition
# ============================================================================

class ResolutionState(TypedDict, total=False):
    """State that flows through the graph"""
    # Input
    utterance: str
    model: Optional[str]

    # Oracle output
    function_name: Optional[str]
    call_args: Dict[str, Any]

    # Output
    outcome: ResolvedIntent


# A text reply must ask the user for something to count as NeedsInfo
_MISSING_INFO_CUES = re.compile(
    r"\?|\b(missing|need|needs|provide|specify|tell me|which|what|who|how much|how many|"
    r"recipient|amount|token|currency|price)\b",
    re.IGNORECASE,
)


def _asks_for_info(text: str) -> bool:
    return _MISSING_INFO_CUES.search(text) is not None


def _message_text(content: Any) -> str:
    """Flatten AIMessage content, which Gemini may return as a list of parts"""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts: List[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts).strip()
    return ""


# ============================================================================
# LangGraph Intent Agent
# ============================================================================

class IntentGraphAgent:
    """
    LangGraph-based intent resolver:
      1) Ask the model for one function call constrained to the schema registry
      2) Validate and normalize the call
      3) Return Executable, NeedsInfo or OracleFailure
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        google_api_key: Optional[str] = None,
        llm: Optional[Any] = None,
        llm_factory: Optional[Callable[[str], Any]] = None,
        oracle_timeout: Optional[float] = None,
    ) -> None:
        self.api_key = google_api_key or settings.GOOGLE_AI_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.oracle_timeout = oracle_timeout if oracle_timeout is not None else settings.ORACLE_TIMEOUT_SECONDS

        # Allow injection for tests
        self.llm_factory = llm_factory or self._build_llm
        self.llm = llm or self.llm_factory(self.model_name)
        self.tools = tool_definitions()

        # Build the graph
        self.app = self._build_graph()

    def _build_llm(self, model: str) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=self.api_key,
            temperature=settings.ORACLE_TEMPERATURE,
        )

    def _llm_for(self, model: Optional[str]) -> Any:
        if model is None or model == self.model_name:
            return self.llm
        return self.llm_factory(model)

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph state machine"""
        graph = StateGraph(ResolutionState)

        graph.add_node("extract", self._extract_call)
        graph.add_node("validate", self._validate_call)

        graph.add_edge(START, "extract")
        graph.add_conditional_edges(
            "extract",
            self._route_after_extract,
            {
                "resolved": END,
                "needs_validation": "validate",
            }
        )
        graph.add_edge("validate", END)

        return graph.compile()

    # ========================================================================
    # Graph Nodes
    # ========================================================================

    async def _invoke_oracle(self, model: Optional[str], utterance: str) -> Any:
        llm_with_tools = self._llm_for(model).bind_tools(self.tools)
        messages = [("system", SYSTEM_PROMPT), ("human", utterance)]

        # Run synchronously inside a thread to avoid event-loop init errors from the SDK
        call = asyncio.to_thread(llm_with_tools.invoke, messages)
        if self.oracle_timeout:
            return await asyncio.wait_for(call, timeout=self.oracle_timeout)
        return await call

    async def _extract_call(self, state: ResolutionState) -> ResolutionState:
        """Node: one constrained generation request"""
        utterance = state["utterance"]

        try:
            ai_msg = await self._invoke_oracle(state.get("model"), utterance)
        except asyncio.TimeoutError:
            logger.error(f"Oracle call timed out after {self.oracle_timeout}s")
            state["outcome"] = OracleFailure(reason="Oracle call timed out")
            return state
        except Exception as e:
            logger.error(f"Oracle call failed: {e}")
            state["outcome"] = OracleFailure(reason=f"Oracle call failed: {e}")
            return state

        try:
            return self._read_response(ai_msg, state)
        except OracleError as e:
            logger.error(str(e))
            state["outcome"] = OracleFailure(reason=str(e))
            return state

    def _read_response(self, ai_msg: Any, state: ResolutionState) -> ResolutionState:
        """Record the function call, or the model's own missing-info message"""
        tool_calls = getattr(ai_msg, "tool_calls", None) or []
        if tool_calls:
            if len(tool_calls) > 1:
                logger.warning(f"Oracle returned {len(tool_calls)} function calls, using the first")
            call = tool_calls[0]
            state["function_name"] = call["name"]
            state["call_args"] = call.get("args") or {}
            logger.info(f"Oracle selected {call['name']} with args: {state['call_args']}")
            return state

        if getattr(ai_msg, "invalid_tool_calls", None):
            raise OracleError(f"Oracle returned unparseable function calls: {ai_msg.invalid_tool_calls}")

        text = _message_text(getattr(ai_msg, "content", None))
        if not text:
            raise OracleError("Oracle returned neither a function call nor a message")
        if not _asks_for_info(text):
            raise OracleError(f"Oracle replied without a function call or a missing-info request: {text}")

        # The model explains what is missing instead of calling a function
        logger.info(f"Oracle asked for more information: {text}")
        state["outcome"] = NeedsInfo(message=text)
        return state

    def _route_after_extract(self, state: ResolutionState) -> Literal["resolved", "needs_validation"]:
        """Conditional edge: stop early when extract already produced an outcome"""
        if state.get("outcome") is not None:
            return "resolved"
        return "needs_validation"

    async def _validate_call(self, state: ResolutionState) -> ResolutionState:
        """Node: normalize and validate the structured call"""
        function_name = state["function_name"]

        try:
            action = validate_function_call(function_name, state.get("call_args", {}))
        except UnknownAction as e:
            logger.error(str(e))
            state["outcome"] = OracleFailure(reason=str(e))
            return state
        except ActionValidationError as e:
            if e.is_oracle_fault:
                logger.error(f"Oracle broke the {function_name} schema: {e}")
                state["outcome"] = OracleFailure(reason=str(e))
            else:
                logger.warning(f"Validation failed: {e}")
                state["outcome"] = NeedsInfo(message=e.user_message(), fields=e.fields)
            return state

        logger.info(f"Resolved {action.kind.value}: {action.to_call()}")
        state["outcome"] = Executable(action=action)
        return state

    # ========================================================================
    # Public Interface
    # ========================================================================

    async def resolve(self, utterance: str, model: Optional[str] = None) -> ResolvedIntent:
        """
        Resolve one utterance.

        Args:
            utterance: The user's free-form request
            model: Chat model for this call only (defaults to the agent's model)

        Returns:
            Executable | NeedsInfo | OracleFailure
        """
        if not utterance or not utterance.strip():
            return NeedsInfo(message="missing: request", fields=["request"])

        initial_state: ResolutionState = {
            "utterance": utterance.strip(),
            "model": model,
            "call_args": {},
        }
        try:
            final_state = await self.app.ainvoke(initial_state)
        except asyncio.CancelledError:
            # Surface as a transient failure instead of leaving the caller waiting
            logger.error("Intent resolution cancelled while waiting on the oracle")
            # The cancel request is consumed here; clear it so later
            # asyncio.timeout() blocks in the same task still work (3.11+)
            task = asyncio.current_task()
            if task is not None and hasattr(task, "uncancel"):
                task.uncancel()
            return OracleFailure(reason="Oracle call was cancelled")
        return final_state["outcome"]

