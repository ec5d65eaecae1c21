"""Base classes and models for LLM providers."""

import logging
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, AsyncIterator, Literal, Optional

from langchain_core.runnables import Runnable
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
)
from pydantic import BaseModel, Field

from shared.exceptions import ModelNotFoundError, ProviderError

logger = logging.getLogger(__name__)

ONE_MILLION = Decimal(1_000_000)


class ModelCapabilities(BaseModel):
    """Feature flags advertised for a model."""

    model_config = {"frozen": True}

    reasoning: bool = False
    multimodal: bool = False
    function_calling: bool = False
    streaming: bool = True


class ModelPricing(BaseModel):
    """Per-million-token prices in USD."""

    model_config = {"frozen": True}

    input_per_million: Decimal
    output_per_million: Decimal
    reasoning_per_million: Optional[Decimal] = None


class ModelLimits(BaseModel):
    """Token limits for a model."""

    model_config = {"frozen": True}

    max_tokens: int
    context_window: int


class ModelConfig(BaseModel):
    """Static catalog entry describing one model a provider serves.

    Attributes:
        id: Public model id used by the API (e.g., "openrouter/grok-4")
        name: Display name
        provider: Owning provider's name (e.g., "OpenAI")
        model: Vendor model name sent to the API
        supports_temperature: False for models that reject a temperature
    """

    model_config = {"frozen": True}

    id: str
    name: str
    provider: str
    model: str
    knowledge_cutoff: Optional[str] = None
    capabilities: ModelCapabilities
    pricing: ModelPricing
    limits: ModelLimits
    supports_temperature: bool = True


class ModelMessage(BaseModel):
    """A single prompt message."""

    role: Literal["system", "user", "assistant", "context"]
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class CallOptions(BaseModel):
    """Per-call tuning knobs."""

    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    system_prompt: Optional[str] = None
    reasoning_effort: Optional[Literal["minimal", "low", "medium", "high"]] = None
    previous_response_id: Optional[str] = None


class TokenUsage(BaseModel):
    """Token counts reported by the vendor."""

    input: int = 0
    output: int = 0
    reasoning: Optional[int] = None


class CostBreakdown(BaseModel):
    """Cost in USD derived from token usage and pricing."""

    input: Decimal = Decimal(0)
    output: Decimal = Decimal(0)
    reasoning: Optional[Decimal] = None
    total: Decimal = Decimal(0)


class ModelInfo(BaseModel):
    """Capabilities and pricing echoed back with a response."""

    capabilities: ModelCapabilities
    pricing: ModelPricing


class ModelResponse(BaseModel):
    """Result of one provider call. Immutable once created."""

    model_config = {"frozen": True}

    content: str
    reasoning: Optional[str] = None
    response_time: int = Field(..., description="Milliseconds spent waiting on the vendor")
    system_prompt: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    cost: Optional[CostBreakdown] = None
    model_info: Optional[ModelInfo] = None
    response_id: Optional[str] = None


class StreamChunk(BaseModel):
    """One increment of a streamed response.

    The final chunk of a stream has type "complete" and carries the
    assembled ModelResponse.
    """

    type: Literal["reasoning", "text", "complete"]
    delta: str = ""
    response: Optional[ModelResponse] = None


def calculate_cost(model_config: ModelConfig, token_usage: TokenUsage) -> CostBreakdown:
    """Price token usage against a model's per-million rates.

    Reasoning tokens are charged only when both a reasoning count and a
    reasoning rate are present.
    """
    pricing = model_config.pricing
    input_cost = Decimal(token_usage.input) / ONE_MILLION * pricing.input_per_million
    output_cost = Decimal(token_usage.output) / ONE_MILLION * pricing.output_per_million

    reasoning_cost: Optional[Decimal] = None
    if token_usage.reasoning and pricing.reasoning_per_million is not None:
        reasoning_cost = (
            Decimal(token_usage.reasoning) / ONE_MILLION * pricing.reasoning_per_million
        )

    total = input_cost + output_cost + (reasoning_cost or Decimal(0))
    return CostBreakdown(
        input=input_cost,
        output=output_cost,
        reasoning=reasoning_cost,
        total=total,
    )


class BaseProvider(ABC):
    """Abstract base class for LLM providers.

    Every vendor adapter wraps a LangChain chat model. Subclasses provide a
    static model catalog and ``get_llm``; message conversion, invocation,
    streaming, token accounting and pricing are shared here.
    """

    name: str = ""
    api_key_env_var: str = ""
    models: list[ModelConfig] = []

    def __init__(self, api_key: str = ""):
        self.api_key = api_key

    @abstractmethod
    def get_llm(self, config: ModelConfig, options: CallOptions) -> Runnable:
        """Return a configured chat client for the given model.

        Args:
            config: Catalog entry for the model being called
            options: Per-call options (temperature, token limits, ...)

        Returns:
            A LangChain chat model (or a binding of one) ready for
            ainvoke/astream

        Raises:
            ProviderError: If the provider's API key is not configured
        """
        pass

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_model(self, model_id: str) -> Optional[ModelConfig]:
        """Find a catalog entry by public id or vendor model name."""
        for config in self.models:
            if config.id == model_id or config.model == model_id:
                return config
        return None

    def supports(self, model_id: str) -> bool:
        return self.get_model(model_id) is not None

    def calculate_cost(self, config: ModelConfig, token_usage: TokenUsage) -> CostBreakdown:
        return calculate_cost(config, token_usage)

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderError(
                f"{self.name} API key is required. "
                f"Set it via the {self.api_key_env_var} environment variable.",
                provider=self.name,
            )
        return self.api_key

    # ------------------------------------------------------------------
    # Message conversion
    # ------------------------------------------------------------------

    def build_messages(
        self,
        messages: list[ModelMessage],
        options: CallOptions,
    ) -> list[BaseMessage]:
        """Convert ModelMessages to LangChain messages.

        System content (including ``options.system_prompt``) is merged into a
        single leading SystemMessage. Context messages are folded into the
        next user message under a "Context:" preamble.
        """
        system_parts: list[str] = []
        if options.system_prompt:
            system_parts.append(options.system_prompt)

        converted: list[BaseMessage] = []
        pending_context: list[str] = []

        for message in messages:
            if message.role == "system":
                system_parts.append(message.content)
            elif message.role == "context":
                pending_context.append(message.content)
            elif message.role == "assistant":
                converted.append(AIMessage(content=message.content))
            else:
                content = message.content
                if pending_context:
                    context = "\n\n".join(pending_context)
                    content = f"Context:\n{context}\n\n{content}"
                    pending_context = []
                converted.append(HumanMessage(content=content))

        if pending_context:
            context = "\n\n".join(pending_context)
            converted.append(HumanMessage(content=f"Context:\n{context}"))

        if system_parts:
            converted.insert(0, SystemMessage(content="\n\n".join(system_parts)))
        return converted

    @staticmethod
    def describe_prompt(lc_messages: list[BaseMessage]) -> str:
        """Render the sent prompt for display alongside the response."""
        return "\n\n".join(f"{m.type}: {m.content}" for m in lc_messages)

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------

    def split_content(self, message: BaseMessage) -> tuple[str, str]:
        """Split a (possibly chunked) message into (text, reasoning).

        Handles plain string content and the content-block lists used by
        Anthropic ("thinking") and newer OpenAI models ("reasoning").
        """
        content = message.content
        if isinstance(content, str):
            return content, ""

        text_parts: list[str] = []
        reasoning_parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                text_parts.append(block)
                continue
            block_type = block.get("type")
            if block_type == "text":
                text_parts.append(block.get("text", ""))
            elif block_type == "thinking":
                reasoning_parts.append(block.get("thinking", ""))
            elif block_type == "reasoning":
                reasoning_parts.append(block.get("reasoning", "") or block.get("text", ""))
        return "".join(text_parts), "".join(reasoning_parts)

    def finalize_content(self, config: ModelConfig, text: str, reasoning: str) -> tuple[str, Optional[str]]:
        """Post-process assembled output. Subclasses may extract inline reasoning."""
        return text, reasoning or None

    @staticmethod
    def extract_token_usage(message: BaseMessage) -> Optional[TokenUsage]:
        usage = getattr(message, "usage_metadata", None)
        if not usage:
            return None
        details = usage.get("output_token_details") or {}
        return TokenUsage(
            input=usage.get("input_tokens", 0),
            output=usage.get("output_tokens", 0),
            reasoning=details.get("reasoning") or None,
        )

    @staticmethod
    def extract_response_id(message: BaseMessage) -> Optional[str]:
        metadata = getattr(message, "response_metadata", None) or {}
        return metadata.get("id") or getattr(message, "id", None)

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _resolve(self, model_id: str) -> ModelConfig:
        config = self.get_model(model_id)
        if config is None:
            raise ModelNotFoundError(model_id)
        return config

    def _build_response(
        self,
        config: ModelConfig,
        message: BaseMessage,
        text: str,
        reasoning: str,
        started: float,
        prompt: str,
    ) -> ModelResponse:
        content, reasoning_text = self.finalize_content(config, text, reasoning)
        token_usage = self.extract_token_usage(message)
        cost = self.calculate_cost(config, token_usage) if token_usage else None
        return ModelResponse(
            content=content or "No response generated",
            reasoning=reasoning_text,
            response_time=int((time.perf_counter() - started) * 1000),
            system_prompt=prompt,
            token_usage=token_usage,
            cost=cost,
            model_info=ModelInfo(capabilities=config.capabilities, pricing=config.pricing),
            response_id=self.extract_response_id(message),
        )

    async def call_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> ModelResponse:
        """Send messages to a model and wait for the full response."""
        options = options or CallOptions()
        config = self._resolve(model_id)
        llm = self.get_llm(config, options)
        lc_messages = self.build_messages(messages, options)

        started = time.perf_counter()
        result = await llm.ainvoke(lc_messages)
        text, reasoning = self.split_content(result)
        reasoning += self.chunk_reasoning(result)
        return self._build_response(
            config, result, text, reasoning, started, self.describe_prompt(lc_messages)
        )

    async def stream_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream a response as reasoning/text deltas, ending with "complete"."""
        options = options or CallOptions()
        config = self._resolve(model_id)
        llm = self.get_llm(config, options)
        lc_messages = self.build_messages(messages, options)

        started = time.perf_counter()
        aggregate = None
        text_parts: list[str] = []
        reasoning_parts: list[str] = []

        async for chunk in llm.astream(lc_messages):
            aggregate = chunk if aggregate is None else aggregate + chunk
            text, reasoning = self.split_content(chunk)
            reasoning += self.chunk_reasoning(chunk)
            if reasoning:
                reasoning_parts.append(reasoning)
                yield StreamChunk(type="reasoning", delta=reasoning)
            if text:
                text_parts.append(text)
                yield StreamChunk(type="text", delta=text)

        final_message = aggregate if aggregate is not None else AIMessage(content="")
        response = self._build_response(
            config,
            final_message,
            "".join(text_parts),
            "".join(reasoning_parts),
            started,
            self.describe_prompt(lc_messages),
        )
        yield StreamChunk(type="complete", response=response)

    def chunk_reasoning(self, chunk: BaseMessage) -> str:
        """Reasoning carried outside the content blocks (vendor specific)."""
        return ""
