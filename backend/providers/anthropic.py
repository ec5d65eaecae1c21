"""Anthropic Claude LLM provider implementation.

Handles Anthropic's Claude models via the langchain-anthropic package.
Reasoning-capable Claude models are asked to show their work inside
<reasoning> tags, which are lifted out of the answer into ``reasoning``.
"""

import re
from decimal import Decimal
from typing import AsyncIterator, Optional

from langchain_anthropic import ChatAnthropic

from .base import (
    BaseProvider,
    CallOptions,
    ModelCapabilities,
    ModelConfig,
    ModelLimits,
    ModelMessage,
    ModelPricing,
    ModelResponse,
    StreamChunk,
)

REASONING_PATTERN = re.compile(r"<reasoning>([\s\S]*?)</reasoning>")

REASONING_INSTRUCTION = (
    "Before providing your final answer, show your step-by-step reasoning "
    "process inside <reasoning> tags. Think through the prompt systematically, "
    "analyzing the request and logical connections.\n\n"
    "<reasoning>\n[Your detailed step-by-step analysis will go here]\n</reasoning>\n\n"
    "Then provide your final response."
)


def _claude(
    model_id: str,
    name: str,
    cutoff: str,
    input_price: str,
    output_price: str,
    max_tokens: int = 8192,
    reasoning: bool = False,
) -> ModelConfig:
    return ModelConfig(
        id=model_id,
        name=name,
        provider="Anthropic",
        model=model_id,
        knowledge_cutoff=cutoff,
        capabilities=ModelCapabilities(
            reasoning=reasoning,
            multimodal=True,
            function_calling=True,
        ),
        pricing=ModelPricing(
            input_per_million=Decimal(input_price),
            output_per_million=Decimal(output_price),
        ),
        limits=ModelLimits(max_tokens=max_tokens, context_window=200000),
    )


ANTHROPIC_MODELS: list[ModelConfig] = [
    _claude("claude-sonnet-4-20250514", "Claude Sonnet 4", "April 2024", "3.00", "15.00", reasoning=True),
    _claude("claude-3-7-sonnet-20250219", "Claude 3.7 Sonnet", "April 2023", "3.00", "15.00", reasoning=True),
    _claude("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", "2022", "3.00", "15.00"),
    _claude("claude-3-haiku-20240307", "Claude 3 Haiku", "Unknown", "0.25", "1.25", max_tokens=4096),
]


def extract_reasoning(content: str) -> tuple[str, Optional[str]]:
    """Split the first <reasoning> block out of a response.

    Returns:
        (content without the block, reasoning text or None)
    """
    match = REASONING_PATTERN.search(content)
    if not match:
        return content, None
    reasoning = match.group(1).strip()
    cleaned = REASONING_PATTERN.sub("", content, count=1).strip()
    return cleaned, reasoning or None


class AnthropicProvider(BaseProvider):
    """Provider for Anthropic Claude models.

    Anthropic models use a different API than OpenAI-compatible providers,
    so we use ChatAnthropic from langchain-anthropic instead of ChatOpenAI.
    """

    name = "Anthropic"
    api_key_env_var = "ANTHROPIC_API_KEY"
    models = ANTHROPIC_MODELS

    def get_llm(self, config: ModelConfig, options: CallOptions) -> ChatAnthropic:
        """Return a ChatAnthropic client configured for Claude.

        Raises:
            ProviderError: If the API key is not configured
        """
        api_key = self._require_api_key()
        return ChatAnthropic(
            model=config.model,
            api_key=api_key,
            max_tokens=min(options.max_tokens or 2000, config.limits.max_tokens),
            temperature=options.temperature if options.temperature is not None else 0.7,
        )

    async def call_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> ModelResponse:
        return await super().call_model(self._with_instruction(messages, model_id), model_id, options)

    async def stream_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        async for chunk in super().stream_model(self._with_instruction(messages, model_id), model_id, options):
            yield chunk

    def _with_instruction(self, messages: list[ModelMessage], model_id: str) -> list[ModelMessage]:
        config = self.get_model(model_id)
        if config is None or not config.capabilities.reasoning:
            return messages
        return [ModelMessage(role="system", content=REASONING_INSTRUCTION), *messages]

    def finalize_content(self, config: ModelConfig, text: str, reasoning: str) -> tuple[str, Optional[str]]:
        if not config.capabilities.reasoning:
            return text, reasoning or None
        cleaned, tagged = extract_reasoning(text)
        return cleaned, reasoning or tagged
