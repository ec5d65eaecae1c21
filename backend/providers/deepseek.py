"""DeepSeek LLM provider implementation.

DeepSeek exposes an OpenAI-compatible API. The R1 reasoner returns its
chain of thought as ``reasoning_content`` alongside the answer, which
ChatOpenAI surfaces in ``additional_kwargs``.
"""

from decimal import Decimal

from langchain_core.messages import BaseMessage

from .base import ModelCapabilities, ModelConfig, ModelLimits, ModelPricing
from .openai_compatible import OpenAICompatibleProvider


DEEPSEEK_MODELS: list[ModelConfig] = [
    ModelConfig(
        id="deepseek-reasoner",
        name="DeepSeek R1 Reasoner",
        provider="DeepSeek",
        model="deepseek-reasoner",
        capabilities=ModelCapabilities(reasoning=True, function_calling=True),
        pricing=ModelPricing(
            input_per_million=Decimal("0.55"),
            output_per_million=Decimal("2.19"),
            reasoning_per_million=Decimal("2.19"),
        ),
        limits=ModelLimits(max_tokens=8000, context_window=128000),
    ),
    ModelConfig(
        id="deepseek-chat",
        name="DeepSeek V3 Chat",
        provider="DeepSeek",
        model="deepseek-chat",
        capabilities=ModelCapabilities(function_calling=True),
        pricing=ModelPricing(
            input_per_million=Decimal("0.27"),
            output_per_million=Decimal("1.10"),
        ),
        limits=ModelLimits(max_tokens=4000, context_window=128000),
    ),
]


class DeepSeekProvider(OpenAICompatibleProvider):
    """Provider for DeepSeek V3 and R1."""

    name = "DeepSeek"
    models = DEEPSEEK_MODELS

    def chunk_reasoning(self, chunk: BaseMessage) -> str:
        return chunk.additional_kwargs.get("reasoning_content") or ""
