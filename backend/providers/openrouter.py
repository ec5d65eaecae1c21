"""OpenRouter LLM provider implementation.

OpenRouter proxies many vendors behind one OpenAI-compatible endpoint.
Public ids are prefixed with "openrouter/" so they never collide with a
direct provider's ids; the vendor path goes in ``model``.
"""

from decimal import Decimal

from .base import ModelCapabilities, ModelConfig, ModelLimits, ModelPricing
from .openai_compatible import OpenAICompatibleProvider


def _routed(
    slug: str,
    name: str,
    vendor_model: str,
    cutoff: str,
    input_price: str,
    output_price: str,
    max_tokens: int,
    context_window: int,
    reasoning: bool = False,
    multimodal: bool = False,
) -> ModelConfig:
    return ModelConfig(
        id=f"openrouter/{slug}",
        name=f"{name} (via OpenRouter)",
        provider="OpenRouter",
        model=vendor_model,
        knowledge_cutoff=cutoff,
        capabilities=ModelCapabilities(
            reasoning=reasoning,
            multimodal=multimodal,
            function_calling=True,
        ),
        pricing=ModelPricing(
            input_per_million=Decimal(input_price),
            output_per_million=Decimal(output_price),
        ),
        limits=ModelLimits(max_tokens=max_tokens, context_window=context_window),
    )


OPENROUTER_MODELS: list[ModelConfig] = [
    _routed("grok-4", "Grok 4", "x-ai/grok-4", "October 2024", "5.00", "15.00", 8192, 128000, reasoning=True, multimodal=True),
    _routed("grok-3", "Grok 3", "x-ai/grok-3", "December 2024", "3.00", "15.00", 8192, 131000, reasoning=True, multimodal=True),
    _routed("grok-3-mini", "Grok 3 Mini", "x-ai/grok-3-mini", "October 2024", "0.50", "2.00", 8192, 128000),
    _routed("grok-3-fast", "Grok 3 Fast", "x-ai/grok-3-fast", "December 2024", "1.00", "4.00", 8192, 128000),
    _routed("grok-3-mini-fast", "Grok 3 Mini Fast", "x-ai/grok-3-mini-fast", "October 2024", "0.25", "1.00", 8192, 128000),
    _routed("qwen-3-235b", "Qwen 3 235B", "qwen/qwen3-235b-a22b-07-25", "July 2025", "0.15", "0.85", 32768, 262000, reasoning=True),
    _routed(
        "llama-4-maverick", "Llama 4 Maverick", "meta-llama/llama-4-maverick", "December 2024",
        "0.80", "2.40", 32768, 256000, reasoning=True, multimodal=True,
    ),
    _routed("llama-3.3-70b", "Llama 3.3 70B", "meta-llama/llama-3.3-70b-instruct", "December 2024", "0.60", "0.60", 16384, 131072),
    _routed("mistral-large", "Mistral Large", "mistral/mistral-large-2411", "October 2024", "2.00", "6.00", 16384, 128000),
    _routed("command-r-plus", "Command R+", "cohere/command-r-plus", "April 2024", "2.50", "10.00", 16384, 128000),
]


class OpenRouterProvider(OpenAICompatibleProvider):
    """Provider for models hosted on OpenRouter."""

    name = "OpenRouter"
    models = OPENROUTER_MODELS
