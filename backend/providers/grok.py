"""xAI Grok LLM provider implementation.

Grok uses an OpenAI-compatible API, so ChatOpenAI is pointed at xAI's base
URL. This is the legacy direct route; OpenRouter serves the same models
under "openrouter/" ids.
"""

from decimal import Decimal

from .base import ModelCapabilities, ModelConfig, ModelLimits, ModelPricing
from .openai_compatible import OpenAICompatibleProvider


def _grok(
    model_id: str,
    name: str,
    cutoff: str,
    input_price: str,
    output_price: str,
    reasoning: bool = False,
    multimodal: bool = False,
) -> ModelConfig:
    return ModelConfig(
        id=model_id,
        name=name,
        provider="xAI",
        model=model_id,
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
        limits=ModelLimits(max_tokens=8192, context_window=128000),
    )


XAI_MODELS: list[ModelConfig] = [
    _grok("grok-4-0709", "Grok 4", "October 2023", "5.00", "15.00", reasoning=True, multimodal=True),
    _grok("grok-3", "Grok 3", "December 2024", "2.00", "10.00"),
    _grok("grok-3-mini", "Grok 3 Mini", "October 2023", "0.50", "2.00"),
    _grok("grok-3-fast", "Grok 3 Fast", "December 2024", "1.00", "4.00"),
    _grok("grok-3-mini-fast", "Grok 3 Mini Fast", "October 2023", "0.25", "1.00"),
]


class XAIProvider(OpenAICompatibleProvider):
    """Provider for xAI Grok models."""

    name = "xAI"
    models = XAI_MODELS
