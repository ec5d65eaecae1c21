"""OpenAI LLM provider implementation.

Handles OpenAI's GPT and o-series models via ChatOpenAI. GPT-5 and the
o-series are reasoning models that reject a temperature and take a
reasoning effort instead.
"""

from decimal import Decimal

from .base import ModelCapabilities, ModelConfig, ModelLimits, ModelPricing
from .openai_compatible import OpenAICompatibleProvider


def _openai_model(
    model_id: str,
    name: str,
    cutoff: str,
    input_price: str,
    output_price: str,
    max_tokens: int,
    context_window: int,
    reasoning: bool = False,
    multimodal: bool = True,
    tools: bool = True,
) -> ModelConfig:
    return ModelConfig(
        id=model_id,
        name=name,
        provider="OpenAI",
        model=model_id,
        knowledge_cutoff=cutoff,
        capabilities=ModelCapabilities(
            reasoning=reasoning,
            multimodal=multimodal,
            function_calling=tools,
            streaming=tools,
        ),
        pricing=ModelPricing(
            input_per_million=Decimal(input_price),
            output_per_million=Decimal(output_price),
        ),
        limits=ModelLimits(max_tokens=max_tokens, context_window=context_window),
        supports_temperature=not reasoning,
    )


OPENAI_MODELS: list[ModelConfig] = [
    _openai_model("gpt-5-2025-08-07", "GPT-5", "October 2024", "1.25", "10.00", 128000, 400000, reasoning=True),
    _openai_model("gpt-5-mini-2025-08-07", "GPT-5 Mini", "October 2024", "0.25", "2.00", 128000, 400000, reasoning=True),
    _openai_model("gpt-5-nano-2025-08-07", "GPT-5 Nano", "May 31, 2024", "0.05", "0.40", 128000, 400000, reasoning=True),
    _openai_model("gpt-4.1-nano-2025-04-14", "GPT-4.1 Nano", "October 2023", "0.50", "2.00", 16384, 128000),
    _openai_model("gpt-4.1-mini-2025-04-14", "GPT-4.1 Mini", "June 2024", "1.00", "4.00", 16384, 128000),
    _openai_model("gpt-4o-mini-2024-07-18", "GPT-4o Mini", "October 2023", "0.15", "0.60", 16384, 128000),
    _openai_model(
        "o4-mini-2025-04-16", "OpenAI o4 Mini", "June 2024", "2.00", "8.00", 65536, 128000,
        reasoning=True, multimodal=False, tools=False,
    ),
    _openai_model(
        "o3-2025-04-16", "OpenAI o3", "June 2024", "15.00", "60.00", 65536, 200000,
        reasoning=True, multimodal=False, tools=False,
    ),
    _openai_model("gpt-4.1-2025-04-14", "GPT-4.1", "June 2024", "5.00", "15.00", 16384, 200000),
]


class OpenAIProvider(OpenAICompatibleProvider):
    """Provider for OpenAI models."""

    name = "OpenAI"
    models = OPENAI_MODELS
