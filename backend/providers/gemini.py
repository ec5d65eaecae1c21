"""Google Gemini LLM provider implementation.

Handles Google's Gemini models via the langchain-google-genai package.
Requires a valid API key for authentication.
"""

from decimal import Decimal

from langchain_google_genai import ChatGoogleGenerativeAI

from .base import (
    BaseProvider,
    CallOptions,
    ModelCapabilities,
    ModelConfig,
    ModelLimits,
    ModelPricing,
)


def _gemini(
    model_id: str,
    name: str,
    cutoff: str,
    input_price: str,
    output_price: str,
    context_window: int,
    reasoning: bool = False,
) -> ModelConfig:
    return ModelConfig(
        id=model_id,
        name=name,
        provider="Google",
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
        limits=ModelLimits(max_tokens=8192, context_window=context_window),
    )


GOOGLE_MODELS: list[ModelConfig] = [
    _gemini("gemini-2.5-pro", "Gemini 2.5 Pro", "Early 2023", "2.50", "10.00", 2000000, reasoning=True),
    _gemini("gemini-2.5-flash", "Gemini 2.5 Flash", "Early 2023", "0.075", "0.30", 1000000, reasoning=True),
    _gemini("gemini-2.0-flash", "Gemini 2.0 Flash", "September 2021", "0.075", "0.30", 1000000),
]


class GoogleProvider(BaseProvider):
    """Provider for Google Gemini models.

    Gemini models use the ChatGoogleGenerativeAI client from langchain-google-genai.
    """

    name = "Google"
    api_key_env_var = "GEMINI_API_KEY"
    models = GOOGLE_MODELS

    def get_llm(self, config: ModelConfig, options: CallOptions) -> ChatGoogleGenerativeAI:
        """Return a ChatGoogleGenerativeAI client configured for Gemini.

        Raises:
            ProviderError: If the API key is not configured
        """
        api_key = self._require_api_key()
        return ChatGoogleGenerativeAI(
            model=config.model,
            google_api_key=api_key,
            temperature=options.temperature if options.temperature is not None else 0.7,
            max_output_tokens=options.max_tokens or config.limits.max_tokens,
        )
