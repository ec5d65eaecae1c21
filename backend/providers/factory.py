"""Factory functions for creating LLM providers and the provider registry."""

from shared.config import Settings

from .anthropic import AnthropicProvider
from .base import BaseProvider
from .circuit_breaker import CircuitBreakerSettings
from .deepseek import DeepSeekProvider
from .gemini import GoogleProvider
from .grok import XAIProvider
from .openai import OpenAIProvider
from .openrouter import OpenRouterProvider
from .registry import ProviderRegistry


def get_providers(settings: Settings) -> list[BaseProvider]:
    """Instantiate every provider with its API key from settings.

    Providers without a key are still registered so their catalogs are
    listed; calls to them fail with a ProviderError naming the missing key.

    Returns:
        Providers in catalog order: OpenAI, Anthropic, Google, DeepSeek,
        OpenRouter, xAI
    """
    return [
        OpenAIProvider(settings.openai_api_key),
        AnthropicProvider(settings.anthropic_api_key),
        GoogleProvider(settings.gemini_api_key),
        DeepSeekProvider(settings.deepseek_api_key),
        OpenRouterProvider(settings.openrouter_api_key),
        XAIProvider(settings.grok_api_key),
    ]


def build_provider_registry(settings: Settings) -> ProviderRegistry:
    """Build the registry used by the running application."""
    breaker_settings = CircuitBreakerSettings.from_milliseconds(
        failure_threshold=settings.circuit_breaker_failure_threshold,
        recovery_timeout_ms=settings.circuit_breaker_recovery_timeout,
        monitoring_period_ms=settings.circuit_breaker_monitoring_period,
    )
    return ProviderRegistry(get_providers(settings), breaker_settings)
