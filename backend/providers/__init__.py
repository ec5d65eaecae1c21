"""LLM provider implementations."""

from .base import (
    BaseProvider,
    CallOptions,
    CostBreakdown,
    ModelConfig,
    ModelMessage,
    ModelResponse,
    StreamChunk,
    TokenUsage,
    calculate_cost,
)
from .circuit_breaker import CircuitBreaker, CircuitBreakerSettings, CircuitState
from .factory import build_provider_registry, get_providers
from .registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "CallOptions",
    "CostBreakdown",
    "ModelConfig",
    "ModelMessage",
    "ModelResponse",
    "StreamChunk",
    "TokenUsage",
    "calculate_cost",
    "CircuitBreaker",
    "CircuitBreakerSettings",
    "CircuitState",
    "ProviderRegistry",
    "build_provider_registry",
    "get_providers",
]
