"""
Provider registry.

Owns the provider adapters and one circuit breaker per provider, and
resolves a public model id to the provider that serves it. Constructed once
at startup (see ``providers.factory.build_provider_registry``) and handed to
routes through the service container.
"""

import logging
from typing import AsyncIterator, Iterable, Optional

from shared.exceptions import (
    CircuitBreakerError,
    ModelCompareError,
    ModelNotFoundError,
    ProviderError,
)

from .base import (
    BaseProvider,
    CallOptions,
    ModelConfig,
    ModelInfo,
    ModelMessage,
    ModelResponse,
    StreamChunk,
)
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerSettings,
    CircuitOpenError,
    CircuitState,
)

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Dispatch table from model id to provider, guarded by circuit breakers.

    No retries, load balancing or fallback to another provider: a failed
    call surfaces to the caller as a ProviderError or CircuitBreakerError.
    """

    def __init__(
        self,
        providers: Iterable[BaseProvider],
        breaker_settings: Optional[CircuitBreakerSettings] = None,
        breaker_factory=CircuitBreaker,
    ):
        self._providers: list[BaseProvider] = list(providers)
        self._breakers: dict[str, CircuitBreaker] = {
            provider.name: breaker_factory(provider.name, breaker_settings)
            for provider in self._providers
        }

    # ------------------------------------------------------------------
    # Catalog lookups
    # ------------------------------------------------------------------

    @property
    def providers(self) -> list[BaseProvider]:
        return list(self._providers)

    def get_all_models(self) -> list[ModelConfig]:
        return [model for provider in self._providers for model in provider.models]

    def get_model_by_id(self, model_id: str) -> Optional[ModelConfig]:
        for provider in self._providers:
            config = provider.get_model(model_id)
            if config is not None:
                return config
        return None

    def get_provider_for_model(self, model_id: str) -> BaseProvider:
        """
        Find the provider serving a model.

        Raises:
            ModelNotFoundError: If no provider claims the id
        """
        for provider in self._providers:
            if provider.supports(model_id):
                return provider
        raise ModelNotFoundError(model_id)

    def get_models_by_capability(self, capability: str) -> list[ModelConfig]:
        return [
            model for model in self.get_all_models()
            if getattr(model.capabilities, capability, False)
        ]

    def get_reasoning_models(self) -> list[ModelConfig]:
        return self.get_models_by_capability("reasoning")

    # ------------------------------------------------------------------
    # Breakers
    # ------------------------------------------------------------------

    def get_circuit_breaker(self, provider_name: str) -> CircuitBreaker:
        return self._breakers[provider_name]

    def breaker_states(self) -> dict[str, dict]:
        return {name: breaker.snapshot() for name, breaker in self._breakers.items()}

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    async def call_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> ModelResponse:
        """
        Call a model through its provider's circuit breaker.

        Raises:
            ModelNotFoundError: Unknown model id
            CircuitBreakerError: The provider's circuit is open
            ProviderError: The vendor call failed
        """
        provider = self.get_provider_for_model(model_id)
        breaker = self._breakers[provider.name]

        try:
            response = await breaker.execute(
                lambda: provider.call_model(messages, model_id, options)
            )
        except Exception as e:
            raise self._translate_error(e, provider, breaker, model_id) from e

        config = provider.get_model(model_id)
        if response.model_info is None and config is not None:
            response = response.model_copy(
                update={"model_info": ModelInfo(capabilities=config.capabilities, pricing=config.pricing)}
            )
        return response

    async def call_model_with_prompt(
        self,
        prompt: str,
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> ModelResponse:
        """Convenience wrapper for a single user message."""
        return await self.call_model(
            [ModelMessage(role="user", content=prompt)], model_id, options
        )

    async def stream_model(
        self,
        messages: list[ModelMessage],
        model_id: str,
        options: Optional[CallOptions] = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream a model's output through its provider's breaker.

        The breaker records the outcome of the whole stream, so a mid-stream
        failure counts as one failure.

        Raises:
            ModelNotFoundError: Unknown model id
            CircuitBreakerError: The provider's circuit is open
            ProviderError: The vendor stream failed
        """
        provider = self.get_provider_for_model(model_id)
        breaker = self._breakers[provider.name]

        try:
            breaker.before_call()
        except CircuitOpenError as e:
            raise self._translate_error(e, provider, breaker, model_id) from e

        try:
            async for chunk in provider.stream_model(messages, model_id, options):
                yield chunk
        except Exception as e:
            breaker.record_failure()
            raise self._translate_error(e, provider, breaker, model_id) from e

        breaker.record_success()

    def _translate_error(
        self,
        error: Exception,
        provider: BaseProvider,
        breaker: CircuitBreaker,
        model_id: str,
    ) -> Exception:
        if isinstance(error, CircuitOpenError) or breaker.get_state() == CircuitState.OPEN:
            logger.warning("Rejecting call to %s: circuit open", provider.name)
            return CircuitBreakerError(provider.name, breaker.get_failure_count())

        if isinstance(error, ModelCompareError):
            message = error.message
        else:
            message = str(error)

        logger.error("%s call failed for %s: %s", provider.name, model_id, message)
        return ProviderError(
            f"{provider.name} API error: {message}",
            provider=provider.name,
            details={
                "model_id": model_id,
                "circuit_breaker_state": breaker.get_state().value,
                "failure_count": breaker.get_failure_count(),
            },
        )
