"""
Compare service.

Fans a prompt out to several models concurrently, records each model's
outcome independently, persists the comparison and charges credits for
the calls that succeeded.
"""

import asyncio
import logging
from typing import Optional

from modules.auth.models import User
from modules.billing.interfaces import IBillingService
from providers.base import CallOptions, ModelConfig, ModelResponse
from providers.registry import ProviderRegistry
from shared.exceptions import ModelCompareError

from .exceptions import ComparisonNotFoundError
from .interfaces import IComparisonRepository
from .models import Comparison, CompareRequest, ModelResult, RespondRequest

logger = logging.getLogger(__name__)


def result_from_response(response: ModelResponse) -> ModelResult:
    return ModelResult(
        content=response.content,
        status="success",
        response_time=response.response_time,
        reasoning=response.reasoning,
        token_usage=response.token_usage,
        cost=response.cost,
        model_info=response.model_info,
    )


class CompareService:
    """Comparison orchestration over the provider registry."""

    def __init__(
        self,
        repository: IComparisonRepository,
        providers: ProviderRegistry,
        billing: IBillingService,
    ):
        self._repository = repository
        self._providers = providers
        self._billing = billing

    def list_models(self) -> list[ModelConfig]:
        return self._providers.get_all_models()

    async def _call(self, prompt: str, model_id: str) -> ModelResult:
        try:
            response = await self._providers.call_model_with_prompt(prompt, model_id)
        except ModelCompareError as e:
            logger.warning("Compare call to %s failed: %s", model_id, e.message)
            return ModelResult(status="error", error=e.message)
        return result_from_response(response)

    async def compare(self, request: CompareRequest, user: User) -> Comparison:
        """
        Run one comparison for a user.

        Raises:
            InsufficientCreditsError: The user cannot afford a single call
        """
        self._billing.require_credits(user)

        results = await asyncio.gather(
            *(self._call(request.prompt, model_id) for model_id in request.model_ids)
        )
        responses = dict(zip(request.model_ids, results))

        successful = sum(1 for r in results if r.status == "success")
        self._billing.charge_successful_calls(user, successful)

        comparison = self._repository.create(
            prompt=request.prompt,
            selected_models=request.model_ids,
            responses=responses,
        )
        logger.info(
            "Comparison %s: %d/%d models succeeded",
            comparison.id,
            successful,
            len(request.model_ids),
        )
        return comparison

    def list_comparisons(self) -> list[Comparison]:
        return self._repository.list()

    def get_comparison(self, comparison_id: str) -> Comparison:
        comparison = self._repository.get(comparison_id)
        if comparison is None:
            raise ComparisonNotFoundError(comparison_id)
        return comparison

    async def respond(self, request: RespondRequest) -> ModelResponse:
        """Single model call; provider errors propagate to the caller."""
        options: Optional[CallOptions] = request.options
        return await self._providers.call_model_with_prompt(request.prompt, request.model_id, options)
