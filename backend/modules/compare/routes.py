"""
Compare and model catalog endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_compare_service
from api.middleware.auth import get_device_user
from modules.auth.models import User
from modules.billing.exceptions import InsufficientCreditsError
from providers.base import ModelConfig, ModelResponse
from shared.exceptions import CircuitBreakerError, ModelNotFoundError, ProviderError

from .exceptions import ComparisonNotFoundError
from .models import Comparison, CompareRequest, CompareResponse, RespondRequest
from .service import CompareService

router = APIRouter()


@router.get("/models", response_model=list[ModelConfig])
async def list_models(
    service: CompareService = Depends(get_compare_service),
) -> list[ModelConfig]:
    """Every model served by a registered provider."""
    return service.list_models()


@router.post("/compare", response_model=CompareResponse)
async def compare_models(
    request: CompareRequest,
    user: User = Depends(get_device_user),
    service: CompareService = Depends(get_compare_service),
) -> CompareResponse:
    """
    Send one prompt to several models concurrently.

    Each model's result carries its own status; one failure does not fail
    the request. Credits are charged only for successful calls.
    """
    try:
        comparison = await service.compare(request, user)
    except InsufficientCreditsError as e:
        raise HTTPException(
            status_code=402,
            detail={
                "error": "Insufficient credits",
                "message": e.message,
                "credits": e.details["credits"],
                "requires_payment": True,
            },
        )
    return CompareResponse(id=comparison.id, responses=comparison.responses)


@router.get("/comparisons", response_model=list[Comparison])
async def list_comparisons(
    service: CompareService = Depends(get_compare_service),
) -> list[Comparison]:
    """Comparison history, newest first."""
    return service.list_comparisons()


@router.get("/comparisons/{comparison_id}", response_model=Comparison)
async def get_comparison(
    comparison_id: str,
    service: CompareService = Depends(get_compare_service),
) -> Comparison:
    try:
        return service.get_comparison(comparison_id)
    except ComparisonNotFoundError:
        raise HTTPException(status_code=404, detail="Comparison not found")


@router.post("/models/respond", response_model=ModelResponse)
async def model_respond(
    request: RespondRequest,
    service: CompareService = Depends(get_compare_service),
) -> ModelResponse:
    """Call a single model and return its full response."""
    try:
        return await service.respond(request)
    except ModelNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except CircuitBreakerError as e:
        raise HTTPException(
            status_code=503,
            detail=e.message,
            headers={"Retry-After": str(e.retry_after)},
        )
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=e.message)
