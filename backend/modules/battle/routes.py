"""
Battle mode endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_battle_service
from shared.exceptions import CircuitBreakerError, ModelNotFoundError, ProviderError

from .models import (
    BattleContinueRequest,
    BattleContinueResponse,
    BattleStartRequest,
    BattleStartResponse,
)
from .service import BattleService

router = APIRouter()


def _to_http(error: Exception) -> HTTPException:
    if isinstance(error, ModelNotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, CircuitBreakerError):
        return HTTPException(
            status_code=503,
            detail=error.message,
            headers={"Retry-After": str(error.retry_after)},
        )
    return HTTPException(status_code=502, detail=str(error))


@router.post("/start", response_model=BattleStartResponse)
async def start_battle(
    request: BattleStartRequest,
    service: BattleService = Depends(get_battle_service),
) -> BattleStartResponse:
    """Model 1 answers, model 2 challenges the answer."""
    try:
        return await service.start(request)
    except (ModelNotFoundError, CircuitBreakerError, ProviderError) as e:
        raise _to_http(e)


@router.post("/continue", response_model=BattleContinueResponse)
async def continue_battle(
    request: BattleContinueRequest,
    service: BattleService = Depends(get_battle_service),
) -> BattleContinueResponse:
    """The next model responds to the exchange so far."""
    try:
        return await service.continue_battle(request)
    except (ModelNotFoundError, CircuitBreakerError, ProviderError) as e:
        raise _to_http(e)
