"""
Battle mode data models.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from providers.base import CostBreakdown, ModelResponse, TokenUsage


class BattleStartRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    model1_id: str = Field(..., min_length=1)
    model2_id: str = Field(..., min_length=1)
    challenger_prompt: Optional[str] = Field(
        None,
        description="Template for model 2; {response} and {originalPrompt} are substituted",
    )


class BattleReply(BaseModel):
    content: str
    response_time: int
    status: Literal["success"] = "success"
    reasoning: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    cost: Optional[CostBreakdown] = None

    @classmethod
    def from_response(cls, response: ModelResponse) -> "BattleReply":
        return cls(
            content=response.content,
            response_time=response.response_time,
            reasoning=response.reasoning,
            token_usage=response.token_usage,
            cost=response.cost,
        )


class BattleStartResponse(BaseModel):
    model1_response: BattleReply
    model2_response: BattleReply


class BattleHistoryEntry(BaseModel):
    model_name: str
    content: str


class BattleContinueRequest(BaseModel):
    battle_history: list[BattleHistoryEntry] = Field(..., min_length=1)
    next_model_id: str = Field(..., min_length=1)


class BattleContinueResponse(BaseModel):
    response: BattleReply
    model_id: str
