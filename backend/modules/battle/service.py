"""
Battle service.

Model 1 answers the prompt, then model 2 is asked to challenge that
answer. Continuations replay the whole exchange to the next speaker.
"""

import logging

from modules.templates.variable_engine import VariableEngine
from providers.registry import ProviderRegistry

from .models import (
    BattleContinueRequest,
    BattleContinueResponse,
    BattleReply,
    BattleStartRequest,
    BattleStartResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE = (
    'Your competitor told the user this: "{response}"\n\n'
    "Push back on this information or advice. Explain why the user shouldn't "
    "trust the reply or should be wary. Be critical but constructive in your analysis.\n\n"
    'Original user prompt was: "{originalPrompt}"'
)

CONTINUATION_TEMPLATE = (
    "You are in an ongoing debate. Here's the conversation so far:\n\n"
    "{conversation}\n\n"
    "Continue the debate by responding to the last message. Be analytical, "
    "challenge assumptions, and provide counter-arguments or alternative "
    "perspectives. Keep the discussion engaging and substantive."
)


def build_challenge_prompt(
    engine: VariableEngine,
    original_prompt: str,
    response: str,
    challenger_prompt: str | None = None,
) -> str:
    """Fill the challenger template; unknown placeholders are left as written."""
    return engine.render_preview(
        challenger_prompt or DEFAULT_CHALLENGE,
        {"response": response, "originalPrompt": original_prompt},
    )


def build_continuation_prompt(request: BattleContinueRequest) -> str:
    conversation = "\n\n".join(
        f"{entry.model_name}: {entry.content}" for entry in request.battle_history
    )
    return CONTINUATION_TEMPLATE.format(conversation=conversation)


class BattleService:
    """Two-model battles over the provider registry."""

    def __init__(self, providers: ProviderRegistry, engine: VariableEngine | None = None):
        self._providers = providers
        self._engine = engine or VariableEngine(policy="keep")

    async def start(self, request: BattleStartRequest) -> BattleStartResponse:
        first = await self._providers.call_model_with_prompt(request.prompt, request.model1_id)

        challenge = build_challenge_prompt(
            self._engine, request.prompt, first.content, request.challenger_prompt
        )
        second = await self._providers.call_model_with_prompt(challenge, request.model2_id)

        logger.info("Battle %s vs %s complete", request.model1_id, request.model2_id)
        return BattleStartResponse(
            model1_response=BattleReply.from_response(first),
            model2_response=BattleReply.from_response(second),
        )

    async def continue_battle(self, request: BattleContinueRequest) -> BattleContinueResponse:
        response = await self._providers.call_model_with_prompt(
            build_continuation_prompt(request), request.next_model_id
        )
        return BattleContinueResponse(
            response=BattleReply.from_response(response),
            model_id=request.next_model_id,
        )
