"""
Battle module.

One model answers, another challenges; continuations replay the history.
"""

from .models import (
    BattleContinueRequest,
    BattleContinueResponse,
    BattleHistoryEntry,
    BattleReply,
    BattleStartRequest,
    BattleStartResponse,
)

__all__ = [
    "BattleContinueRequest",
    "BattleContinueResponse",
    "BattleHistoryEntry",
    "BattleReply",
    "BattleStartRequest",
    "BattleStartResponse",
]
