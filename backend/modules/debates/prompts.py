"""
Debate prompt construction.

Each turn sends three messages: a standing preamble with the adversarial
guidance, a system prompt naming the side and proposition, and a user
instruction (opening statement for turns 1-2, rebuttal afterwards).
"""

from dataclasses import dataclass
from typing import Optional

from providers.base import ModelMessage

from .models import DebateStreamPayload


@dataclass(frozen=True)
class IntensityLevel:
    level: int
    label: str
    summary: str
    guidance: str

    @property
    def heading(self) -> str:
        return f"Level {self.level} - {self.label} ({self.summary})"

    @property
    def full_text(self) -> str:
        return f"{self.heading}\n{self.guidance}"


INTENSITY_LEVELS: dict[int, IntensityLevel] = {
    1: IntensityLevel(
        level=1,
        label="Respectful",
        summary="collegial disagreement",
        guidance=(
            "Acknowledge the merits of your opponent's points before answering them. "
            "Keep the tone courteous and focus on the strongest version of their case."
        ),
    ),
    2: IntensityLevel(
        level=2,
        label="Assertive",
        summary="firm but fair",
        guidance=(
            "Press your position confidently. Challenge weak evidence directly, "
            "but do not attack your opponent's character or motives."
        ),
    ),
    3: IntensityLevel(
        level=3,
        label="Aggressive",
        summary="hard-hitting",
        guidance=(
            "Go after every gap in your opponent's reasoning. Use pointed rhetoric, "
            "concede nothing you can contest, and make the jury feel the stakes."
        ),
    ),
    4: IntensityLevel(
        level=4,
        label="Combative",
        summary="no quarter given",
        guidance=(
            "Treat this as a decisive showdown. Dismantle your opponent's arguments "
            "relentlessly and with sharp wit, staying factual while giving no ground."
        ),
    ),
}

DEBATE_PREAMBLE = (
    "You are engaged in a debate with another LLM. The debate follows standard "
    "parliamentary procedure. You are ethically obligated to provide the best "
    "defense for your position. Your opponent will attempt to sway you and the "
    "jury; you must stick to your position and convictions."
)

BASE_SYSTEM_TEMPLATE = (
    'You are the {role} debater arguing {position} the proposition: "{topic}". '
    "Maintain the adversarial guidance provided: {intensity}."
)


def get_intensity(level: int) -> IntensityLevel:
    """Clamp to the 1-4 scale and return its descriptor."""
    return INTENSITY_LEVELS[min(max(level, 1), 4)]


def _support(position: str) -> tuple[str, str]:
    if position == "FOR":
        return "support", "should be adopted"
    return "oppose", "should be rejected"


def build_opening_instruction(payload: DebateStreamPayload, heading: str) -> str:
    verb, _ = _support(payload.position)
    return (
        "Present your opening argument following Robert's Rules of Order. "
        f'Explain why you {verb} the proposition "{payload.topic}". '
        f"Maintain the {heading} adversarial guidance provided in the developer message."
    )


def format_opponent_quote(message: Optional[str]) -> str:
    trimmed = (message or "").strip()
    if not trimmed:
        return ""
    return f'Opponent\'s latest statement:\n"""\n{trimmed}\n"""\n\n'


def build_rebuttal_instruction(payload: DebateStreamPayload, heading: str) -> str:
    _, outcome = _support(payload.position)
    return (
        f"{format_opponent_quote(payload.opponent_message)}"
        "Deliver a rebuttal that:\n"
        "1. Addresses your opponent's specific claims.\n"
        "2. Refutes their arguments with evidence and logic.\n"
        f'3. Reinforces why the proposition "{payload.topic}" {outcome}.\n'
        f"4. Maintains the {heading} adversarial guidance provided in the developer message."
    )


def build_turn_messages(payload: DebateStreamPayload) -> list[ModelMessage]:
    """Assemble the messages sent to the model for one debate turn."""
    intensity = get_intensity(payload.intensity_level)
    guidance = payload.intensity_guidance or intensity.full_text

    preamble = f"{DEBATE_PREAMBLE}\n\nAdversarial intensity guidance:\n{guidance}"
    system = BASE_SYSTEM_TEMPLATE.format(
        role=payload.role.value,
        position=payload.position,
        topic=payload.topic,
        intensity=guidance,
    )
    if payload.turn_number <= 2:
        instruction = build_opening_instruction(payload, intensity.heading)
    else:
        instruction = build_rebuttal_instruction(payload, intensity.heading)

    return [
        ModelMessage(role="system", content=preamble),
        ModelMessage(role="system", content=system),
        ModelMessage(role="user", content=instruction),
    ]
