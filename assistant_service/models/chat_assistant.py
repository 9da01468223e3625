"""
MotionCare Assistant Service - Chat Assistant

Turn-based injury intake conversation. The guidance given to the model
changes with the number of answers the patient has already given.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .prompts import (
    CHAT_CONTEXT_GENERIC,
    CHAT_CONTEXT_WITH_INJURY,
    CHAT_STAGE_FOLLOW_UP,
    CHAT_STAGE_OPEN,
    CHAT_STAGE_WRAP_UP,
)

logger = logging.getLogger(__name__)

_ROLE_MAP = {"user": "user", "assistant": "model", "model": "model"}


@dataclass
class ChatTurn:
    role: str  # "user" or "model"
    text: str


@dataclass
class InjuryContext:
    injury_type: str = "unspecified"
    pain_location: str = "unspecified area"
    severity: Optional[str] = "moderate"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["InjuryContext"]:
        if not data:
            return None
        return cls(
            injury_type=str(data.get("injuryType") or "unspecified"),
            pain_location=str(data.get("painLocation") or "unspecified area"),
            severity=str(data.get("severity") or "moderate"),
        )


def normalize_history(history: Optional[Sequence[Dict[str, Any]]]) -> List[ChatTurn]:
    """Keep user/assistant turns with text; assistant turns become 'model'."""
    turns = []
    for item in history or ():
        if not isinstance(item, dict):
            continue
        role = _ROLE_MAP.get(item.get("role"))
        text = item.get("text")
        if role is None or not text:
            continue
        turns.append(ChatTurn(role=role, text=str(text)))
    return turns


def build_system_context(injury: Optional[InjuryContext], user_turns: int) -> str:
    if injury:
        context = CHAT_CONTEXT_WITH_INJURY.format(
            injury_type=injury.injury_type,
            pain_location=injury.pain_location,
            severity=f" ({injury.severity} severity)" if injury.severity else "",
        )
    else:
        context = CHAT_CONTEXT_GENERIC

    if user_turns == 1:
        context += CHAT_STAGE_FOLLOW_UP
    elif user_turns == 2:
        context += CHAT_STAGE_WRAP_UP
    elif user_turns > 2:
        context += CHAT_STAGE_OPEN
    return context


def build_chat_prompt(message: str, turns: Sequence[ChatTurn], injury: Optional[InjuryContext]) -> str:
    user_turns = sum(1 for t in turns if t.role == "user")
    parts = [build_system_context(injury, user_turns), "\n\nPrevious conversation:"]
    for turn in turns:
        speaker = "Assistant" if turn.role == "model" else "User"
        parts.append(f"{speaker}: {turn.text}")
    parts.append(f"\n\nUser's current message: {message}\n\nAssistant response:")
    return "\n".join(parts)


class ChatAssistant:
    """Physical-therapy intake chat."""

    TEMPERATURE = 0.7
    MAX_TOKENS = 2048

    def __init__(self, llm_client):
        self.llm = llm_client

    def reply(
        self,
        message: str,
        history: Optional[Sequence[Dict[str, Any]]] = None,
        injury_context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Generate the assistant's next message.

        Raises:
            LLMError: if the model call fails
        """
        turns = normalize_history(history)
        injury = InjuryContext.from_dict(injury_context)
        logger.info(f"💬 Chat turn (history: {len(turns)} items, injury: {injury.injury_type if injury else None})")

        prompt = build_chat_prompt(str(message), turns, injury)
        return self.llm.generate_content(
            prompt,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
