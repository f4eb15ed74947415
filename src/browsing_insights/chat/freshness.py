"""Freshness scoring for recent user chat messages.

A message's freshness is an exponential half-life decay over its age:

    freshness = exp(-ln 2 * age_days / half_life_days)

clamped into ``[0.0, 1.0]``; messages created now or in the future score
exactly 1.0.

Classes
-------
- ChatMessage — a stored chat message as supplied by the chat store
- ChatConfig  — result cap and half-life for chat selection
- ScoredChat  — a message paired with its freshness score

Functions
---------
- compute_freshness_score — freshness of one creation time
- score_recent_chats      — select and score recent user messages
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from browsing_insights.decay import HalfLifeDecay
from browsing_insights.timeunits import MS_PER_DAY, MS_PER_SECOND

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50
DEFAULT_HALF_LIFE_DAYS = 7.0
USER_ROLE = "user"


class ChatMessage(BaseModel):
    """A chat message.

    Parameters
    ----------
    created_ms:
        Creation time in milliseconds since the Unix epoch.
    role:
        Message role; only ``"user"`` messages feed insights.
    content:
        Message body, if any.
    page_url:
        URL of the page the conversation was attached to, if any.
    """

    created_ms: int
    role: str = USER_ROLE
    content: str | None = None
    page_url: str | None = None

    model_config = {"frozen": True}


class ChatConfig(BaseModel):
    """How many chats to keep and how quickly their freshness decays."""

    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=0)
    half_life_days: float = Field(default=DEFAULT_HALF_LIFE_DAYS, gt=0)

    model_config = {"frozen": True}


@dataclass(frozen=True)
class ScoredChat:
    """A chat message with its freshness score in ``[0, 1]``."""

    message: ChatMessage
    freshness_score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "created_ms": self.message.created_ms,
            "role": self.message.role,
            "content": self.message.content,
            "page_url": self.message.page_url,
            "freshness_score": self.freshness_score,
        }


def _as_ms(value: int | float | datetime) -> float:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * MS_PER_SECOND
    return float(value)


def compute_freshness_score(
    created: int | float | datetime,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    now: int | float | datetime | None = None,
) -> float:
    """Return the freshness score of a message created at ``created``.

    Parameters
    ----------
    created:
        Creation time as epoch milliseconds or a ``datetime`` (naive
        datetimes are read as UTC).
    half_life_days:
        Age, in days, at which the score halves.
    now:
        Reference time, same accepted types as ``created``.  Defaults to
        the current time.

    Returns
    -------
    float
        1.0 for ages of zero or less, otherwise the decayed score clamped
        to ``[0.0, 1.0]``.
    """
    now_ms = time.time() * MS_PER_SECOND if now is None else _as_ms(now)
    age_days = (now_ms - _as_ms(created)) / MS_PER_DAY
    if age_days <= 0:
        return 1.0
    raw = HalfLifeDecay(half_life_days=half_life_days).factor(age_days)
    return max(0.0, min(1.0, raw))


def score_recent_chats(
    messages: Iterable[ChatMessage],
    start_ms: int = 0,
    max_results: int = DEFAULT_MAX_RESULTS,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    now: int | float | datetime | None = None,
) -> list[ScoredChat]:
    """Select recent user messages and score their freshness.

    Only user-role messages created in ``[start_ms, now]`` are kept; they
    are ordered most recent first and capped at ``max_results``.
    """
    now_ms = time.time() * MS_PER_SECOND if now is None else _as_ms(now)
    selected = [
        message
        for message in messages
        if message.role == USER_ROLE and start_ms <= message.created_ms <= now_ms
    ]
    selected.sort(key=lambda message: message.created_ms, reverse=True)
    selected = selected[: max(0, max_results)]

    scored = [
        ScoredChat(
            message=message,
            freshness_score=compute_freshness_score(message.created_ms, half_life_days, now_ms),
        )
        for message in selected
    ]
    logger.debug("score_recent_chats: kept %d user messages", len(scored))
    return scored
