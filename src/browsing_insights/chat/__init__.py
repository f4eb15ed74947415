"""Chat message subpackage.

Public surface
--------------
- ChatMessage             — stored chat message model
- ChatConfig              — result cap and freshness half-life
- compute_freshness_score — half-life freshness of a creation time
- score_recent_chats      — recent user messages with freshness scores
"""
from __future__ import annotations

from browsing_insights.chat.freshness import (
    ChatConfig,
    ChatMessage,
    ScoredChat,
    compute_freshness_score,
    score_recent_chats,
)

__all__ = [
    "ChatConfig",
    "ChatMessage",
    "ScoredChat",
    "compute_freshness_score",
    "score_recent_chats",
]
