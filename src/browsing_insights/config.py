"""Top-level configuration.

``InsightsConfig`` collects the per-component settings models and can be
read from a YAML file.  Sections missing from the file keep their
defaults, so a config file only needs to name what it changes::

    session:
      gap_seconds: 600
    recency:
      half_life_days: 7
    shortcuts:
      eta: 0.05

Classes
-------
- BatchConfig    — token budget per consumer batch
- InsightsConfig — every component's settings
- ConfigError    — unreadable or invalid configuration file
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from browsing_insights.chat.freshness import ChatConfig
from browsing_insights.history.pipeline import (
    DEFAULT_TOKEN_BUDGET,
    DELTA_TOPK,
    FULL_TOPK,
    HistoryInsights,
    HistoryWindowConfig,
)
from browsing_insights.history.ranker import TopKConfig
from browsing_insights.history.recency import RecencyConfig
from browsing_insights.history.sessionizer import SessionConfig
from browsing_insights.shortcuts.scoring import ShortcutConfig

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid configuration {self.path!r}: {reason}")


class BatchConfig(BaseModel):
    """Token budget of each batch handed to the memory generator."""

    token_budget: int = Field(default=DEFAULT_TOKEN_BUDGET, gt=0)

    model_config = {"frozen": True}


class InsightsConfig(BaseModel):
    """All configurable settings.

    Parameters
    ----------
    session:
        Session segmentation thresholds.
    recency:
        Recency blend used when ranking aggregates.
    window:
        History look-back window and visit caps.
    full_top_k, delta_top_k:
        Top-k limits of full and delta runs.
    batch:
        Consumer batch token budget.
    chat:
        Chat selection and freshness settings.
    shortcuts:
        Shortcut model hyper-parameters.
    """

    session: SessionConfig = Field(default_factory=SessionConfig)
    recency: RecencyConfig = Field(default_factory=RecencyConfig)
    window: HistoryWindowConfig = Field(default_factory=HistoryWindowConfig)
    full_top_k: TopKConfig = Field(default_factory=lambda: FULL_TOPK)
    delta_top_k: TopKConfig = Field(default_factory=lambda: DELTA_TOPK)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    shortcuts: ShortcutConfig = Field(default_factory=ShortcutConfig)

    model_config = {"frozen": False}

    def history_insights(self) -> HistoryInsights:
        """Build a ``HistoryInsights`` pipeline from these settings."""
        return HistoryInsights(
            session_config=self.session,
            recency=self.recency,
            window=self.window,
            full_top_k=self.full_top_k,
            delta_top_k=self.delta_top_k,
            token_budget=self.batch.token_budget,
        )


def load_config(path: str | Path | None = None) -> InsightsConfig:
    """Load an ``InsightsConfig`` from a YAML file.

    Parameters
    ----------
    path:
        YAML file to read.  ``None`` returns the defaults.

    Returns
    -------
    InsightsConfig

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, is not a mapping, or
        fails validation.
    """
    if path is None:
        return InsightsConfig()

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(config_path, f"cannot read file: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(config_path, f"invalid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(config_path, "top level must be a mapping")

    try:
        config = InsightsConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(config_path, str(exc)) from exc

    logger.debug("load_config: loaded %s (sections: %s)", config_path, sorted(data))
    return config
