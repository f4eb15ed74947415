"""Split a stream of visits into browsing sessions.

A session is a contiguous run of visits (sorted by time) in which no two
consecutive visits are more than ``gap_seconds`` apart and no visit is more
than ``max_session_seconds`` after the session's first visit.  Both
comparisons are strict: a gap of exactly ``gap_seconds`` stays in the
current session.

Classes
-------
- SessionConfig — gap and maximum-duration thresholds

Functions
---------
- sessionize_visits — assign session ids to visits, sorted ascending by time
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from browsing_insights.history.records import SessionizedVisit, VisitRecord
from browsing_insights.timeunits import MS_PER_SECOND, is_finite_number, micros_to_ms

logger = logging.getLogger(__name__)

DEFAULT_GAP_SECONDS = 900
DEFAULT_MAX_SESSION_SECONDS = 7200

# Fields recomputed when an already-sessionized visit is sessionized again.
_SESSION_FIELDS = {"visit_time_ms", "session_id", "session_start_ms"}


class SessionConfig(BaseModel):
    """Thresholds for session segmentation.

    Parameters
    ----------
    gap_seconds:
        Largest allowed gap between consecutive visits of one session.
    max_session_seconds:
        Largest allowed distance between a session's first visit and any
        later visit of the same session.
    """

    gap_seconds: float = Field(default=DEFAULT_GAP_SECONDS, ge=0)
    max_session_seconds: float = Field(default=DEFAULT_MAX_SESSION_SECONDS, ge=0)

    model_config = {"frozen": True}


def sessionize_visits(
    visits: Iterable[VisitRecord],
    config: SessionConfig | None = None,
) -> list[SessionizedVisit]:
    """Assign every visit to a session.

    Visits with a non-finite ``visit_date_micros`` are dropped.  The rest
    are sorted ascending by millisecond time (stable for equal times) and
    walked once; the session id of each visit is the millisecond start
    time of its session.

    Parameters
    ----------
    visits:
        Visit records in any order.
    config:
        Segmentation thresholds.  Defaults to a 15 minute gap and a two
        hour maximum session length.

    Returns
    -------
    list[SessionizedVisit]
        Sessionized visits in ascending time order.  Empty input yields an
        empty list.
    """
    cfg = config if config is not None else SessionConfig()
    gap_ms = cfg.gap_seconds * MS_PER_SECOND
    max_session_ms = cfg.max_session_seconds * MS_PER_SECOND

    timed: list[tuple[int, VisitRecord]] = [
        (micros_to_ms(visit.visit_date_micros), visit)
        for visit in visits
        if is_finite_number(visit.visit_date_micros)
    ]
    timed.sort(key=lambda pair: pair[0])

    result: list[SessionizedVisit] = []
    session_start_ms: int | None = None
    previous_ms: int | None = None

    for time_ms, visit in timed:
        start_new = (
            previous_ms is None
            or session_start_ms is None
            or time_ms - previous_ms > gap_ms
            or time_ms - session_start_ms > max_session_ms
        )
        if start_new:
            session_start_ms = time_ms

        result.append(
            SessionizedVisit(
                **visit.model_dump(exclude=_SESSION_FIELDS),
                visit_time_ms=time_ms,
                session_id=session_start_ms,
                session_start_ms=session_start_ms,
            )
        )
        previous_ms = time_ms

    logger.debug(
        "sessionize_visits: %d visits -> %d sessions",
        len(result),
        len({visit.session_id for visit in result}),
    )
    return result
