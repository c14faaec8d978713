"""Pure canonical ordering of scored candidates - no I/O dependencies."""

from datetime import date

from .risk import risk_priority
from .scoring import ScoredCandidate


def canonical_key(sc: ScoredCandidate) -> tuple:
    """
    Sort key imposing one strict total order.

    1. Risk: critical, then at_risk, then on_track
    2. Due date: earliest first, none last
    3. Score: higher first
    4. Project name, then item title: lexical
    5. Work item ID: lexical (final tiebreak)
    """
    due = sc.due_date
    c = sc.candidate
    return (
        risk_priority(sc.risk_level),
        due is None,
        due or date.max,
        -sc.score,
        c.project_name,
        c.title,
        c.work_item_id,
    )


def canonical_sort(scored: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """
    Return candidates in canonical order.

    Pure function - no I/O. Input order never affects the result.
    """
    return sorted(scored, key=canonical_key)
