"""Tests for canonical candidate ordering."""

import random
from datetime import date

from cadence.core.models import Candidate, RiskLevel
from cadence.core.scoring import ScoredCandidate
from cadence.core.sorting import canonical_sort


def scored(
    wid: str,
    risk: RiskLevel = RiskLevel.ON_TRACK,
    due: date | None = None,
    score: float = 0.0,
    project_name: str = "Project",
    title: str = "Item",
) -> ScoredCandidate:
    return ScoredCandidate(
        candidate=Candidate(
            work_item_id=wid,
            node_id="n1",
            project_id="p1",
            planned_min=60,
            due_date=due,
            title=title,
            project_name=project_name,
        ),
        score=score,
        risk_level=risk,
    )


def ids(items: list[ScoredCandidate]) -> list[str]:
    return [sc.work_item_id for sc in items]


class TestCanonicalSort:
    def test_risk_first(self):
        items = [
            scored("a", RiskLevel.ON_TRACK, due=date(2025, 1, 1), score=10),
            scored("b", RiskLevel.CRITICAL, due=date(2025, 6, 1)),
            scored("c", RiskLevel.AT_RISK),
        ]
        assert ids(canonical_sort(items)) == ["b", "c", "a"]

    def test_earlier_due_first_none_last(self):
        items = [
            scored("none"),
            scored("late", due=date(2025, 3, 1)),
            scored("soon", due=date(2025, 1, 20)),
        ]
        assert ids(canonical_sort(items)) == ["soon", "late", "none"]

    def test_higher_score_first(self):
        items = [scored("low", score=0.5), scored("high", score=1.5)]
        assert ids(canonical_sort(items)) == ["high", "low"]

    def test_name_then_title(self):
        items = [
            scored("1", project_name="Beta", title="A"),
            scored("2", project_name="Alpha", title="Z"),
            scored("3", project_name="Alpha", title="B"),
        ]
        assert ids(canonical_sort(items)) == ["3", "2", "1"]

    def test_id_breaks_full_ties(self):
        items = [scored("w3"), scored("w1"), scored("w2")]
        assert ids(canonical_sort(items)) == ["w1", "w2", "w3"]

    def test_stable_under_permutation(self):
        rng = random.Random(42)
        items = [
            scored(
                f"w{i}",
                risk=rng.choice(list(RiskLevel)),
                due=rng.choice([None, date(2025, 1, 20), date(2025, 2, 1)]),
                score=rng.choice([0.0, 0.5, 1.0]),
                project_name=rng.choice(["Alpha", "Beta"]),
            )
            for i in range(40)
        ]
        expected = ids(canonical_sort(items))
        for _ in range(20):
            shuffled = items[:]
            rng.shuffle(shuffled)
            assert ids(canonical_sort(shuffled)) == expected

    def test_does_not_mutate_input(self):
        items = [scored("b"), scored("a")]
        canonical_sort(items)
        assert ids(items) == ["b", "a"]
