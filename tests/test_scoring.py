"""Tests for candidate scoring."""

from datetime import date, datetime, timezone

import pytest

from cadence.core.models import Candidate, RiskLevel, ScoringWeights
from cadence.core.scoring import (
    ReasonCode,
    deadline_pressure,
    pace_deviation,
    risk_elevation,
    score_candidate,
    session_fit,
    spacing,
    variation,
)


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def item():
    return Candidate(
        work_item_id="w1",
        node_id="n1",
        project_id="p1",
        planned_min=120,
        logged_min=30,
        min_session_min=15,
        max_session_min=60,
        preferred_session_min=45,
        title="Write chapter",
        project_name="Thesis",
    )


class TestDeadlinePressure:
    def test_no_deadline(self, now):
        assert deadline_pressure(None, now) == (0.0, "")

    def test_past_due_is_maximal(self, now):
        value, message = deadline_pressure(date(2025, 1, 10), now)
        assert value == 1.0
        assert message == "Past due"

    def test_rises_as_deadline_nears(self, now):
        far, _ = deadline_pressure(date(2025, 3, 1), now)
        mid, _ = deadline_pressure(date(2025, 1, 25), now)
        near, _ = deadline_pressure(date(2025, 1, 16), now)
        assert 0 < far < mid < near < 1

    def test_distant_deadline_is_near_zero(self, now):
        value, _ = deadline_pressure(date(2026, 1, 1), now)
        assert value < 0.01


class TestRiskElevation:
    def test_ordering(self):
        assert risk_elevation(RiskLevel.CRITICAL)[0] > risk_elevation(RiskLevel.AT_RISK)[0]
        assert risk_elevation(RiskLevel.AT_RISK)[0] > risk_elevation(RiskLevel.ON_TRACK)[0]
        assert risk_elevation(RiskLevel.ON_TRACK)[0] == 0.0


class TestSpacing:
    def test_same_day_repeat_is_penalized(self):
        value, _ = spacing(0, 0)
        assert value == -1.0

    def test_grows_with_time_away(self):
        assert spacing(1, None)[0] < spacing(2, None)[0] < spacing(3, None)[0]
        assert spacing(10, None)[0] == 1.0

    def test_falls_back_to_project(self):
        assert spacing(None, 3)[0] == 1.0

    def test_unknown_history(self):
        assert spacing(None, None) == (0.0, "")


class TestVariation:
    def test_never_worked_project_gets_full_bonus(self):
        assert variation(None) == (1.0, "Project has never been worked on")

    def test_worked_today_gets_nothing(self):
        assert variation(0)[0] == 0.0

    def test_partial(self):
        assert variation(7)[0] == 1.0
        assert 0 < variation(2)[0] < 1


class TestPaceDeviation:
    def test_item_trailing_project(self, item):
        # item is 25% logged, project 75% done
        value, _ = pace_deviation(item, 75.0)
        assert value == pytest.approx(0.5)

    def test_item_ahead_of_project(self, item):
        assert pace_deviation(item, 10.0)[0] == 0.0

    def test_project_over_100_is_capped(self, item):
        assert pace_deviation(item, 150.0)[0] == pytest.approx(0.75)


class TestSessionFit:
    def test_exact_fit(self, item):
        assert session_fit(item, 45)[0] == pytest.approx(1.0)

    def test_worse_fit_scores_lower(self, item):
        assert session_fit(item, 90)[0] < session_fit(item, 60)[0]

    def test_min_session_too_long(self, item):
        assert session_fit(item, 10)[0] == -1.0

    def test_barely_fits_is_penalized(self, item):
        # min 15 > 0.9 * 16
        value, message = session_fit(item, 16)
        assert value < 0.5
        assert "barely fits" in message


class TestScoreCandidate:
    def test_reasons_in_factor_order(self, item, now):
        item.due_date = date(2025, 1, 17)
        sc = score_candidate(
            item,
            risk_level=RiskLevel.CRITICAL,
            now=now,
            available_min=45,
            weights=ScoringWeights(),
            project_progress_pct=75.0,
            item_days_since=2,
            project_days_since=2,
        )
        codes = [r.code for r in sc.reasons]
        assert codes == [
            ReasonCode.DEADLINE_PRESSURE,
            ReasonCode.RISK_ELEVATION,
            ReasonCode.SPACING,
            ReasonCode.VARIATION,
            ReasonCode.PACE_DEVIATION,
            ReasonCode.SESSION_FIT,
        ]
        assert sc.score == pytest.approx(sum(r.contribution for r in sc.reasons))

    def test_negligible_factors_emit_no_reason(self, item, now):
        sc = score_candidate(
            item,
            risk_level=RiskLevel.ON_TRACK,
            now=now,
            available_min=45,
            weights=ScoringWeights(),
            project_days_since=0,
        )
        codes = {r.code for r in sc.reasons}
        assert ReasonCode.DEADLINE_PRESSURE not in codes
        assert ReasonCode.RISK_ELEVATION not in codes
        assert ReasonCode.VARIATION not in codes

    def test_zero_weights_zero_score(self, item, now):
        weights = ScoringWeights(0, 0, 0, 0, 0, 0)
        sc = score_candidate(item, RiskLevel.CRITICAL, now, 45, weights, project_days_since=3)
        assert sc.score == 0.0
        assert sc.reasons == []

    def test_weights_are_applied(self, item, now):
        light = score_candidate(item, RiskLevel.CRITICAL, now, 45, ScoringWeights(risk=0.8))
        heavy = score_candidate(item, RiskLevel.CRITICAL, now, 45, ScoringWeights(risk=1.6))
        assert heavy.score - light.score == pytest.approx(0.8)

    def test_deterministic(self, item, now):
        a = score_candidate(item, RiskLevel.AT_RISK, now, 30, ScoringWeights(), 40.0, 1, 1)
        b = score_candidate(item, RiskLevel.AT_RISK, now, 30, ScoringWeights(), 40.0, 1, 1)
        assert a == b

    def test_critical_outranks_equal_healthy(self, item, now):
        critical = score_candidate(item, RiskLevel.CRITICAL, now, 45, ScoringWeights())
        healthy = score_candidate(item, RiskLevel.ON_TRACK, now, 45, ScoringWeights())
        assert critical.score > healthy.score
