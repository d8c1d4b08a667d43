from __future__ import annotations

import pytest

from scoring.readiness import assess_readiness, build_timeline, match_requirements, readiness_level
from scoring.schemas import HoldingRecord, RequirementRecord


def _req(name: str, level=None, kind: str = "capability") -> RequirementRecord:
    return RequirementRecord(id=name.lower(), name=name, kind=kind, required_level=level)


def _hold(name: str, level, kind: str = "capability") -> HoldingRecord:
    return HoldingRecord(id=name.lower(), name=name, kind=kind, held_level=level)


@pytest.mark.parametrize(
    "score, band",
    [
        (100.0, "Fully ready"),
        (90.0, "Fully ready"),
        (89.9, "Well prepared"),
        (75.0, "Well prepared"),
        (74.9, "Mostly prepared"),
        (60.0, "Mostly prepared"),
        (40.0, "Partially prepared"),
        (39.9, "Additional preparation needed"),
        (0.0, "Additional preparation needed"),
    ],
)
def test_readiness_bands(score, band):
    assert readiness_level(score) == band


def test_weighted_readiness():
    requirements = [
        _req("Leadership", "Proficient"),
        _req("Data Analysis", "Advanced"),
        _req("Python", kind="skill"),
    ]
    holdings = [_hold("Leadership", "Expert"), _hold("Python", "Advanced", kind="skill")]
    assessment = assess_readiness("role r1", holdings, requirements)

    assert assessment.capability_score == pytest.approx(50.0)
    assert assessment.skill_score == pytest.approx(100.0)
    assert assessment.score == pytest.approx(70.0)
    assert assessment.readiness_level == "Mostly prepared"
    assert [g.name for g in assessment.critical_gaps] == ["Data Analysis"]
    assert assessment.critical_gaps[0].current_level == 0
    assert assessment.development_timeline.long_term == ["Data Analysis"]


def test_partial_matches_earn_credit():
    assessment = assess_readiness("role r1", [_hold("Leadership", "Intermediate")], [_req("Leadership", "Advanced")])
    assert assessment.capability_score == pytest.approx(50.0)


def test_timeline_buckets_by_severity():
    requirements = [
        _req("Communication", "Advanced"),   # 2 of 4 -> 50
        _req("Negotiation", "Proficient"),   # 1 of 3 -> 66.7
        _req("Strategy", "Advanced"),        # 1 of 4 -> 75
        _req("Writing", "Basic"),            # met
    ]
    holdings = [
        _hold("Communication", "Intermediate"),
        _hold("Negotiation", "Basic"),
        _hold("Strategy", "Basic"),
        _hold("Writing", "Expert"),
    ]
    timeline = build_timeline(match_requirements(holdings, requirements))

    assert timeline.short_term == ["Communication"]
    assert timeline.medium_term == ["Negotiation"]
    assert timeline.long_term == ["Strategy"]


def test_only_severities_above_seventy_are_critical():
    requirements = [_req("Negotiation", "Proficient"), _req("Strategy", "Advanced")]
    holdings = [_hold("Negotiation", "Basic"), _hold("Strategy", "Basic")]
    assessment = assess_readiness("role r1", holdings, requirements)
    assert [g.name for g in assessment.critical_gaps] == ["Strategy"]


def test_role_without_requirements():
    assessment = assess_readiness("role r1", [_hold("Leadership", "Expert")], [])
    assert assessment.score == 0.0
    assert assessment.readiness_level == "Additional preparation needed"
    assert assessment.critical_gaps == []


def test_summary_markdown():
    assessment = assess_readiness(
        "role r1",
        [_hold("Leadership", "Expert")],
        [_req("Leadership", "Proficient"), _req("Data Analysis", "Advanced")],
    )
    text = assessment.summary
    assert text.startswith("### 📊 Readiness Assessment for role r1")
    assert "**Overall Readiness: 30.0% (Additional preparation needed)**" in text
    assert "| Leadership | 5.0 | 3.0 | 100.0% |" in text
    assert "- Data Analysis (Current: 0, Required: 4)" in text


def test_score_reaching_a_cut_point_gets_that_band():
    # 2 of 3 on the only capability: 66.67 * 0.6 lands on 40.
    partial = assess_readiness("role r1", [_hold("Leadership", "Intermediate")], [_req("Leadership", "Proficient")])
    assert partial.score == 40.0
    assert partial.readiness_level == "Partially prepared"
    assert "**Overall Readiness: 40.0% (Partially prepared)**" in partial.summary

    requirements = [
        _req("Leadership", "Proficient"),
        _req("Data Analysis", "Advanced"),
        _req("Writing", "Basic"),
        _req("Python", "Proficient", kind="skill"),
    ]
    holdings = [
        _hold("Leadership", "Intermediate"),
        _hold("Data Analysis", "Proficient"),
        _hold("Writing", "Basic"),
        _hold("Python", "Intermediate", kind="skill"),
    ]
    well = assess_readiness("role r1", holdings, requirements)
    assert well.score == 75.0
    assert well.readiness_level == "Well prepared"
