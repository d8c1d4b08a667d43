"""Readiness aggregator.

Weighted readiness of one profile for one role, on a 0-100 scale. Unlike the
fit scorer's met/unmet counts, each requirement contributes its partial match
min(held / required, 1), so a near miss still earns credit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from scoring.fit_scorer import mean_match_ratio, weighted_score
from scoring.gap_analyzer import CRITICAL_SEVERITY, classify_gap
from scoring.matching import HoldingIndex
from scoring.schemas import (
    CriticalGap,
    DevelopmentTimeline,
    HoldingRecord,
    Kind,
    ReadinessAssessment,
    RequirementRecord,
)

SHORT_TERM_MAX_SEVERITY = 50.0
MEDIUM_TERM_MAX_SEVERITY = 70.0

READINESS_BANDS: tuple[tuple[float, str], ...] = (
    (90.0, "Fully ready"),
    (75.0, "Well prepared"),
    (60.0, "Mostly prepared"),
    (40.0, "Partially prepared"),
)
LOWEST_READINESS_BAND = "Additional preparation needed"
SCORE_PRECISION = 9


@dataclass(frozen=True)
class RequirementMatch:
    kind: Kind
    name: str
    held: Optional[int]
    required: int
    severity: float

    @property
    def match(self) -> float:
        return mean_match_ratio([(self.held, self.required)])


def _percent(ratio: float) -> float:
    return round(ratio * 100.0, SCORE_PRECISION)


def readiness_level(score: float) -> str:
    """Qualitative band for a 0-100 readiness score. Cut points are inclusive."""
    for threshold, label in READINESS_BANDS:
        if score >= threshold:
            return label
    return LOWEST_READINESS_BAND


def match_requirements(
    holdings: Iterable[HoldingRecord],
    requirements: Iterable[RequirementRecord],
) -> list[RequirementMatch]:
    index = HoldingIndex(holdings)
    matches = []
    for requirement in requirements:
        held = index.held_level(requirement)
        _, severity = classify_gap(held, requirement.required_level)
        matches.append(RequirementMatch(
            kind=requirement.kind,
            name=requirement.name,
            held=held,
            required=requirement.required_level,
            severity=severity,
        ))
    return matches


def build_timeline(matches: Iterable[RequirementMatch]) -> DevelopmentTimeline:
    """Bucket every unmet requirement by severity, most severe first."""
    timeline = DevelopmentTimeline()
    for m in sorted(matches, key=lambda m: -m.severity):
        if m.severity <= 0:
            continue
        if m.severity <= SHORT_TERM_MAX_SEVERITY:
            timeline.short_term.append(m.name)
        elif m.severity <= MEDIUM_TERM_MAX_SEVERITY:
            timeline.medium_term.append(m.name)
        else:
            timeline.long_term.append(m.name)
    return timeline


def assess_readiness(
    role_label: str,
    holdings: Iterable[HoldingRecord],
    requirements: Iterable[RequirementRecord],
) -> ReadinessAssessment:
    matches = match_requirements(holdings, requirements)
    capabilities = [m for m in matches if m.kind == "capability"]
    skills = [m for m in matches if m.kind == "skill"]

    capability_score = _percent(mean_match_ratio((m.held, m.required) for m in capabilities))
    skill_score = _percent(mean_match_ratio((m.held, m.required) for m in skills))
    # Float noise must not drop a score below a band cut point.
    score = min(100.0, round(weighted_score(capability_score, skill_score), SCORE_PRECISION))

    critical = sorted(
        (m for m in matches if m.severity > CRITICAL_SEVERITY),
        key=lambda m: (-m.severity, m.name),
    )
    critical_gaps = [
        CriticalGap(
            kind=m.kind,
            name=m.name,
            current_level=m.held or 0,
            required_level=m.required,
            severity=m.severity,
        )
        for m in critical
    ]
    timeline = build_timeline(matches)
    level = readiness_level(score)

    assessment = ReadinessAssessment(
        score=score,
        capability_score=capability_score,
        skill_score=skill_score,
        readiness_level=level,
        critical_gaps=critical_gaps,
        development_timeline=timeline,
    )
    assessment.summary = render_readiness_markdown(role_label, assessment, capabilities, skills)
    return assessment


def _alignment_table(header: str, matches: list[RequirementMatch]) -> str:
    rows = [
        f"| {m.name} | {m.held or 0:.1f} | {m.required:.1f} | {m.match * 100:.1f}% |"
        for m in sorted(matches, key=lambda m: -m.match)
    ]
    return "\n".join([
        f"| {header} | Current Level | Required Level | Match Rate |",
        "|------------|--------------|----------------|------------|",
        *rows,
    ])


def _bullet_section(title: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return ["", title, *(f"- {item}" for item in items)]


def render_readiness_markdown(
    role_label: str,
    assessment: ReadinessAssessment,
    capabilities: list[RequirementMatch],
    skills: list[RequirementMatch],
) -> str:
    t = assessment.development_timeline
    lines = [
        f"### 📊 Readiness Assessment for {role_label}",
        "",
        f"**Overall Readiness: {assessment.score:.1f}% ({assessment.readiness_level})**",
        "",
        "#### Summary Metrics",
        f"- Capability Alignment: {assessment.capability_score:.1f}%",
        f"- Skill Alignment: {assessment.skill_score:.1f}%",
        f"- Critical Gaps: {len(assessment.critical_gaps)}",
        "- Development Timeline:",
        f"  - Short-term items: {len(t.short_term)}",
        f"  - Medium-term items: {len(t.medium_term)}",
        f"  - Long-term items: {len(t.long_term)}",
        "",
        "#### Capability Alignment Details",
        _alignment_table("Capability", capabilities),
        "",
        "#### Skill Alignment Details",
        _alignment_table("Skill", skills),
        "",
        "#### Development Focus Areas",
    ]
    if assessment.critical_gaps:
        lines += _bullet_section(
            "Critical gaps requiring attention:",
            [f"{g.name} (Current: {g.current_level}, Required: {g.required_level})"
             for g in assessment.critical_gaps],
        )
    else:
        lines.append("No critical gaps identified.")
    lines += _bullet_section("Short-term development priorities:", t.short_term)
    lines += _bullet_section("Medium-term development areas:", t.medium_term)
    lines += _bullet_section("Long-term development goals:", t.long_term)
    return "\n".join(lines)
