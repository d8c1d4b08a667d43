"""Deterministic fit scorer.

Scores how well a profile's holdings satisfy a role's requirements.
Capabilities are met when the held level reaches the role's required level;
skills carry no per-role level, so a skill is met at a fixed held level.
The combined score weights capabilities 60% and skills 40%. No LLM involved.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from scoring.matching import HoldingIndex
from scoring.schemas import (
    CapabilityFitDetail,
    FitDetails,
    FitFactors,
    FitScore,
    HoldingRecord,
    RankedCandidate,
    RequirementRecord,
    SkillFitDetail,
)

CAPABILITY_WEIGHT = 0.6
SKILL_WEIGHT = 0.4
SKILL_MET_THRESHOLD = 3


def alignment_ratio(met: int, total: int) -> float:
    """Return met / total, the authoritative alignment metric.

    Returns 0.0 if nothing is required.
    """
    if total <= 0:
        return 0.0
    return met / total


def mean_match_ratio(pairs: Iterable[tuple[int | None, int]]) -> float:
    """Alternative alignment metric: mean of min(held / required, 1).

    *pairs* are (held, required) tuples; a missing holding contributes 0 and
    a zero requirement is trivially matched. Returns 0.0 for no pairs.
    Used by the readiness assessment only.
    """
    ratios = []
    for held, required in pairs:
        if required <= 0:
            ratios.append(1.0)
        else:
            ratios.append(min((held or 0) / required, 1.0))
    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios)


def weighted_score(capability: float, skill: float) -> float:
    return capability * CAPABILITY_WEIGHT + skill * SKILL_WEIGHT


def _capability_detail(requirements: list[RequirementRecord], index: HoldingIndex) -> CapabilityFitDetail:
    detail = CapabilityFitDetail(total_criteria=len(requirements))
    for requirement in requirements:
        held = index.held_level(requirement)
        if held is None:
            detail.missing.append(requirement.name)
        elif held >= requirement.required_level:
            detail.met.append(requirement.name)
        else:
            detail.insufficient.append(requirement.name)
    detail.met_criteria = len(detail.met)
    detail.score = alignment_ratio(detail.met_criteria, detail.total_criteria)
    detail.coverage = detail.score
    return detail


def _skill_detail(requirements: list[RequirementRecord], index: HoldingIndex) -> SkillFitDetail:
    detail = SkillFitDetail(total_criteria=len(requirements))
    for requirement in requirements:
        held = index.held_level(requirement)
        if held is None:
            detail.missing.append(requirement.name)
        elif held >= SKILL_MET_THRESHOLD:
            detail.met.append(requirement.name)
        else:
            detail.insufficient.append(requirement.name)
    detail.score = alignment_ratio(len(detail.met), detail.total_criteria)
    return detail


def compute_fit(
    holdings: Iterable[HoldingRecord],
    requirements: Iterable[RequirementRecord],
) -> FitScore:
    """Score one profile's holdings against one role's requirements."""
    index = HoldingIndex(holdings)
    requirements = list(requirements)
    capabilities = _capability_detail([r for r in requirements if r.kind == "capability"], index)
    skills = _skill_detail([r for r in requirements if r.kind == "skill"], index)

    explanation = (
        f"Matches {capabilities.met_criteria} of {capabilities.total_criteria} required capabilities "
        f"({capabilities.coverage * 100:.1f}% coverage) and {len(skills.met)} of "
        f"{skills.total_criteria} required skills."
    )
    return FitScore(
        score=weighted_score(capabilities.score, skills.score),
        explanation=explanation,
        factors=FitFactors(
            capability_alignment=capabilities.score,
            skill_alignment=skills.score,
            capability_coverage=capabilities.coverage,
        ),
        details=FitDetails(capabilities=capabilities, skills=skills),
    )


def rank_scores(scores: Mapping[str, FitScore]) -> list[RankedCandidate]:
    """Candidates by score, highest first. Ties keep insertion order."""
    ranked = [RankedCandidate(candidate_id=cid, score=fit.score) for cid, fit in scores.items()]
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked
