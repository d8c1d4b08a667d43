"""Batch fit scorer.

Scores many candidates against one fixed subject: many roles against one
profile, or many profiles against one role. Each candidate's records are
fetched concurrently and scored independently. A candidate whose fetch or
scoring fails is recorded as a failure and left out of the score map; the
rest of the batch is unaffected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Literal, Optional, Sequence, TypeVar

from scoring.fit_scorer import rank_scores
from scoring.schemas import BatchFitResult, FitScore
from services.requirement_loader import bounded

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class CandidateOutcome:
    candidate_id: str
    fit: Optional[FitScore] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fit is not None


async def _score_candidate(
    candidate_id: str,
    load: Callable[[str], Awaitable[R]],
    score: Callable[[R], FitScore],
    timeout: float,
) -> CandidateOutcome:
    try:
        records = await bounded(load(candidate_id), timeout, f"candidate {candidate_id}")
        return CandidateOutcome(candidate_id, fit=score(records))
    except Exception as exc:
        logger.warning("Skipping candidate %s: %s", candidate_id, exc)
        return CandidateOutcome(candidate_id, error=str(exc) or exc.__class__.__name__)


def partition_outcomes(
    subject_id: str,
    subject_kind: Literal["profile", "role"],
    outcomes: Iterable[CandidateOutcome],
) -> BatchFitResult:
    """Split outcomes into the score map and the failure map, then rank."""
    scores: dict[str, FitScore] = {}
    failures: dict[str, str] = {}
    for outcome in outcomes:
        if outcome.ok:
            scores[outcome.candidate_id] = outcome.fit
        else:
            failures[outcome.candidate_id] = outcome.error or "unknown error"
    return BatchFitResult(
        subject_id=subject_id,
        subject_kind=subject_kind,
        scores=scores,
        ranking=rank_scores(scores),
        failures=failures,
    )


async def score_batch(
    subject_id: str,
    subject_kind: Literal["profile", "role"],
    candidate_ids: Sequence[str],
    load: Callable[[str], Awaitable[R]],
    score: Callable[[R], FitScore],
    timeout: float,
) -> BatchFitResult:
    """Fan out one fetch-and-score per candidate and collect by candidate id.

    Duplicate ids are scored once. Results are keyed in input order, never
    completion order.
    """
    unique_ids = list(dict.fromkeys(candidate_ids))
    outcomes = await asyncio.gather(
        *(_score_candidate(cid, load, score, timeout) for cid in unique_ids)
    )
    result = partition_outcomes(subject_id, subject_kind, outcomes)
    logger.info(
        "Scored %d of %d candidates against %s %s",
        len(result.scores), len(unique_ids), subject_kind, subject_id,
        extra={"candidate_count": len(unique_ids), "failed_count": len(result.failures)},
    )
    return result


def render_batch_markdown(result: BatchFitResult, top_n: int = 5) -> str:
    """Top-N narrative for a batch, used for progress reporting and prompts."""
    if result.subject_kind == "profile":
        heading, noun, subject = "Role-Profile Fit Analysis", "Role", f"**Profile**: {result.subject_id}"
        counted = "Roles Analyzed"
    else:
        heading, noun, subject = "Profile-Role Fit Analysis", "Profile", f"**Role**: {result.subject_id}"
        counted = "Profiles Analyzed"

    lines = [f"### 📊 {heading}", "", subject, f"**{counted}**: {len(result.scores)}"]
    if result.failures:
        lines.append(f"**Could Not Be Scored**: {len(result.failures)}")
    lines += ["", f"#### 🏆 Top Matching {noun}s", ""]

    if not result.ranking:
        lines.append(f"No {noun.lower()}s could be scored.")
    for i, ranked in enumerate(result.ranking[:top_n], start=1):
        fit = result.scores[ranked.candidate_id]
        caps = fit.details.capabilities
        skills = fit.details.skills
        lines += [
            f"{i}. **{noun} {ranked.candidate_id}** ({fit.score * 100:.1f}% Overall Fit)",
            f"   - Capability Coverage: {fit.factors.capability_coverage * 100:.1f}%",
            f"   - Capability Alignment: {fit.factors.capability_alignment * 100:.1f}%",
            f"   - Skill Alignment: {fit.factors.skill_alignment * 100:.1f}%",
            f"   - Met Capabilities: {caps.met_criteria}/{caps.total_criteria}",
            f"   - Met Skills: {len(skills.met)}/{skills.total_criteria}",
        ]

    if result.scores:
        count = len(result.scores)
        avg_coverage = sum(f.factors.capability_coverage for f in result.scores.values()) / count
        avg_score = sum(f.score for f in result.scores.values()) / count
        lines += [
            "",
            "#### 📈 Summary",
            f"- Average Capability Coverage: {avg_coverage * 100:.1f}%",
            f"- Average Overall Fit: {avg_score * 100:.1f}%",
        ]
    return "\n".join(lines)
