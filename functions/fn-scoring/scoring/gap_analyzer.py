"""Gap analyzer.

Compares one profile's holdings against one role's requirements and
classifies every requirement as met, insufficient or missing, with a
severity in [0, 100]. Holdings the role does not require are ignored.
No I/O; loading happens in the action layer.
"""

from __future__ import annotations

from typing import Iterable, Optional

from scoring.matching import HoldingIndex
from scoring.schemas import GapAnalysis, GapEntry, GapSummary, GapType, HoldingRecord, Kind, RequirementRecord

CRITICAL_SEVERITY = 70.0


def classify_gap(held: Optional[int], required: int) -> tuple[GapType, float]:
    """Return (gap_type, severity) for a held level against a required level.

    Severity is 100 when nothing is held, 0 when the requirement is met and
    the relative shortfall ``(required - held) / required * 100`` otherwise.
    """
    if held is None:
        return "missing", 100.0
    if held >= required:
        return "met", 0.0
    return "insufficient", (required - held) / required * 100.0


def describe_gap(name: str, gap_type: GapType, held: Optional[int], required: int) -> str:
    if gap_type == "missing":
        return f"{name} is required at level {required} but is not currently held."
    if gap_type == "insufficient":
        return f"{name} is held at level {held}, below the required level {required}."
    return f"{name} meets the required level {required} (current level {held})."


def sort_gaps(gaps: Iterable[GapEntry]) -> list[GapEntry]:
    """Severity descending, ties broken by group name ascending."""
    return sorted(gaps, key=lambda g: (-g.severity, g.group_name))


def summarize_gaps(gaps: list[GapEntry]) -> GapSummary:
    if not gaps:
        # Nothing required, nothing to fail.
        return GapSummary(overall_readiness=100.0)
    mean_severity = sum(g.severity for g in gaps) / len(gaps)
    return GapSummary(
        critical_gaps=sum(1 for g in gaps if g.severity > CRITICAL_SEVERITY),
        minor_gaps=sum(1 for g in gaps if 0 < g.severity <= CRITICAL_SEVERITY),
        met_requirements=sum(1 for g in gaps if g.severity == 0),
        overall_readiness=max(0.0, min(100.0, 100.0 - mean_severity)),
    )


def analyze_gaps(
    profile_id: str,
    role_id: str,
    holdings: Iterable[HoldingRecord],
    requirements: Iterable[RequirementRecord],
    kind: Optional[Kind] = None,
) -> GapAnalysis:
    """Build one GapEntry per requirement (optionally restricted to *kind*)."""
    index = HoldingIndex(holdings)
    entries: list[GapEntry] = []
    for requirement in requirements:
        if kind is not None and requirement.kind != kind:
            continue
        held = index.held_level(requirement)
        gap_type, severity = classify_gap(held, requirement.required_level)
        entries.append(GapEntry(
            id=requirement.id,
            name=requirement.name,
            group_name=requirement.group_name,
            kind=requirement.kind,
            held_level=held,
            required_level=requirement.required_level,
            gap_type=gap_type,
            severity=severity,
            description=describe_gap(requirement.name, gap_type, held, requirement.required_level),
        ))

    gaps = sort_gaps(entries)
    return GapAnalysis(
        profile_id=profile_id,
        role_id=role_id,
        gaps=gaps,
        summary=summarize_gaps(gaps),
    )


def render_gap_markdown(analysis: GapAnalysis, heading: str = "Capability Gaps Analysis") -> str:
    if not analysis.gaps:
        return "No requirements found for this role, so there are no gaps to report."

    blocks = []
    for gap in analysis.gaps:
        group = f" ({gap.group_name})" if gap.group_name else ""
        current = gap.held_level if gap.held_level is not None else "None"
        blocks.append(
            f"**{gap.name}**{group}\n"
            f"- Current Level: {current}\n"
            f"- Required Level: {gap.required_level}\n"
            f"- Status: {gap.gap_type} ({gap.severity:.1f}% gap)\n"
        )
    s = analysis.summary
    return (
        f"### {heading}\n\n"
        f"**Overall Readiness: {s.overall_readiness:.1f}%** "
        f"({s.critical_gaps} critical, {s.minor_gaps} minor, {s.met_requirements} met)\n\n"
        + "\n".join(blocks)
    )
