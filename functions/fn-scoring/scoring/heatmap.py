"""Capability heatmap aggregator.

Cross-tabulates (group, capability) role counts into a group x capability
matrix with per-group and global rankings, and renders the CSV text that the
narrative summarizer consumes. The CSV shape is a stable contract:

    # Capability Heatmap
    Group,Total Roles,"<cap 1>","<cap 2>",...
    <group>,<total>,<count>,<count>,...

    # Summary Statistics
    ...

    # Top Capabilities
    capability,total_occurrences,groups_present,average_per_group
    ...
"""

from __future__ import annotations

from typing import Iterable

from scoring.schemas import (
    CapabilityTotal,
    GroupCapability,
    GroupSummary,
    HeatmapCell,
    HeatmapMatrix,
    HeatmapReport,
    HeatmapRow,
    HeatmapSummary,
    MatrixDimensions,
)

GROUP_TOP_N = 5
GLOBAL_TOP_N = 10


def percentage(count: int, total: int) -> float:
    """count / total as a percentage rounded to 1 decimal; 0.0 for an empty group."""
    if total <= 0:
        return 0.0
    return round(count / total * 100.0, 1)


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _csv_field(value: str) -> str:
    return _quoted(value) if any(c in value for c in ',"\n') else value


def build_matrix(rows: Iterable[HeatmapRow]) -> tuple[HeatmapMatrix, dict[str, int]]:
    """Return the matrix and each group's role total.

    Groups are ordered by name; capability columns keep first-seen order over
    the group-sorted rows. Absent cells are 0.
    """
    ordered = sorted(rows, key=lambda r: r.group)
    groups: list[str] = []
    capabilities: list[str] = []
    totals: dict[str, int] = {}
    for row in ordered:
        if row.group not in totals:
            groups.append(row.group)
            totals[row.group] = row.total_roles_in_group
        else:
            totals[row.group] = max(totals[row.group], row.total_roles_in_group)
        if row.capability not in capabilities:
            capabilities.append(row.capability)

    counts = {group: {cap: 0 for cap in capabilities} for group in groups}
    for row in ordered:
        counts[row.group][row.capability] = row.role_count

    cells = [
        HeatmapCell(
            group=group,
            capability=cap,
            role_count=counts[group][cap],
            total_roles_in_group=totals[group],
            percentage=percentage(counts[group][cap], totals[group]),
        )
        for group in groups
        for cap in capabilities
    ]
    matrix = HeatmapMatrix(groups=groups, capabilities=capabilities, counts=counts, cells=cells)
    return matrix, totals


def _group_summaries(matrix: HeatmapMatrix, totals: dict[str, int]) -> list[GroupSummary]:
    summaries = []
    for group in matrix.groups:
        row = matrix.counts[group]
        top = sorted(row.items(), key=lambda kv: kv[1], reverse=True)[:GROUP_TOP_N]
        summaries.append(GroupSummary(
            name=group,
            total_roles=totals[group],
            unique_capabilities=sum(1 for v in row.values() if v > 0),
            top_capabilities=[
                GroupCapability(name=cap, count=count, percentage=percentage(count, totals[group]))
                for cap, count in top
            ],
        ))
    return summaries


def _capability_totals(matrix: HeatmapMatrix) -> list[CapabilityTotal]:
    stats = []
    for cap in matrix.capabilities:
        present = [matrix.counts[g][cap] for g in matrix.groups if matrix.counts[g][cap] > 0]
        total = sum(present)
        stats.append(CapabilityTotal(
            name=cap,
            total_occurrences=total,
            groups_present=len(present),
            average_per_group=round(total / len(present), 1) if present else 0.0,
        ))
    stats.sort(key=lambda s: s.total_occurrences, reverse=True)
    return stats[:GLOBAL_TOP_N]


def render_csv(matrix: HeatmapMatrix, totals: dict[str, int], summary: HeatmapSummary) -> str:
    lines = [
        "# Capability Heatmap",
        "Group,Total Roles," + ",".join(_quoted(cap) for cap in matrix.capabilities),
    ]
    for group in matrix.groups:
        values = ",".join(str(matrix.counts[group][cap]) for cap in matrix.capabilities)
        lines.append(f"{_csv_field(group)},{totals[group]},{values}")

    lines += [
        "",
        "# Summary Statistics",
        f"Total Roles Analyzed: {summary.total_roles}",
        f"Total Groups: {summary.total_groups}",
        f"Total Unique Capabilities: {summary.total_capabilities}",
        "",
        "# Top Capabilities",
        "capability,total_occurrences,groups_present,average_per_group",
    ]
    for stat in summary.top_capabilities:
        lines.append(
            f"{_quoted(stat.name)},{stat.total_occurrences},{stat.groups_present},{stat.average_per_group:.1f}"
        )
    return "\n".join(lines)


def summarize_heatmap(rows: Iterable[HeatmapRow], group_by: str = "taxonomy") -> HeatmapReport:
    matrix, totals = build_matrix(rows)
    summary = HeatmapSummary(
        total_roles=sum(totals.values()),
        total_capabilities=len(matrix.capabilities),
        total_groups=len(matrix.groups),
        matrix_dimensions=MatrixDimensions(rows=len(matrix.groups), columns=len(matrix.capabilities)),
        groups=_group_summaries(matrix, totals),
        top_capabilities=_capability_totals(matrix),
    )
    return HeatmapReport(
        group_by=group_by,
        csv_rendering=render_csv(matrix, totals, summary),
        matrix=matrix,
        summary=summary,
    )
