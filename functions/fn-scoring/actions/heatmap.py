"""Actions: generateCapabilityHeatmap, summarizeCapabilityHeatmap

generateCapabilityHeatmap loads (group, capability) counts for the selected
companies, aggregates them and, when an LLM is configured, appends a
narrative. The matrix and statistics are deterministic; the narrative is
best-effort.

summarizeCapabilityHeatmap aggregates rows supplied by the caller and never
touches the data store.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from actions.base import ActionContext
from scoring.heatmap import summarize_heatmap
from scoring.schemas import HeatmapRow
from services.progress import emit_progress
from services.requirement_loader import bounded
from shared.models import ActionRequest, ActionResult, ErrorType

logger = logging.getLogger(__name__)


async def generate_capability_heatmap(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    if not request.company_ids:
        return ActionResult.fail(ErrorType.INVALID_INPUT, "At least one company ID is required")

    group_by = request.group_by
    await emit_progress(
        ctx.progress, request.session_id,
        f"I'm analyzing capability distribution across {group_by.value} groups...", "analysis_start",
    )
    rows = await bounded(
        ctx.loader.load_heatmap_rows(request.company_ids, group_by), ctx.fetch_timeout,
        f"heatmap rows for {len(request.company_ids)} companies",
    )
    report = summarize_heatmap(rows, group_by=group_by.value)

    if ctx.summarizer is not None and rows:
        try:
            report.narrative = await ctx.summarizer.narrate(
                "capability_heatmap", report.csv_rendering, request.message, group_by=group_by.value,
            )
        except Exception as exc:
            logger.warning("Heatmap narrative generation failed: %s", exc)

    message = report.narrative or (
        f"Capability {group_by.value} analysis complete: {report.summary.total_groups} groups, "
        f"{report.summary.total_capabilities} capabilities, {report.summary.total_roles} roles."
    )
    await emit_progress(ctx.progress, request.session_id, message, "heatmap_complete")
    return ActionResult.ok(report, message=message)


async def summarize_capability_heatmap(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    if request.heatmap_data is None:
        return ActionResult.fail(ErrorType.INVALID_INPUT, "Valid heatmap data array is required")
    try:
        rows = [HeatmapRow.model_validate(item) for item in request.heatmap_data]
    except ValidationError as exc:
        return ActionResult.fail(
            ErrorType.INVALID_INPUT, "Malformed heatmap row", details={"errors": exc.errors(include_url=False, include_context=False)},
        )

    report = summarize_heatmap(rows, group_by=request.group_by.value)
    s = report.summary
    message = (
        f"Summarized {s.total_roles} roles across {s.total_groups} groups "
        f"with {s.total_capabilities} unique capabilities."
    )
    return ActionResult.ok(report, message=message)
