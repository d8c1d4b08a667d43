"""Actions: getCapabilityGaps, getSkillGaps

Deterministic gap analysis of one profile against one role, no LLM.
Every requirement of the role gets a gap entry (met, insufficient or
missing) with a severity, sorted most severe first.
"""

from __future__ import annotations

import asyncio
import logging

from actions.base import ActionContext
from scoring.gap_analyzer import analyze_gaps, render_gap_markdown
from scoring.schemas import Kind
from services.progress import emit_progress
from services.requirement_loader import bounded
from shared.models import ActionRequest, ActionResult

logger = logging.getLogger(__name__)


async def _gap_analysis(request: ActionRequest, ctx: ActionContext, kind: Kind, heading: str) -> ActionResult:
    await emit_progress(
        ctx.progress, request.session_id,
        f"Loading profile and role data to analyze {kind} gaps...", "analysis_start",
    )
    holdings, requirements = await asyncio.gather(
        bounded(ctx.loader.load_profile_holdings(request.profile_id), ctx.fetch_timeout,
                f"profile {request.profile_id}"),
        bounded(ctx.loader.load_role_requirements(request.role_id), ctx.fetch_timeout,
                f"role {request.role_id}"),
    )

    analysis = analyze_gaps(request.profile_id, request.role_id, holdings, requirements, kind=kind)
    markdown = render_gap_markdown(analysis, heading)
    await emit_progress(ctx.progress, request.session_id, markdown, "gaps_analyzed")

    s = analysis.summary
    logger.info(
        "%s gaps for profile %s vs role %s: %d critical, %d minor, %d met",
        kind.capitalize(), request.profile_id, request.role_id,
        s.critical_gaps, s.minor_gaps, s.met_requirements,
    )
    return ActionResult.ok(analysis, message=markdown)


async def get_capability_gaps(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    """Compare a profile's capabilities to the capability requirements of a role."""
    return await _gap_analysis(request, ctx, "capability", "Capability Gaps Analysis")


async def get_skill_gaps(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    """Compare a profile's skills to the skill requirements of a role."""
    return await _gap_analysis(request, ctx, "skill", "Skill Gaps Analysis")
