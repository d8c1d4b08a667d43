"""Actions: scoreRolesToProfileFit, scoreProfilesToRoleFit

Batch fit scoring, fully deterministic. The fixed side (one profile or one
role) is loaded first and a failure there fails the call; each candidate on
the other side is fetched and scored independently and a candidate failure
only removes that candidate from the score map.
"""

from __future__ import annotations

import logging

from actions.base import ActionContext
from scoring.batch import render_batch_markdown, score_batch
from scoring.fit_scorer import compute_fit
from services.progress import emit_progress
from services.requirement_loader import bounded
from shared.models import ActionRequest, ActionResult

logger = logging.getLogger(__name__)


async def score_roles_to_profile_fit(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    """Score every role in ``role_ids`` against the profile ``profile_id``."""
    role_ids = request.role_ids or []
    await emit_progress(
        ctx.progress, request.session_id,
        f"Analyzing fit scores for {len(role_ids)} roles...", "analysis_start",
    )
    holdings = await bounded(
        ctx.loader.load_profile_holdings(request.profile_id), ctx.fetch_timeout,
        f"profile {request.profile_id}",
    )

    result = await score_batch(
        subject_id=request.profile_id,
        subject_kind="profile",
        candidate_ids=role_ids,
        load=ctx.loader.load_role_requirements,
        score=lambda requirements: compute_fit(holdings, requirements),
        timeout=ctx.fetch_timeout,
    )
    markdown = render_batch_markdown(result, top_n=ctx.top_n)
    await emit_progress(ctx.progress, request.session_id, markdown, "analysis_complete")
    return ActionResult.ok(result, message=markdown)


async def score_profiles_to_role_fit(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    """Score every profile in ``profile_ids`` against the role ``role_id``."""
    profile_ids = request.profile_ids or []
    await emit_progress(
        ctx.progress, request.session_id,
        f"Analyzing fit scores for {len(profile_ids)} profiles...", "analysis_start",
    )
    requirements = await bounded(
        ctx.loader.load_role_requirements(request.role_id), ctx.fetch_timeout,
        f"role {request.role_id}",
    )

    result = await score_batch(
        subject_id=request.role_id,
        subject_kind="role",
        candidate_ids=profile_ids,
        load=ctx.loader.load_profile_holdings,
        score=lambda holdings: compute_fit(holdings, requirements),
        timeout=ctx.fetch_timeout,
    )
    markdown = render_batch_markdown(result, top_n=ctx.top_n)
    await emit_progress(ctx.progress, request.session_id, markdown, "analysis_complete")
    return ActionResult.ok(result, message=markdown)
