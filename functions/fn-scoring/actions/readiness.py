"""Action: getReadinessAssessment

Weighted 0-100 readiness of a profile for a role, a qualitative band, the
critical gaps and a short/medium/long-term development timeline.
"""

from __future__ import annotations

import asyncio
import logging

from actions.base import ActionContext
from scoring.readiness import assess_readiness
from services.progress import emit_progress
from services.requirement_loader import bounded
from shared.models import ActionRequest, ActionResult

logger = logging.getLogger(__name__)


async def get_readiness_assessment(request: ActionRequest, ctx: ActionContext) -> ActionResult:
    holdings, requirements, title = await asyncio.gather(
        bounded(ctx.loader.load_profile_holdings(request.profile_id), ctx.fetch_timeout,
                f"profile {request.profile_id}"),
        bounded(ctx.loader.load_role_requirements(request.role_id), ctx.fetch_timeout,
                f"role {request.role_id}"),
        bounded(ctx.loader.load_role_title(request.role_id), ctx.fetch_timeout,
                f"role {request.role_id} title"),
    )

    assessment = assess_readiness(title, holdings, requirements)
    await emit_progress(ctx.progress, request.session_id, assessment.summary, "readiness_assessed")

    logger.info(
        "Readiness of profile %s for role %s: %.1f (%s)",
        request.profile_id, request.role_id, assessment.score, assessment.readiness_level,
    )
    return ActionResult.ok(assessment, message=assessment.summary)
