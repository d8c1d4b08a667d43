"""Action registry: the static table of every operation the function serves.

  - getCapabilityGaps           (deterministic)
  - getSkillGaps                (deterministic)
  - scoreRolesToProfileFit      (deterministic, batch)
  - scoreProfilesToRoleFit      (deterministic, batch)
  - getReadinessAssessment      (deterministic)
  - generateCapabilityHeatmap   (deterministic matrix + optional LLM narrative)
  - summarizeCapabilityHeatmap  (deterministic, caller-supplied rows)

``run_action`` is the single boundary where failures become envelopes:
nothing raised by a handler escapes it.
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Mapping

from actions.base import ActionContext, ActionDescriptor, missing_inputs
from actions.fit_scores import score_profiles_to_role_fit, score_roles_to_profile_fit
from actions.gaps import get_capability_gaps, get_skill_gaps
from actions.heatmap import generate_capability_heatmap, summarize_capability_heatmap
from actions.readiness import get_readiness_assessment
from services.progress import emit_progress
from services.requirement_loader import DataNotFoundError
from shared.models import ActionError, ActionRequest, ActionResult, ErrorType

logger = logging.getLogger(__name__)

_DESCRIPTORS: tuple[ActionDescriptor, ...] = (
    ActionDescriptor(
        id="getCapabilityGaps",
        title="Get Capability Gaps",
        description="Compare a person's current capabilities to the requirements of a selected role.",
        required_inputs=("profile_id", "role_id"),
        uses_ai=False,
        failure_type=ErrorType.ANALYSIS_ERROR,
        handler=get_capability_gaps,
    ),
    ActionDescriptor(
        id="getSkillGaps",
        title="Get Skill Gaps",
        description="Analyze gaps between a person's skills and the skills a role requires.",
        required_inputs=("profile_id", "role_id"),
        uses_ai=False,
        failure_type=ErrorType.ANALYSIS_ERROR,
        handler=get_skill_gaps,
    ),
    ActionDescriptor(
        id="scoreRolesToProfileFit",
        title="Score Roles to Profile Fit",
        description="Score how well each of several roles fits one profile (60% capabilities, 40% skills).",
        required_inputs=("profile_id", "role_ids"),
        uses_ai=False,
        failure_type=ErrorType.SCORING_ERROR,
        handler=score_roles_to_profile_fit,
    ),
    ActionDescriptor(
        id="scoreProfilesToRoleFit",
        title="Score Profiles to Role Fit",
        description="Score how well each of several profiles fits one role (60% capabilities, 40% skills).",
        required_inputs=("role_id", "profile_ids"),
        uses_ai=False,
        failure_type=ErrorType.SCORING_ERROR,
        handler=score_profiles_to_role_fit,
    ),
    ActionDescriptor(
        id="getReadinessAssessment",
        title="Get Readiness Assessment",
        description="Evaluate profile readiness for a target role with weighted scoring.",
        required_inputs=("profile_id", "role_id"),
        uses_ai=False,
        failure_type=ErrorType.ASSESSMENT_ERROR,
        handler=get_readiness_assessment,
    ),
    ActionDescriptor(
        id="generateCapabilityHeatmap",
        title="Generate Capability Heatmap",
        description="Show how capabilities are distributed across taxonomies, divisions, regions or companies.",
        required_inputs=("company_ids",),
        uses_ai=True,
        failure_type=ErrorType.ANALYSIS_ERROR,
        handler=generate_capability_heatmap,
    ),
    ActionDescriptor(
        id="summarizeCapabilityHeatmap",
        title="Summarize Capability Heatmap",
        description="Convert capability heatmap rows into a matrix and summary statistics for prompt-building.",
        required_inputs=("heatmap_data",),
        uses_ai=False,
        failure_type=ErrorType.ANALYSIS_ERROR,
        handler=summarize_capability_heatmap,
    ),
)

ACTIONS: Mapping[str, ActionDescriptor] = MappingProxyType({d.id: d for d in _DESCRIPTORS})


def list_actions() -> list[dict]:
    return [d.describe() for d in _DESCRIPTORS]


async def run_action(action_id: str, request: ActionRequest, ctx: ActionContext) -> ActionResult:
    """Validate, dispatch and wrap one action call in the uniform envelope."""
    descriptor = ACTIONS.get(action_id)
    if descriptor is None:
        return ActionResult.fail(
            ErrorType.INVALID_INPUT, f"Unknown action: {action_id}",
            details={"available": list(ACTIONS)},
        )

    missing = missing_inputs(request, descriptor.required_inputs)
    if missing:
        return ActionResult.fail(
            ErrorType.INVALID_INPUT,
            f"{descriptor.title} requires: {', '.join(missing)}",
            details={"missing": missing},
        )

    start = time.perf_counter()
    try:
        result = await descriptor.handler(request, ctx)
    except DataNotFoundError as exc:
        result = ActionResult.fail(
            ErrorType.DATA_NOT_FOUND, str(exc),
            details={"entity": exc.entity, "id": exc.entity_id},
        )
    except Exception as exc:
        logger.exception("Action %s failed: %s", action_id, exc)
        result = ActionResult(success=False, error=ActionError.from_exception(descriptor.failure_type, exc))

    if not result.success:
        await emit_progress(
            ctx.progress, request.session_id,
            "I encountered an error while running this analysis. Let me know if you'd like to try again.",
            "error",
        )

    latency_ms = round((time.perf_counter() - start) * 1000, 1)
    logger.info(
        "Action %s finished: success=%s", action_id, result.success,
        extra={"action": action_id, "latency_ms": latency_ms, "session_id": request.session_id},
    )
    return result
