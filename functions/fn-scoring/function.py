"""fn-scoring: HR fit/gap scoring function.

Nuclio function contract:
  init_context(context):   build the action context ONCE
  handler(context, event): dispatch one action, return the envelope

Routes handled:
  GET  /actions              → action descriptors
  POST /actions/{action_id}  { profile_id?, role_id?, role_ids?, ... } → ActionResult

Every response body is an ActionResult envelope (or the action list).
Status codes mirror the envelope: 400 INVALID_INPUT, 404 DATA_NOT_FOUND,
500 for any other error type.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_FUNCTION_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(os.path.dirname(_FUNCTION_DIR))


# ---------------------------------------------------------------------------
# Response type, read by nuclio_runner and by Nuclio itself
# ---------------------------------------------------------------------------

@dataclass
class Response:
    body: str = ""
    status_code: int = 200
    content_type: str = "application/json"


_STATUS_BY_ERROR = {
    "INVALID_INPUT": 400,
    "DATA_NOT_FOUND": 404,
}


def _envelope(result, status_code: int | None = None) -> Response:
    if status_code is None:
        status_code = 200 if result.success else _STATUS_BY_ERROR.get(result.error.type.value, 500)
    return Response(body=result.model_dump_json(), status_code=status_code)


# ---------------------------------------------------------------------------
# Nuclio lifecycle
# ---------------------------------------------------------------------------

def build_action_context(settings):
    """Build the loader, progress sink and optional summarizer from *settings*."""
    from pathlib import Path

    from actions.base import ActionContext
    from services.progress import LoggingProgressSink, PostgrestProgressSink
    from services.requirement_loader import FixtureLoader, PostgrestLoader

    if settings.FIXTURE_PATH:
        loader = FixtureLoader.from_file(Path(settings.FIXTURE_PATH))
    else:
        loader = PostgrestLoader(
            settings.POSTGREST_URL, settings.POSTGREST_API_KEY, timeout=settings.FETCH_TIMEOUT_S,
        )

    if settings.PROGRESS_SINK == "postgrest":
        progress = PostgrestProgressSink(settings.POSTGREST_URL, settings.POSTGREST_API_KEY)
    else:
        progress = LoggingProgressSink()

    summarizer = None
    if settings.LLM_ENABLED:
        from services.summarizer import build_summarizer
        summarizer = build_summarizer(settings.OLLAMA_BASE_URL, settings.LLM_MODEL, settings.LLM_TIMEOUT)

    return ActionContext(
        loader=loader,
        progress=progress,
        summarizer=summarizer,
        fetch_timeout=settings.FETCH_TIMEOUT_S,
        top_n=settings.TOP_N_SUMMARY,
    )


def init_context(context) -> None:
    """Build all collaborators once at startup."""
    for path in (_FUNCTION_DIR, _PROJECT_ROOT):
        if path not in sys.path:
            sys.path.insert(0, path)

    context.logger.info("Initialising fn-scoring ...")

    from actions import ACTIONS
    from shared.config import settings

    context.user_data.action_context = build_action_context(settings)

    # One persistent loop for every request; handlers run coroutines on it.
    import asyncio
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    context.user_data.loop = loop

    context.logger.info(f"fn-scoring ready: {len(ACTIONS)} actions registered")


def handler(context, event) -> Response:
    """Route the request to the action list or to one action."""
    from actions import list_actions, run_action
    from shared.models import ActionRequest, ActionResult, ErrorType

    path = event.path.split("?", 1)[0].rstrip("/")

    # --- Action list: GET /actions ---
    if event.method == "GET" and path == "/actions":
        return Response(body=json.dumps({"actions": list_actions()}))

    if event.method != "POST" or not path.startswith("/actions/"):
        return _envelope(
            ActionResult.fail(ErrorType.INVALID_INPUT, f"No route for {event.method} {path or '/'}"),
            status_code=404,
        )

    # --- Action call: POST /actions/{id} ---
    action_id = path[len("/actions/"):]
    try:
        request = ActionRequest.model_validate(event.get_json() or {})
    except (json.JSONDecodeError, ValueError) as exc:
        return _envelope(ActionResult.fail(ErrorType.INVALID_INPUT, f"Bad request: {exc}"))

    logger.info("Action request: %s session=%s", action_id, request.session_id)
    loop = context.user_data.loop
    result = loop.run_until_complete(run_action(action_id, request, context.user_data.action_context))
    return _envelope(result)
