"""Progress sink: where markdown narratives of finished analyses are posted.

Reporting is fire-and-forget. ``emit_progress`` is the only call site the
actions use; a failing sink is logged and never fails the analysis.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

_SINK_TIMEOUT = 5.0


class ProgressSink(Protocol):
    async def report(self, session_id: str, message: str, phase: str) -> None: ...


class LoggingProgressSink:
    """Writes progress messages to the log stream."""

    async def report(self, session_id: str, message: str, phase: str) -> None:
        logger.info("[%s] %s", phase, message, extra={"session_id": session_id})


class PostgrestProgressSink:
    """Appends progress messages to the chat_messages table via PostgREST."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = _SINK_TIMEOUT) -> None:
        self._url = f"{base_url.rstrip('/')}/rest/v1/chat_messages"
        self._timeout = timeout
        self._headers = {"Prefer": "return=minimal"}
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"

    async def report(self, session_id: str, message: str, phase: str) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, headers=self._headers) as client:
            resp = await client.post(
                self._url,
                json={
                    "session_id": session_id,
                    "role": "assistant",
                    "content": message,
                    "metadata": {"phase": phase},
                },
            )
            resp.raise_for_status()


async def emit_progress(
    sink: Optional[ProgressSink],
    session_id: Optional[str],
    message: str,
    phase: str,
) -> None:
    """Report to *sink* when there is a session to report to."""
    if sink is None or not session_id:
        return
    try:
        await sink.report(session_id, message, phase)
    except Exception as exc:
        logger.warning("Progress report failed for session %s (%s): %s", session_id, phase, exc)
