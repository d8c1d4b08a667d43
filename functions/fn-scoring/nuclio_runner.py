#!/usr/bin/env python3
"""Local stand-in for the Nuclio runtime (Docker Compose, manual testing).

Calls init_context() once, then feeds every HTTP request to handler() as a
Nuclio-shaped event. GET /health is answered here without touching the
function. Single-threaded: the function owns one event loop and requests
are served one at a time, as in a Nuclio worker.

On real Nuclio this file is not used; the function spec points at
function:handler.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from types import SimpleNamespace
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

logger = logging.getLogger("nuclio_runner")


class Context:
    """The subset of nuclio.Context the function uses."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("fn-scoring")
        self.user_data = SimpleNamespace()


@dataclass
class Event:
    """The subset of nuclio.Event the function uses."""
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    path: str = "/"
    method: str = "POST"

    def get_json(self) -> Any:
        return json.loads(self.body or b"{}")


def _crash_body(exc: Exception) -> str:
    from shared.models import ActionError, ActionResult, ErrorType

    error = ActionError.from_exception(ErrorType.ANALYSIS_ERROR, exc)
    return ActionResult(success=False, error=error).model_dump_json()


def make_request_handler(ctx: Context) -> type[BaseHTTPRequestHandler]:
    """Bind *ctx* into a request handler class for HTTPServer."""
    from function import handler

    class RequestHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            if self.path == "/health":
                self._write(200, json.dumps({"status": "ok"}))
                return
            self._invoke()

        def do_POST(self) -> None:
            self._invoke()

        def _invoke(self) -> None:
            size = int(self.headers.get("Content-Length") or 0)
            event = Event(
                body=self.rfile.read(size) if size else b"",
                headers=dict(self.headers),
                path=self.path,
                method=self.command,
            )
            try:
                response = handler(ctx, event)
            except Exception as exc:
                logger.exception("Unhandled error serving %s %s", self.command, self.path)
                self._write(500, _crash_body(exc))
                return
            self._write(response.status_code, response.body, response.content_type)

        def _write(self, status: int, body: str, content_type: str = "application/json") -> None:
            payload = body.encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, fmt: str, *args: Any) -> None:
            logger.debug(fmt, *args)

    return RequestHandler


def serve(port: int) -> None:
    from function import init_context

    ctx = Context()
    init_context(ctx)
    server = HTTPServer(("0.0.0.0", port), make_request_handler(ctx))
    logger.info("fn-scoring listening on port %d", port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
        ctx.user_data.loop.close()


if __name__ == "__main__":
    from shared.logging_config import setup_logging

    setup_logging()
    serve(int(os.getenv("PORT", "8080")))
