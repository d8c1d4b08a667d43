"""Action descriptor and the dependencies every action receives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from services.progress import ProgressSink
from services.requirement_loader import RequirementLoader
from services.summarizer import AnalysisSummarizer
from shared.models import ActionRequest, ActionResult, ErrorType


@dataclass(frozen=True)
class ActionContext:
    loader: RequirementLoader
    progress: Optional[ProgressSink] = None
    summarizer: Optional[AnalysisSummarizer] = None
    fetch_timeout: float = 10.0
    top_n: int = 5


Handler = Callable[[ActionRequest, ActionContext], Awaitable[ActionResult]]


@dataclass(frozen=True)
class ActionDescriptor:
    id: str
    title: str
    description: str
    required_inputs: tuple[str, ...]
    uses_ai: bool
    failure_type: ErrorType
    handler: Handler

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "required_inputs": list(self.required_inputs),
            "uses_ai": self.uses_ai,
        }


def missing_inputs(request: ActionRequest, names: tuple[str, ...]) -> list[str]:
    """Names of required inputs that are absent.

    Strings must be non-blank; a list only has to be present (an empty list
    is a valid, empty batch).
    """
    missing = []
    for name in names:
        value = getattr(request, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
