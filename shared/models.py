"""Shared Pydantic models: the action request and the uniform result envelope.

Every public operation of the scoring function returns an ``ActionResult``.
``success=False`` always pairs with a populated ``error.type``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ErrorType(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    DATA_NOT_FOUND = "DATA_NOT_FOUND"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    SCORING_ERROR = "SCORING_ERROR"
    ASSESSMENT_ERROR = "ASSESSMENT_ERROR"


class GroupBy(str, Enum):
    """Organizational dimension a capability heatmap is grouped by."""
    TAXONOMY = "taxonomy"
    DIVISION = "division"
    REGION = "region"
    COMPANY = "company"


class ActionError(BaseModel):
    type: ErrorType
    message: str
    details: Optional[dict[str, Any]] = None

    @classmethod
    def from_exception(cls, error_type: ErrorType, exc: BaseException) -> "ActionError":
        """Wrap an unexpected failure, keeping the cause in ``details``."""
        return cls(
            type=error_type,
            message=str(exc) or exc.__class__.__name__,
            details={"cause": exc.__class__.__name__, "text": str(exc)},
        )


class ActionResult(BaseModel, Generic[DataT]):
    """Uniform envelope returned by every action."""
    success: bool
    data: Optional[DataT] = None
    error: Optional[ActionError] = None
    message: Optional[str] = Field(default=None, description="Markdown narrative, when produced")

    @classmethod
    def ok(cls, data: DataT, message: Optional[str] = None) -> "ActionResult[DataT]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(
        cls,
        error_type: ErrorType,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> "ActionResult[DataT]":
        return cls(success=False, error=ActionError(type=error_type, message=message, details=details))


class ActionRequest(BaseModel):
    """Incoming action invocation.

    Which identifiers are required depends on the action; each action
    validates its own inputs and answers INVALID_INPUT before touching data.
    """
    session_id: Optional[str] = None
    profile_id: Optional[str] = None
    role_id: Optional[str] = None
    role_ids: Optional[list[str]] = None
    profile_ids: Optional[list[str]] = None
    company_ids: Optional[list[str]] = None
    group_by: GroupBy = GroupBy.TAXONOMY
    heatmap_data: Optional[list[dict[str, Any]]] = None
    message: Optional[str] = Field(default=None, max_length=2000)
