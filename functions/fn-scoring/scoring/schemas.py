"""Pydantic schemas for loaded records and every scoring result."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from scoring.levels import coerce_level, required_level_or_default

Kind = Literal["capability", "skill"]
GapType = Literal["missing", "insufficient", "met"]


# ---------------------------------------------------------------------------
# Loaded records
# ---------------------------------------------------------------------------

class RequirementRecord(BaseModel):
    """One capability or skill a role requires, at a minimum level."""
    id: str
    name: str
    group_name: str = ""
    kind: Kind = "capability"
    required_level: int = Field(default=None, ge=0, le=5, validate_default=True)

    @field_validator("required_level", mode="before")
    @classmethod
    def _normalize_required(cls, value: Any) -> int:
        return required_level_or_default(value)

    @field_validator("group_name", mode="before")
    @classmethod
    def _group_or_blank(cls, value: Any) -> str:
        return value or ""


class HoldingRecord(BaseModel):
    """One capability or skill a profile holds. ``held_level`` None means not held."""
    id: str
    name: str
    group_name: str = ""
    kind: Kind = "capability"
    held_level: Optional[int] = Field(default=None, ge=0, le=5)

    @field_validator("held_level", mode="before")
    @classmethod
    def _normalize_held(cls, value: Any) -> Optional[int]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return coerce_level(value)

    @field_validator("group_name", mode="before")
    @classmethod
    def _group_or_blank(cls, value: Any) -> str:
        return value or ""


# ---------------------------------------------------------------------------
# Gap analysis
# ---------------------------------------------------------------------------

class GapEntry(BaseModel):
    id: str
    name: str
    group_name: str = ""
    kind: Kind = "capability"
    held_level: Optional[int] = None
    required_level: int
    gap_type: GapType
    severity: float = Field(..., ge=0.0, le=100.0)
    description: str = ""


class GapSummary(BaseModel):
    critical_gaps: int = 0
    minor_gaps: int = 0
    met_requirements: int = 0
    overall_readiness: float = Field(100.0, ge=0.0, le=100.0)


class GapAnalysis(BaseModel):
    profile_id: str
    role_id: str
    gaps: list[GapEntry] = Field(default_factory=list)
    summary: GapSummary = Field(default_factory=GapSummary)


# ---------------------------------------------------------------------------
# Fit scoring
# ---------------------------------------------------------------------------

class FitFactors(BaseModel):
    capability_alignment: float = Field(0.0, ge=0.0, le=1.0)
    skill_alignment: float = Field(0.0, ge=0.0, le=1.0)
    capability_coverage: float = Field(0.0, ge=0.0, le=1.0)


class CapabilityFitDetail(BaseModel):
    met: list[str] = Field(default_factory=list)
    insufficient: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    score: float = 0.0
    coverage: float = 0.0
    total_criteria: int = 0
    met_criteria: int = 0


class SkillFitDetail(BaseModel):
    met: list[str] = Field(default_factory=list)
    insufficient: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    score: float = 0.0
    total_criteria: int = 0


class FitDetails(BaseModel):
    capabilities: CapabilityFitDetail = Field(default_factory=CapabilityFitDetail)
    skills: SkillFitDetail = Field(default_factory=SkillFitDetail)


class FitScore(BaseModel):
    score: float = Field(..., ge=0.0, le=1.0, description="0.6 * capability + 0.4 * skill alignment")
    explanation: str = ""
    factors: FitFactors = Field(default_factory=FitFactors)
    details: FitDetails = Field(default_factory=FitDetails)


class RankedCandidate(BaseModel):
    candidate_id: str
    score: float


class BatchFitResult(BaseModel):
    subject_id: str
    subject_kind: Literal["profile", "role"]
    scores: dict[str, FitScore] = Field(default_factory=dict)
    ranking: list[RankedCandidate] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

class CriticalGap(BaseModel):
    kind: Kind
    name: str
    current_level: int
    required_level: int
    severity: float


class DevelopmentTimeline(BaseModel):
    short_term: list[str] = Field(default_factory=list)
    medium_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)


class ReadinessAssessment(BaseModel):
    score: float = Field(..., ge=0.0, le=100.0)
    capability_score: float = Field(..., ge=0.0, le=100.0)
    skill_score: float = Field(..., ge=0.0, le=100.0)
    readiness_level: str
    critical_gaps: list[CriticalGap] = Field(default_factory=list)
    development_timeline: DevelopmentTimeline = Field(default_factory=DevelopmentTimeline)
    summary: str = ""


# ---------------------------------------------------------------------------
# Heatmap
# ---------------------------------------------------------------------------

_GROUP_KEYS = ("group", "taxonomy", "division", "region", "company")


class HeatmapRow(BaseModel):
    """One (group, capability) count as produced by the heatmap query.

    Accepts the query's native column names: the group may arrive as
    ``taxonomy``/``division``/``region``/``company`` and the group total as
    ``total_roles``.
    """
    group: str = "organization"
    capability: str
    role_count: int = Field(0, ge=0)
    total_roles_in_group: int = Field(0, ge=0)
    company: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_query_columns(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        group = next((data[k] for k in _GROUP_KEYS if data.get(k)), None)
        data["group"] = group or "organization"
        if "total_roles_in_group" not in data and "total_roles" in data:
            data["total_roles_in_group"] = data["total_roles"]
        for key in ("role_count", "total_roles_in_group"):
            if data.get(key) is None:
                data[key] = 0
            else:
                data[key] = int(data[key])
        return data


class HeatmapCell(BaseModel):
    group: str
    capability: str
    role_count: int
    total_roles_in_group: int
    percentage: float


class HeatmapMatrix(BaseModel):
    groups: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    counts: dict[str, dict[str, int]] = Field(default_factory=dict)
    cells: list[HeatmapCell] = Field(default_factory=list)


class GroupCapability(BaseModel):
    name: str
    count: int
    percentage: float


class GroupSummary(BaseModel):
    name: str
    total_roles: int
    unique_capabilities: int
    top_capabilities: list[GroupCapability] = Field(default_factory=list)


class CapabilityTotal(BaseModel):
    name: str
    total_occurrences: int
    groups_present: int
    average_per_group: float


class MatrixDimensions(BaseModel):
    rows: int = 0
    columns: int = 0


class HeatmapSummary(BaseModel):
    total_roles: int = 0
    total_capabilities: int = 0
    total_groups: int = 0
    matrix_dimensions: MatrixDimensions = Field(default_factory=MatrixDimensions)
    groups: list[GroupSummary] = Field(default_factory=list)
    top_capabilities: list[CapabilityTotal] = Field(default_factory=list)


class HeatmapReport(BaseModel):
    group_by: str = "taxonomy"
    csv_rendering: str
    matrix: HeatmapMatrix
    summary: HeatmapSummary
    narrative: Optional[str] = None
