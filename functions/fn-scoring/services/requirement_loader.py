"""Requirement loader: the scoring engine's only view of the HR schema.

Two implementations of the same async contract:
  - PostgrestLoader: reads roles/profiles and their capability and skill
    links over the PostgREST HTTP API (httpx).
  - FixtureLoader:   serves the same records from a JSON document, for local
    runs and tests.

Raw level labels are normalized when records are built (see scoring.schemas).
A role or profile id that does not resolve raises DataNotFoundError.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Optional, Protocol, Sequence, TypeVar

import httpx

from scoring.schemas import HeatmapRow, HoldingRecord, RequirementRecord
from shared.models import GroupBy

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LoaderError(Exception):
    """Base class for data access failures."""


class DataNotFoundError(LoaderError):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class LoaderTimeoutError(LoaderError):
    pass


async def bounded(awaitable: Awaitable[T], timeout: float, what: str) -> T:
    """Await *awaitable*, converting a timeout into LoaderTimeoutError."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise LoaderTimeoutError(f"Timed out after {timeout:g}s loading {what}") from exc


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

class RequirementLoader(Protocol):
    async def load_role_title(self, role_id: str) -> str: ...

    async def load_role_requirements(self, role_id: str) -> list[RequirementRecord]: ...

    async def load_profile_holdings(self, profile_id: str) -> list[HoldingRecord]: ...

    async def load_heatmap_rows(self, company_ids: Sequence[str], group_by: GroupBy) -> list[HeatmapRow]: ...


# ---------------------------------------------------------------------------
# Row mapping (shared by both implementations)
# ---------------------------------------------------------------------------

def _capability_requirement(row: dict) -> RequirementRecord:
    cap = row.get("capabilities") or {}
    return RequirementRecord(
        id=str(row.get("capability_id") or cap.get("id") or row.get("id")),
        name=cap.get("name") or row.get("name") or "",
        group_name=cap.get("group_name") or row.get("group_name"),
        kind="capability",
        required_level=row.get("level"),
    )


def _skill_requirement(row: dict) -> RequirementRecord:
    skill = row.get("skills") or {}
    return RequirementRecord(
        id=str(row.get("skill_id") or skill.get("id") or row.get("id")),
        name=skill.get("name") or row.get("name") or "",
        group_name=skill.get("category") or row.get("category"),
        kind="skill",
        # Role skills carry no level; the record applies the default.
        required_level=None,
    )


def _capability_holding(row: dict) -> HoldingRecord:
    cap = row.get("capabilities") or {}
    return HoldingRecord(
        id=str(row.get("capability_id") or cap.get("id") or row.get("id")),
        name=cap.get("name") or row.get("name") or "",
        group_name=cap.get("group_name") or row.get("group_name"),
        kind="capability",
        held_level=row.get("level"),
    )


def _skill_holding(row: dict) -> HoldingRecord:
    skill = row.get("skills") or {}
    return HoldingRecord(
        id=str(row.get("skill_id") or skill.get("id") or row.get("id")),
        name=skill.get("name") or row.get("name") or "",
        group_name=skill.get("category") or row.get("category"),
        kind="skill",
        held_level=row.get("rating", row.get("level")),
    )


# ---------------------------------------------------------------------------
# PostgREST
# ---------------------------------------------------------------------------

_ROLE_CAPS_SELECT = "capability_id,level,capabilities(id,name,group_name)"
_ROLE_SKILLS_SELECT = "skill_id,skills(id,name,category)"
_PROFILE_CAPS_SELECT = "capability_id,level,capabilities(id,name,group_name)"
_PROFILE_SKILLS_SELECT = "skill_id,rating,skills(id,name,category)"


class PostgrestLoader:
    """Loads requirement and holding records through PostgREST."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"Accept": "application/json"}
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._base_url}/rest/v1",
            headers=self._headers,
            timeout=self._timeout,
        )

    @staticmethod
    async def _select(client: httpx.AsyncClient, table: str, params: dict[str, str]) -> list[dict]:
        resp = await client.get(f"/{table}", params=params)
        resp.raise_for_status()
        return resp.json()

    async def _require(self, client: httpx.AsyncClient, table: str, entity: str, entity_id: str) -> None:
        rows = await self._select(client, table, {"id": f"eq.{entity_id}", "select": "id"})
        if not rows:
            raise DataNotFoundError(entity, entity_id)

    async def load_role_title(self, role_id: str) -> str:
        async with self._client() as client:
            rows = await self._select(client, "roles", {"id": f"eq.{role_id}", "select": "id,title"})
        if not rows:
            raise DataNotFoundError("Role", role_id)
        return rows[0].get("title") or f"role {role_id}"

    async def load_role_requirements(self, role_id: str) -> list[RequirementRecord]:
        async with self._client() as client:
            await self._require(client, "roles", "Role", role_id)
            caps, skills = await asyncio.gather(
                self._select(client, "role_capabilities", {"role_id": f"eq.{role_id}", "select": _ROLE_CAPS_SELECT}),
                self._select(client, "role_skills", {"role_id": f"eq.{role_id}", "select": _ROLE_SKILLS_SELECT}),
            )
        records = [_capability_requirement(r) for r in caps] + [_skill_requirement(r) for r in skills]
        logger.info("Loaded %d requirements for role %s", len(records), role_id)
        return records

    async def load_profile_holdings(self, profile_id: str) -> list[HoldingRecord]:
        async with self._client() as client:
            await self._require(client, "profiles", "Profile", profile_id)
            caps, skills = await asyncio.gather(
                self._select(client, "profile_capabilities",
                             {"profile_id": f"eq.{profile_id}", "select": _PROFILE_CAPS_SELECT}),
                self._select(client, "profile_skills",
                             {"profile_id": f"eq.{profile_id}", "select": _PROFILE_SKILLS_SELECT}),
            )
        records = [_capability_holding(r) for r in caps] + [_skill_holding(r) for r in skills]
        logger.info("Loaded %d holdings for profile %s", len(records), profile_id)
        return records

    async def load_heatmap_rows(self, company_ids: Sequence[str], group_by: GroupBy) -> list[HeatmapRow]:
        async with self._client() as client:
            resp = await client.post(
                "/rpc/capability_heatmap",
                json={"company_ids": list(company_ids), "group_by": group_by.value},
            )
            resp.raise_for_status()
            rows = resp.json()
        logger.info("Loaded %d heatmap rows grouped by %s", len(rows), group_by.value)
        return [HeatmapRow.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# JSON fixture
# ---------------------------------------------------------------------------

class FixtureLoader:
    """Serves records from an in-memory document shaped like::

        {
          "roles":    {"<id>": {"title": str, "capabilities": [...], "skills": [...]}},
          "profiles": {"<id>": {"name": str, "capabilities": [...], "skills": [...]}},
          "heatmap":  [{"company_id": str, "taxonomy": str, "capability": str,
                        "role_count": int, "total_roles": int}, ...]
        }
    """

    def __init__(self, document: Optional[dict[str, Any]] = None) -> None:
        document = document or {}
        self._roles: dict[str, dict] = document.get("roles", {})
        self._profiles: dict[str, dict] = document.get("profiles", {})
        self._heatmap: list[dict] = document.get("heatmap", [])

    @classmethod
    def from_file(cls, path: Path) -> "FixtureLoader":
        if not path.exists():
            logger.info("No fixture file found at %s, starting empty", path)
            return cls()
        try:
            document = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            logger.error("Failed to load fixtures from %s: %s", path, exc)
            return cls()
        logger.info(
            "Fixtures loaded: %d roles, %d profiles, %d heatmap rows",
            len(document.get("roles", {})), len(document.get("profiles", {})), len(document.get("heatmap", [])),
        )
        return cls(document)

    async def load_role_title(self, role_id: str) -> str:
        role = self._roles.get(role_id)
        if role is None:
            raise DataNotFoundError("Role", role_id)
        return role.get("title") or f"role {role_id}"

    async def load_role_requirements(self, role_id: str) -> list[RequirementRecord]:
        role = self._roles.get(role_id)
        if role is None:
            raise DataNotFoundError("Role", role_id)
        return (
            [_capability_requirement(r) for r in role.get("capabilities", [])]
            + [_skill_requirement(r) for r in role.get("skills", [])]
        )

    async def load_profile_holdings(self, profile_id: str) -> list[HoldingRecord]:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise DataNotFoundError("Profile", profile_id)
        return (
            [_capability_holding(r) for r in profile.get("capabilities", [])]
            + [_skill_holding(r) for r in profile.get("skills", [])]
        )

    async def load_heatmap_rows(self, company_ids: Sequence[str], group_by: GroupBy) -> list[HeatmapRow]:
        wanted = set(company_ids)
        rows = []
        for row in self._heatmap:
            if row.get("company_id") not in wanted or not row.get(group_by.value):
                continue
            rows.append(HeatmapRow.model_validate({**row, "group": row[group_by.value]}))
        return rows
