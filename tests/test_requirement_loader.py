from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from services.progress import PostgrestProgressSink, emit_progress
from services.requirement_loader import DataNotFoundError, FixtureLoader, LoaderTimeoutError, PostgrestLoader, bounded
from shared.models import GroupBy

SAMPLE = Path(__file__).resolve().parents[1] / "functions" / "fn-scoring" / "fixtures" / "sample.json"


def test_fixture_loader_normalizes_levels(loader):
    requirements = asyncio.run(loader.load_role_requirements("r-analyst"))
    by_name = {r.name: r for r in requirements}

    assert by_name["Leadership"].required_level == 3
    assert by_name["Leadership"].group_name == "People"
    assert by_name["Python"].kind == "skill"
    assert by_name["Python"].required_level == 2

    holdings = asyncio.run(loader.load_profile_holdings("p-sam"))
    assert {h.name: h.held_level for h in holdings} == {
        "Leadership": 5, "Data Analysis": 4, "Python": 4, "SQL": 2,
    }


def test_fixture_loader_unknown_ids(loader):
    with pytest.raises(DataNotFoundError) as exc:
        asyncio.run(loader.load_profile_holdings("p-ghost"))
    assert str(exc.value) == "Profile p-ghost not found"
    assert exc.value.entity == "Profile"


def test_fixture_loader_heatmap_filters_companies_and_groups(loader):
    rows = asyncio.run(loader.load_heatmap_rows(["co-2"], GroupBy.TAXONOMY))
    assert [(r.group, r.capability, r.role_count) for r in rows] == [("Health", "Leadership", 1)]
    assert asyncio.run(loader.load_heatmap_rows(["co-1"], GroupBy.REGION)) == []


def test_fixture_file_round_trip():
    loader = FixtureLoader.from_file(SAMPLE)
    rows = asyncio.run(loader.load_heatmap_rows(["company-1"], GroupBy.DIVISION))
    assert {r.group for r in rows} == {"Strategy", "Corporate"}
    assert len(asyncio.run(loader.load_role_requirements("role-policy-analyst"))) == 5


def test_missing_fixture_file_starts_empty(tmp_path):
    loader = FixtureLoader.from_file(tmp_path / "absent.json")
    with pytest.raises(DataNotFoundError):
        asyncio.run(loader.load_role_requirements("anything"))


def test_bounded_converts_timeouts():
    async def go():
        await bounded(asyncio.sleep(5), 0.01, "role r1")

    with pytest.raises(LoaderTimeoutError, match="role r1"):
        asyncio.run(go())


def _postgrest(monkeypatch, routes: dict) -> PostgrestLoader:
    seen: list[httpx.Request] = []

    def respond(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        if table == "capability_heatmap":
            return httpx.Response(200, json=routes[table])
        return httpx.Response(200, json=routes.get(table, []))

    loader = PostgrestLoader("http://db.local", api_key="secret", timeout=1.0)

    def client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="http://db.local/rest/v1",
            headers=loader._headers,
            transport=httpx.MockTransport(respond),
        )

    monkeypatch.setattr(loader, "_client", client)
    loader.seen = seen
    return loader


def test_postgrest_loader_reads_role_requirements(monkeypatch):
    loader = _postgrest(monkeypatch, {
        "roles": [{"id": "r1"}],
        "role_capabilities": [
            {"capability_id": "c1", "level": "Advanced",
             "capabilities": {"id": "c1", "name": "Leadership", "group_name": "People"}},
        ],
        "role_skills": [{"skill_id": "s1", "skills": {"id": "s1", "name": "SQL", "category": "Technical"}}],
    })
    requirements = asyncio.run(loader.load_role_requirements("r1"))

    assert [(r.kind, r.name, r.required_level) for r in requirements] == [
        ("capability", "Leadership", 4),
        ("skill", "SQL", 2),
    ]
    assert loader.seen[0].headers["apikey"] == "secret"
    assert loader.seen[0].url.params["id"] == "eq.r1"


def test_postgrest_loader_unknown_profile(monkeypatch):
    loader = _postgrest(monkeypatch, {"profiles": []})
    with pytest.raises(DataNotFoundError):
        asyncio.run(loader.load_profile_holdings("p-ghost"))


def test_postgrest_loader_heatmap_rpc(monkeypatch):
    loader = _postgrest(monkeypatch, {
        "capability_heatmap": [{"region": "North", "capability": "Sales", "role_count": 3, "total_roles": 9}],
    })
    rows = asyncio.run(loader.load_heatmap_rows(["co-1"], GroupBy.REGION))

    assert rows[0].group == "North"
    assert rows[0].total_roles_in_group == 9
    assert json.loads(loader.seen[0].content) == {"company_ids": ["co-1"], "group_by": "region"}


def test_postgrest_progress_sink_posts_chat_message(monkeypatch):
    posted: list[dict] = []
    real_client = httpx.AsyncClient

    def respond(request: httpx.Request) -> httpx.Response:
        posted.append(json.loads(request.content))
        return httpx.Response(201)

    monkeypatch.setattr(
        httpx, "AsyncClient", lambda **kw: real_client(transport=httpx.MockTransport(respond), **kw),
    )
    sink = PostgrestProgressSink("http://db.local")
    asyncio.run(emit_progress(sink, "s1", "done", "gaps_analyzed"))

    assert posted == [{
        "session_id": "s1", "role": "assistant", "content": "done", "metadata": {"phase": "gaps_analyzed"},
    }]


def test_progress_sink_http_error_is_swallowed(monkeypatch):
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx, "AsyncClient",
        lambda **kw: real_client(transport=httpx.MockTransport(lambda r: httpx.Response(503)), **kw),
    )
    asyncio.run(emit_progress(PostgrestProgressSink("http://db.local"), "s1", "done", "error"))


def test_role_title(monkeypatch, loader):
    assert asyncio.run(loader.load_role_title("r-analyst")) == "Policy Analyst"
    with pytest.raises(DataNotFoundError):
        asyncio.run(loader.load_role_title("r-ghost"))

    remote = _postgrest(monkeypatch, {"roles": [{"id": "r1", "title": "Finance Officer"}]})
    assert asyncio.run(remote.load_role_title("r1")) == "Finance Officer"
    assert remote.seen[0].url.params["select"] == "id,title"
