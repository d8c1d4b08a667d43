from __future__ import annotations

import asyncio

from scoring.batch import render_batch_markdown, score_batch
from scoring.fit_scorer import compute_fit
from services.requirement_loader import DataNotFoundError


def _run(loader, profile_id: str, role_ids: list[str], timeout: float = 1.0):
    async def go():
        holdings = await loader.load_profile_holdings(profile_id)
        return await score_batch(
            subject_id=profile_id,
            subject_kind="profile",
            candidate_ids=role_ids,
            load=loader.load_role_requirements,
            score=lambda requirements: compute_fit(holdings, requirements),
            timeout=timeout,
        )
    return asyncio.run(go())


def test_empty_batch_is_an_empty_success(loader):
    result = _run(loader, "p-sam", [])
    assert result.scores == {}
    assert result.ranking == []
    assert result.failures == {}


def test_failed_candidate_is_left_out(loader):
    result = _run(loader, "p-sam", ["r-analyst", "r-unknown", "r-empty"])

    assert set(result.scores) == {"r-analyst", "r-empty"}
    assert result.failures == {"r-unknown": "Role r-unknown not found"}
    assert [r.candidate_id for r in result.ranking] == ["r-analyst", "r-empty"]


def test_scores_keyed_in_input_order_with_duplicates_collapsed(loader):
    result = _run(loader, "p-sam", ["r-empty", "r-analyst", "r-empty"])
    assert list(result.scores) == ["r-empty", "r-analyst"]


def test_slow_candidate_times_out_without_failing_the_batch(loader):
    class SlowRoles:
        async def load_role_requirements(self, role_id):
            if role_id == "r-slow":
                await asyncio.sleep(5)
            return await loader.load_role_requirements(role_id)

    slow = SlowRoles()

    async def go():
        holdings = await loader.load_profile_holdings("p-sam")
        return await score_batch(
            "p-sam", "profile", ["r-slow", "r-analyst"],
            load=slow.load_role_requirements,
            score=lambda requirements: compute_fit(holdings, requirements),
            timeout=0.05,
        )

    result = asyncio.run(go())
    assert list(result.scores) == ["r-analyst"]
    assert "Timed out" in result.failures["r-slow"]


def test_results_follow_input_order_not_completion_order(loader):
    delays = {"r-analyst": 0.1, "r-empty": 0.0, "r-analyst-copy": 0.0}

    class UnevenRoles:
        async def load_role_requirements(self, role_id):
            await asyncio.sleep(delays[role_id])
            return await loader.load_role_requirements(role_id.removesuffix("-copy"))

    async def go():
        holdings = await loader.load_profile_holdings("p-sam")
        return await score_batch(
            "p-sam", "profile", ["r-analyst", "r-empty", "r-analyst-copy"],
            load=UnevenRoles().load_role_requirements,
            score=lambda requirements: compute_fit(holdings, requirements),
            timeout=1.0,
        )

    result = asyncio.run(go())
    assert list(result.scores) == ["r-analyst", "r-empty", "r-analyst-copy"]
    # r-analyst finishes last but still ranks ahead of its equal-scoring copy.
    assert [r.candidate_id for r in result.ranking] == ["r-analyst", "r-analyst-copy", "r-empty"]


def test_scoring_error_is_a_candidate_failure(loader):
    def explode(requirements):
        raise DataNotFoundError("Capability", "c-x")

    async def go():
        return await score_batch("p-sam", "profile", ["r-analyst"], loader.load_role_requirements, explode, 1.0)

    result = asyncio.run(go())
    assert result.scores == {}
    assert result.failures == {"r-analyst": "Capability c-x not found"}


def test_markdown_reports_top_matches_and_failures(loader):
    result = _run(loader, "p-sam", ["r-analyst", "r-unknown"])
    text = render_batch_markdown(result, top_n=5)

    assert text.startswith("### 📊 Role-Profile Fit Analysis")
    assert "**Profile**: p-sam" in text
    assert "**Could Not Be Scored**: 1" in text
    assert "1. **Role r-analyst** (80.0% Overall Fit)" in text
    assert "- Average Overall Fit: 80.0%" in text


def test_markdown_for_empty_batch(loader):
    text = render_batch_markdown(_run(loader, "p-sam", []))
    assert "No roles could be scored." in text
    assert "Summary" not in text
