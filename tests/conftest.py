from __future__ import annotations

import pytest

from services.requirement_loader import FixtureLoader

HR_FIXTURE = {
    "roles": {
        "r-analyst": {
            "title": "Policy Analyst",
            "capabilities": [
                {"capability_id": "c-lead", "level": "proficient",
                 "capabilities": {"id": "c-lead", "name": "Leadership", "group_name": "People"}},
                {"capability_id": "c-data", "level": "advanced",
                 "capabilities": {"id": "c-data", "name": "Data Analysis", "group_name": "Analytics"}},
            ],
            "skills": [
                {"skill_id": "s-py", "skills": {"id": "s-py", "name": "Python", "category": "Technical"}},
                {"skill_id": "s-sql", "skills": {"id": "s-sql", "name": "SQL", "category": "Technical"}},
            ],
        },
        "r-empty": {"title": "Placeholder", "capabilities": [], "skills": []},
    },
    "profiles": {
        "p-sam": {
            "name": "Samantha",
            "capabilities": [
                {"capability_id": "c-lead", "level": "expert",
                 "capabilities": {"id": "c-lead", "name": "Leadership", "group_name": "People"}},
                {"capability_id": "c-data", "level": "advanced",
                 "capabilities": {"id": "c-data", "name": "Data Analysis", "group_name": "Analytics"}},
            ],
            "skills": [
                {"skill_id": "s-py", "rating": "advanced",
                 "skills": {"id": "s-py", "name": "Python", "category": "Technical"}},
                {"skill_id": "s-sql", "rating": "intermediate",
                 "skills": {"id": "s-sql", "name": "SQL", "category": "Technical"}},
            ],
        },
        "p-dan": {
            "name": "Daniel",
            "capabilities": [
                {"capability_id": "c-lead", "level": "basic",
                 "capabilities": {"id": "c-lead", "name": "Leadership", "group_name": "People"}},
            ],
            "skills": [],
        },
    },
    "heatmap": [
        {"company_id": "co-1", "taxonomy": "Policy", "capability": "Leadership", "role_count": 3, "total_roles": 10},
        {"company_id": "co-1", "taxonomy": "Finance", "capability": "Budgeting", "role_count": 4, "total_roles": 8},
        {"company_id": "co-1", "taxonomy": "Finance", "capability": "Leadership", "role_count": 2, "total_roles": 8},
        {"company_id": "co-2", "taxonomy": "Health", "capability": "Leadership", "role_count": 1, "total_roles": 5},
    ],
}


@pytest.fixture
def hr_fixture() -> dict:
    return HR_FIXTURE


@pytest.fixture
def loader() -> FixtureLoader:
    return FixtureLoader(HR_FIXTURE)
