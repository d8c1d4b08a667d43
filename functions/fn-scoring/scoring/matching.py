"""Requirement-to-holding lookup shared by every scoring component."""

from __future__ import annotations

from typing import Iterable, Optional

from scoring.schemas import HoldingRecord, RequirementRecord


def _name_key(name: str) -> str:
    return name.strip().lower()


class HoldingIndex:
    """Looks up a profile's holding for a requirement.

    Matches on (kind, id) first and falls back to a case-insensitive name
    match within the same kind. The first record wins on duplicates.
    """

    def __init__(self, holdings: Iterable[HoldingRecord]) -> None:
        self._by_id: dict[tuple[str, str], HoldingRecord] = {}
        self._by_name: dict[tuple[str, str], HoldingRecord] = {}
        for holding in holdings:
            self._by_id.setdefault((holding.kind, holding.id), holding)
            self._by_name.setdefault((holding.kind, _name_key(holding.name)), holding)

    def find(self, requirement: RequirementRecord) -> Optional[HoldingRecord]:
        found = self._by_id.get((requirement.kind, requirement.id))
        if found is None:
            found = self._by_name.get((requirement.kind, _name_key(requirement.name)))
        return found

    def held_level(self, requirement: RequirementRecord) -> Optional[int]:
        """Held level for *requirement*, or None when it is not held.

        A holding whose level normalized to 0 (unrecognized label) counts as
        not held.
        """
        holding = self.find(requirement)
        if holding is None or not holding.held_level:
            return None
        return holding.held_level
