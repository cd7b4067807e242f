"""Candidate tables and the most-specific-match resolver.

Resolution rules:
1. A condition matches when every environment it names is declared and true.
2. No match resolves to None; that is not an error.
3. Among matches, the condition naming the most environments wins.
4. Two or more matches tied at the top specificity raise Indecision.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Generic, TypeVar

from hoard_engine.errors import Indecision, InvalidCondition
from hoard_engine.resolver.condition import ConditionKey
from hoard_engine.resolver.exclusivity import ExclusivityConstraints

logger = logging.getLogger("hoard")

T = TypeVar("T")


class CandidateTable(Generic[T]):
    """Mapping of condition key to payload, validated against exclusivity."""

    def __init__(self) -> None:
        self._entries: dict[ConditionKey, T] = {}

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, T],
        exclusivity: ExclusivityConstraints | None = None,
    ) -> CandidateTable[T]:
        """Parse raw ``condition -> payload`` pairs.

        Args:
            raw: Condition-key strings mapped to payloads (usually path templates).
            exclusivity: Groups of mutually exclusive environments.

        Returns:
            The validated table.

        Raises:
            InvalidCondition: A key is malformed, violates an exclusivity group,
                or repeats an earlier condition with a different payload.
        """
        table: CandidateTable[T] = cls()
        for text, payload in raw.items():
            if not isinstance(text, str):
                raise InvalidCondition(str(text), "condition must be a string")
            table.add(ConditionKey.parse(text), payload, exclusivity)
        return table

    def add(
        self,
        key: ConditionKey,
        payload: T,
        exclusivity: ExclusivityConstraints | None = None,
    ) -> None:
        if exclusivity is not None:
            exclusivity.check(key)
        if key in self._entries:
            existing = next(k for k in self._entries if k == key)
            if self._entries[key] != payload:
                raise InvalidCondition(
                    str(key), f"same condition as '{existing}' with a different path"
                )
            return
        self._entries[key] = payload

    def __iter__(self) -> Iterator[ConditionKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def matching(self, env: Mapping[str, bool]) -> list[ConditionKey]:
        """All keys whose environments are true, most specific first.

        Ties are ordered by sorted environment names, never by insertion order.
        """
        matches = [key for key in self._entries if key.matches(env)]
        matches.sort(key=lambda k: (-k.specificity, k.sort_key))
        return matches

    def resolve(self, env: Mapping[str, bool]) -> T | None:
        """Pick the payload of the most specific matching condition.

        Args:
            env: Evaluated environments (name -> applies).

        Returns:
            The winning payload, or None if nothing matched.

        Raises:
            Indecision: Two or more matching conditions share the top specificity.
        """
        matches = self.matching(env)
        if not matches:
            logger.debug("no condition matched among %d candidate(s)", len(self))
            return None

        best = matches[0]
        tied = [k for k in matches if k.specificity == best.specificity]
        if len(tied) > 1:
            raise Indecision(str(tied[0]), str(tied[1]), [str(k) for k in tied])

        logger.debug("condition '%s' won with specificity %d", best, best.specificity)
        return self._entries[best]


def resolve(
    candidates: CandidateTable[T] | Mapping[str, T],
    env: Mapping[str, bool],
    exclusivity: ExclusivityConstraints | None = None,
) -> T | None:
    """Resolve a candidate table, parsing it first if given raw strings."""
    if not isinstance(candidates, CandidateTable):
        candidates = CandidateTable.from_mapping(candidates, exclusivity)
    return candidates.resolve(env)
