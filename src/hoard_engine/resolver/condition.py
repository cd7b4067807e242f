"""Condition keys: pipe-delimited sets of environment names."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from hoard_engine.errors import InvalidCondition

SEPARATOR = "|"


@dataclass(frozen=True)
class ConditionKey:
    """A set of environment names that must all be true.

    ``linux|fish`` and ``fish|linux`` compare equal. The empty key has no
    requirements and always matches.
    """

    names: frozenset[str]
    text: str = field(default="", compare=False)

    @classmethod
    def parse(cls, raw: str) -> ConditionKey:
        """Parse ``"a|b|c"`` into a key.

        Raises:
            InvalidCondition: A segment is empty (``"a||b"``, ``"a|"``).
        """
        text = raw.strip()
        if not text:
            return cls(frozenset(), raw)
        parts = [p.strip() for p in text.split(SEPARATOR)]
        if any(not p for p in parts):
            raise InvalidCondition(raw, "empty environment name")
        return cls(frozenset(parts), raw)

    @property
    def specificity(self) -> int:
        return len(self.names)

    @property
    def sort_key(self) -> tuple[str, ...]:
        return tuple(sorted(self.names))

    def matches(self, env: Mapping[str, bool]) -> bool:
        """True if every required name is declared and true in *env*."""
        return all(env.get(name, False) for name in self.names)

    def __str__(self) -> str:
        return self.text if self.text else SEPARATOR.join(self.sort_key)
