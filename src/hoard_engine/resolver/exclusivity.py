"""Exclusivity groups: environment names that may not share a condition."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from hoard_engine.errors import ConfigError, InvalidCondition
from hoard_engine.resolver.condition import ConditionKey

logger = logging.getLogger("hoard")


class ExclusivityConstraints:
    """Collection of mutually exclusive environment groups.

    A condition naming two or more members of the same group is invalid,
    whatever those environments evaluate to.
    """

    def __init__(self, groups: Iterable[Iterable[str]] | None = None) -> None:
        self.groups: tuple[tuple[str, ...], ...] = tuple(
            tuple(group) for group in (groups or [])
        )

    @classmethod
    def from_config(
        cls,
        raw: object,
        declared: Iterable[str] | None = None,
    ) -> ExclusivityConstraints:
        """Build from the `exclusivity:` list of lists.

        Args:
            raw: The parsed configuration value (``None`` means no groups).
            declared: Declared environment names; unknown group members are
                logged as a warning.

        Raises:
            ConfigError: The value is not a list of lists of strings.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, list):
            raise ConfigError("'exclusivity' must be a list of lists of environment names")
        groups: list[list[str]] = []
        for group in raw:
            if not isinstance(group, list) or not all(isinstance(n, str) for n in group):
                raise ConfigError(
                    f"exclusivity group {group!r} must be a list of environment names"
                )
            groups.append(group)

        constraints = cls(groups)
        if declared is not None:
            unknown = sorted(constraints.names - set(declared))
            if unknown:
                logger.warning(
                    "exclusivity groups name undeclared environment(s): %s", ", ".join(unknown)
                )
        return constraints

    @property
    def names(self) -> set[str]:
        return {name for group in self.groups for name in group}

    def conflicting_group(self, condition: ConditionKey) -> tuple[str, ...] | None:
        """Return the first group the condition draws two or more names from."""
        for group in self.groups:
            if len(condition.names.intersection(group)) >= 2:
                return group
        return None

    def is_valid(self, condition: ConditionKey) -> bool:
        return self.conflicting_group(condition) is None

    def check(self, condition: ConditionKey) -> None:
        """Raise InvalidCondition if the condition violates a group."""
        group = self.conflicting_group(condition)
        if group is not None:
            overlap = sorted(condition.names.intersection(group))
            raise InvalidCondition(
                str(condition),
                f"{' and '.join(overlap)} are mutually exclusive "
                f"(group: {', '.join(group)})",
            )

    def __len__(self) -> int:
        return len(self.groups)

    def __repr__(self) -> str:
        return f"ExclusivityConstraints({[list(g) for g in self.groups]!r})"
