"""Evaluate declared environments into an immutable EnvironmentTable.

Environments may reference each other through `any_of`/`all_of` in any
declaration order. Each name is evaluated depth-first on first reference and
memoized; a WHITE/GRAY/BLACK colouring detects cycles instead of recursing
forever.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from hoard_engine.env_vars import expand_env_in_path
from hoard_engine.environment.facts import (
    AllOf,
    AnyOf,
    FACT_TYPES,
    EnvVarSet,
    ExeExists,
    Fact,
    HostnameIs,
    OsIs,
    PathExists,
    Ref,
    describe,
    parse_environment,
    references,
)
from hoard_engine.environment.host import HostInfo
from hoard_engine.errors import CyclicDependency, ExpandEnvError, UnknownEnvironment

logger = logging.getLogger("hoard")

WHITE, GRAY, BLACK = 0, 1, 2


class EnvironmentTable(Mapping[str, bool]):
    """Read-only mapping of environment name to whether it applies."""

    def __init__(self, values: Mapping[str, bool] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, name: str) -> bool:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnvironmentTable({dict(self._values)!r})"

    @property
    def active(self) -> list[str]:
        return sorted(name for name, value in self._values.items() if value)


def _path_exists(fact: PathExists, host: HostInfo) -> bool:
    try:
        path = expand_env_in_path(fact.path, host.environ, host.home)
    except ExpandEnvError as e:
        logger.debug("cannot expand %r, treating as missing: %s", fact.path, e)
        return False
    try:
        exists = path.exists()
    except OSError as e:
        logger.debug("cannot stat %s, treating as missing: %s", path, e)
        return False
    logger.debug("path %s exists: %s", path, exists)
    return exists


def evaluate_fact(fact: Fact, host: HostInfo, lookup) -> bool:
    """Evaluate a single fact.

    Args:
        fact: The fact tree to evaluate.
        host: Host snapshot to evaluate against.
        lookup: Callable ``name -> bool`` used for ``Ref`` facts.
    """
    if isinstance(fact, OsIs):
        return host.os_name == fact.name
    if isinstance(fact, HostnameIs):
        return host.hostname == fact.name
    if isinstance(fact, EnvVarSet):
        value = host.environ.get(fact.var)
        if value is None:
            return False
        return fact.expected is None or value == fact.expected
    if isinstance(fact, ExeExists):
        return shutil.which(fact.name, path=host.search_path) is not None
    if isinstance(fact, PathExists):
        return _path_exists(fact, host)
    if isinstance(fact, Ref):
        return lookup(fact.name)
    if isinstance(fact, AnyOf):
        return any(evaluate_fact(f, host, lookup) for f in fact.facts)
    if isinstance(fact, AllOf):
        return all(evaluate_fact(f, host, lookup) for f in fact.facts)
    raise TypeError(f"not an environment fact: {fact!r}")


class EnvironmentEvaluator:
    """Depth-first, memoizing evaluation of a set of named facts."""

    def __init__(self, facts: Mapping[str, Fact], host: HostInfo) -> None:
        self.facts = dict(facts)
        self.host = host
        self._color: dict[str, int] = {name: WHITE for name in self.facts}
        self._values: dict[str, bool] = {}
        self._path: list[str] = []

    def value_of(self, name: str) -> bool:
        if name not in self.facts:
            raise UnknownEnvironment(name, self._path[-1] if self._path else None)

        color = self._color[name]
        if color == BLACK:
            return self._values[name]
        if color == GRAY:
            start = self._path.index(name)
            raise CyclicDependency(self._path[start:] + [name])

        self._color[name] = GRAY
        self._path.append(name)
        try:
            value = evaluate_fact(self.facts[name], self.host, self.value_of)
        finally:
            self._path.pop()
        self._values[name] = value
        self._color[name] = BLACK
        logger.debug("environment %s = %s (%s)", name, value, describe(self.facts[name]))
        return value

    def check_references(self) -> None:
        """Raise on unknown or cyclic references anywhere in the graph.

        Covers branches that short-circuit evaluation would skip.
        """
        color: dict[str, int] = {name: WHITE for name in self.facts}

        def dfs(node: str, path: list[str]) -> None:
            color[node] = GRAY
            path.append(node)
            for neighbor in references(self.facts[node]):
                if neighbor not in self.facts:
                    raise UnknownEnvironment(neighbor, node)
                if color[neighbor] == GRAY:
                    cycle_start = path.index(neighbor)
                    raise CyclicDependency(path[cycle_start:] + [neighbor])
                if color[neighbor] == WHITE:
                    dfs(neighbor, path)
            path.pop()
            color[node] = BLACK

        for name in sorted(self.facts):
            if color[name] == WHITE:
                dfs(name, [])

    def evaluate_all(self) -> EnvironmentTable:
        self.check_references()
        for name in sorted(self.facts):
            self.value_of(name)
        return EnvironmentTable(self._values)


def evaluate_environments(
    definitions: Mapping[str, object] | None,
    host: HostInfo | None = None,
) -> EnvironmentTable:
    """Evaluate every `envs:` definition once.

    Args:
        definitions: Mapping of environment name to raw definition, or to an
            already-parsed fact.
        host: Host snapshot. Defaults to ``HostInfo.current()``.

    Returns:
        The frozen EnvironmentTable.

    Raises:
        ConfigError: A definition is malformed.
        UnknownEnvironment: A definition references an undeclared name.
        CyclicDependency: Definitions reference each other in a loop.
    """
    host = host or HostInfo.current()
    facts: dict[str, Fact] = {}
    for name, definition in (definitions or {}).items():
        if isinstance(definition, FACT_TYPES):
            facts[name] = definition
        else:
            facts[name] = parse_environment(name, definition)
    return EnvironmentEvaluator(facts, host).evaluate_all()
