"""Environment fact variants and parsing of `envs:` definitions.

An environment definition is a mapping whose keys are AND-ed together:

    neovim:
      exe_exists: [nvim, nvim-qt]      # any of these on PATH
    unix:
      os: [linux, macos, freebsd]      # any of these OSes
      env:
        - var: HOME                    # all of these variables set
    itch:
      path_exists:
        - [~/.itch, ~/.local/share/applications/io.itch.itch.desktop]
    steam_any:
      any_of: [steam, steam_flatpak]   # OR over named environments
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from hoard_engine.errors import ConfigError


@dataclass(frozen=True)
class OsIs:
    name: str


@dataclass(frozen=True)
class HostnameIs:
    name: str


@dataclass(frozen=True)
class EnvVarSet:
    """Variable is set, and equal to ``expected`` when one is given."""

    var: str
    expected: str | None = None


@dataclass(frozen=True)
class ExeExists:
    name: str


@dataclass(frozen=True)
class PathExists:
    path: str


@dataclass(frozen=True)
class Ref:
    """Reference to another named environment."""

    name: str


@dataclass(frozen=True)
class AnyOf:
    facts: tuple[Fact, ...]


@dataclass(frozen=True)
class AllOf:
    facts: tuple[Fact, ...]


Fact = Union[OsIs, HostnameIs, EnvVarSet, ExeExists, PathExists, Ref, AnyOf, AllOf]
FACT_TYPES = (OsIs, HostnameIs, EnvVarSet, ExeExists, PathExists, Ref, AnyOf, AllOf)

DEFINITION_KEYS = ("os", "hostname", "exe_exists", "path_exists", "env", "any_of", "all_of")


def _as_list(name: str, key: str, value: object) -> list:
    if isinstance(value, (str, dict)):
        return [value]
    if isinstance(value, list):
        return value
    raise ConfigError(f"environment '{name}': '{key}' must be a string or a list")


def _require_str(name: str, key: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"environment '{name}': '{key}' entries must be non-empty strings")
    return value


def _parse_env_entry(name: str, entry: object) -> EnvVarSet:
    if isinstance(entry, str):
        return EnvVarSet(_require_str(name, "env", entry))
    if not isinstance(entry, dict) or "var" not in entry:
        raise ConfigError(f"environment '{name}': 'env' entries need a 'var' field")
    unknown = set(entry) - {"var", "expected"}
    if unknown:
        raise ConfigError(
            f"environment '{name}': unknown 'env' fields: {', '.join(sorted(unknown))}"
        )
    expected = entry.get("expected")
    if expected is not None and not isinstance(expected, str):
        expected = str(expected)
    return EnvVarSet(_require_str(name, "env", entry["var"]), expected)


def _parse_path_entry(name: str, entry: object) -> Fact:
    if isinstance(entry, list):
        return AllOf(tuple(PathExists(_require_str(name, "path_exists", p)) for p in entry))
    return PathExists(_require_str(name, "path_exists", entry))


def parse_environment(name: str, definition: object) -> Fact:
    """Turn one `envs:` entry into a fact tree.

    Args:
        name: Environment name, used in error messages.
        definition: The raw mapping from the configuration file.

    Returns:
        An AllOf over one group per present key (or the single group itself).

    Raises:
        ConfigError: Unknown keys or malformed values.
    """
    if definition is None:
        definition = {}
    if not isinstance(definition, dict):
        raise ConfigError(f"environment '{name}' must be a mapping")

    unknown = set(definition) - set(DEFINITION_KEYS)
    if unknown:
        raise ConfigError(
            f"environment '{name}': unknown condition(s): {', '.join(sorted(unknown))}"
        )

    groups: list[Fact] = []
    for key in DEFINITION_KEYS:
        if key not in definition:
            continue
        items = _as_list(name, key, definition[key])
        if key == "os":
            groups.append(AnyOf(tuple(OsIs(_require_str(name, key, i)) for i in items)))
        elif key == "hostname":
            groups.append(AnyOf(tuple(HostnameIs(_require_str(name, key, i)) for i in items)))
        elif key == "exe_exists":
            groups.append(AnyOf(tuple(ExeExists(_require_str(name, key, i)) for i in items)))
        elif key == "path_exists":
            groups.append(AnyOf(tuple(_parse_path_entry(name, i) for i in items)))
        elif key == "env":
            groups.append(AllOf(tuple(_parse_env_entry(name, i) for i in items)))
        elif key == "any_of":
            groups.append(AnyOf(tuple(Ref(_require_str(name, key, i)) for i in items)))
        elif key == "all_of":
            groups.append(AllOf(tuple(Ref(_require_str(name, key, i)) for i in items)))

    if len(groups) == 1:
        return groups[0]
    return AllOf(tuple(groups))


def references(fact: Fact) -> list[str]:
    """Names of other environments a fact depends on, in declaration order."""
    if isinstance(fact, Ref):
        return [fact.name]
    if isinstance(fact, (AnyOf, AllOf)):
        names: list[str] = []
        for child in fact.facts:
            names.extend(references(child))
        return names
    return []


def describe(fact: Fact) -> str:
    """Short human-readable rendering of a fact tree."""
    if isinstance(fact, OsIs):
        return f"os={fact.name}"
    if isinstance(fact, HostnameIs):
        return f"hostname={fact.name}"
    if isinstance(fact, EnvVarSet):
        if fact.expected is None:
            return f"${fact.var}"
        return f"${fact.var}=={fact.expected!r}"
    if isinstance(fact, ExeExists):
        return f"exe({fact.name})"
    if isinstance(fact, PathExists):
        return f"path({fact.path})"
    if isinstance(fact, Ref):
        return fact.name
    joiner = " or " if isinstance(fact, AnyOf) else " and "
    if not fact.facts:
        return "false" if isinstance(fact, AnyOf) else "true"
    return "(" + joiner.join(describe(f) for f in fact.facts) + ")"
