"""Exception hierarchy for hoard-engine.

Every error raised by the library derives from HoardError so callers can
report configuration problems uniformly. Errors raised while assembling a
hoard carry the hoard and pile they occurred in.
"""

from __future__ import annotations


class HoardError(Exception):
    """Base class for all hoard-engine errors."""

    hoard: str | None = None
    pile: str | None = None

    def locate(self, hoard: str | None, pile: str | None = None) -> HoardError:
        """Record where the error happened and return self for re-raising."""
        if self.hoard is None:
            self.hoard = hoard
        if self.pile is None:
            self.pile = pile
        return self

    @property
    def location(self) -> str:
        if self.hoard is None:
            return ""
        if self.pile is None:
            return f"hoard '{self.hoard}'"
        return f"hoard '{self.hoard}', pile '{self.pile}'"

    def __str__(self) -> str:
        msg = super().__str__()
        if self.location:
            return f"{self.location}: {msg}"
        return msg


class ConfigError(HoardError):
    """The configuration file is malformed or uses unknown keys."""


class NoSuchHoard(HoardError):
    """A hoard requested by name is not configured."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"no such hoard is configured: {name}")


class ExpandEnvError(HoardError):
    """An environment variable in a path template is unset and has no default."""

    def __init__(self, var: str, template: str | None = None) -> None:
        self.var = var
        self.template = template
        msg = f"environment variable not present: {var}"
        if template is not None:
            msg += f" (in {template!r})"
        super().__init__(msg)


class ResolutionError(HoardError):
    """Base class for errors raised while deciding which path applies."""


class InvalidCondition(ResolutionError):
    """A condition key is malformed or combines mutually exclusive environments."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"invalid condition '{key}': {reason}")


class UnknownEnvironment(ResolutionError):
    """An environment references a name that was never declared."""

    def __init__(self, name: str, referenced_by: str | None = None) -> None:
        self.name = name
        self.referenced_by = referenced_by
        if referenced_by:
            msg = f"environment '{referenced_by}' references unknown environment '{name}'"
        else:
            msg = f"unknown environment '{name}'"
        super().__init__(msg)


class CyclicDependency(ResolutionError):
    """Evaluating an environment requires evaluating itself."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"cyclic environment definition: {' -> '.join(self.cycle)}")


class Indecision(ResolutionError):
    """Two or more equally specific conditions match the current environment."""

    def __init__(self, left: str, right: str, tied: list[str] | None = None) -> None:
        self.left = left
        self.right = right
        self.tied = list(tied) if tied else [left, right]
        super().__init__(
            f"cannot decide between conditions '{left}' and '{right}' "
            f"(equally specific: {', '.join(self.tied)})"
        )
