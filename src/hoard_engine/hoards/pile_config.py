"""Per-hoard and per-pile configuration handed to the backup walker.

Config syntax (all keys optional):

    config:
      follow_links: false
      hidden: false
      max_depth: 2
      exclude: ["*.log"]
      pattern: "*"
      regex: false
      case_sensitive: false
      encryption:
        encrypt: symmetric        # or: asymmetric
        encrypt_pass: hunter2     # or encrypt_pass_cmd: [pass, show, hoard]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from hoard_engine.errors import ConfigError

WALKER_KEYS = {"follow_links", "hidden", "max_depth", "exclude", "pattern", "regex", "case_sensitive"}


@dataclass(frozen=True)
class SymmetricEncryption:
    """Password encryption; exactly one of password / password_cmd is set."""

    password: str | None = None
    password_cmd: tuple[str, ...] | None = None

    name = "symmetric"


@dataclass(frozen=True)
class AsymmetricEncryption:
    public_key: str | None = None
    armor: bool = True

    name = "asymmetric"


Encryption = Union[SymmetricEncryption, AsymmetricEncryption]


@dataclass(frozen=True)
class Walker:
    follow_links: bool = False
    hidden: bool = False
    max_depth: int | None = None
    exclude: tuple[str, ...] = ()
    pattern: str = "*"
    regex: bool = False
    case_sensitive: bool = False


@dataclass(frozen=True)
class PileConfig:
    encryption: Encryption | None = None
    walker: Walker = field(default_factory=Walker)


def _bool(where: str, key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: '{key}' must be true or false")
    return value


def parse_encryption(raw: object, where: str = "config") -> Encryption:
    """Parse an ``encryption:`` mapping into its tagged variant.

    Raises:
        ConfigError: Unknown ``encrypt`` kind or malformed fields.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: 'encryption' must be a mapping")
    kind = raw.get("encrypt")

    if kind == "symmetric":
        unknown = set(raw) - {"encrypt", "encrypt_pass", "encrypt_pass_cmd"}
        if unknown:
            raise ConfigError(f"{where}: unknown encryption field(s): {', '.join(sorted(unknown))}")
        has_pass = "encrypt_pass" in raw
        has_cmd = "encrypt_pass_cmd" in raw
        if has_pass == has_cmd:
            raise ConfigError(
                f"{where}: symmetric encryption needs exactly one of "
                "'encrypt_pass' or 'encrypt_pass_cmd'"
            )
        if has_pass:
            return SymmetricEncryption(password=str(raw["encrypt_pass"]))
        cmd = raw["encrypt_pass_cmd"]
        if isinstance(cmd, str):
            cmd = [cmd]
        if not isinstance(cmd, list) or not cmd or not all(isinstance(c, str) for c in cmd):
            raise ConfigError(f"{where}: 'encrypt_pass_cmd' must be a non-empty list of strings")
        return SymmetricEncryption(password_cmd=tuple(cmd))

    if kind == "asymmetric":
        unknown = set(raw) - {"encrypt", "encrypt_pub_key", "encrypt_armor"}
        if unknown:
            raise ConfigError(f"{where}: unknown encryption field(s): {', '.join(sorted(unknown))}")
        key = raw.get("encrypt_pub_key")
        armor = _bool(where, "encrypt_armor", raw.get("encrypt_armor", True))
        return AsymmetricEncryption(public_key=None if key is None else str(key), armor=armor)

    raise ConfigError(f"{where}: 'encrypt' must be 'symmetric' or 'asymmetric', got {kind!r}")


def parse_walker(raw: dict, where: str = "config") -> Walker:
    values: dict[str, object] = {}
    for key in ("follow_links", "hidden", "regex", "case_sensitive"):
        if key in raw:
            values[key] = _bool(where, key, raw[key])

    if raw.get("max_depth") is not None:
        depth = raw["max_depth"]
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ConfigError(f"{where}: 'max_depth' must be a non-negative integer")
        values["max_depth"] = depth

    if "exclude" in raw:
        exclude = raw["exclude"]
        if isinstance(exclude, str):
            exclude = [exclude]
        if not isinstance(exclude, list) or not all(isinstance(e, str) for e in exclude):
            raise ConfigError(f"{where}: 'exclude' must be a list of patterns")
        values["exclude"] = tuple(exclude)

    if "pattern" in raw:
        if not isinstance(raw["pattern"], str):
            raise ConfigError(f"{where}: 'pattern' must be a string")
        values["pattern"] = raw["pattern"]

    return Walker(**values)


def parse_pile_config(raw: object, where: str = "config") -> PileConfig | None:
    """Parse a ``config:`` mapping. ``None`` stays ``None`` so callers can inherit.

    Raises:
        ConfigError: Unknown keys or malformed values.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: 'config' must be a mapping")
    unknown = set(raw) - WALKER_KEYS - {"encryption"}
    if unknown:
        raise ConfigError(f"{where}: unknown config key(s): {', '.join(sorted(unknown))}")

    encryption = None
    if raw.get("encryption") is not None:
        encryption = parse_encryption(raw["encryption"], where)
    return PileConfig(encryption=encryption, walker=parse_walker(raw, where))
