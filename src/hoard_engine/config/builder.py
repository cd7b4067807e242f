"""Build a resolved Config from a configuration file and CLI overrides.

Resolution order:
1. Defaults (HoardDirs: config file, hoards root)
2. Configuration file (envs, exclusivity, hoards, global_config, hoards_root)
3. CLI arguments (--config-file, --hoards-root)
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path

from hoard_engine.config.loader import load_config_file
from hoard_engine.environment.evaluator import EnvironmentTable, evaluate_environments
from hoard_engine.environment.host import HostInfo
from hoard_engine.errors import ConfigError, NoSuchHoard
from hoard_engine.hoards.assembler import ResolvedHoard, assemble_hoard
from hoard_engine.paths import HoardDirs
from hoard_engine.resolver.exclusivity import ExclusivityConstraints

logger = logging.getLogger("hoard")

CONFIG_KEYS = {"envs", "exclusivity", "hoards", "global_config", "hoards_root"}


@dataclass(frozen=True)
class GlobalConfig:
    """Options that apply to every hoard."""

    ignores: tuple[str, ...] | None = None
    public_key: str | None = None

    @classmethod
    def from_dict(cls, raw: object) -> GlobalConfig:
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigError("'global_config' must be a mapping")
        unknown = set(raw) - {"ignores", "public_key"}
        if unknown:
            raise ConfigError(f"unknown global_config key(s): {', '.join(sorted(unknown))}")
        ignores = raw.get("ignores")
        if ignores is not None:
            if not isinstance(ignores, list) or not all(isinstance(i, str) for i in ignores):
                raise ConfigError("'global_config.ignores' must be a list of patterns")
            ignores = tuple(ignores)
        public_key = raw.get("public_key")
        return cls(ignores=ignores, public_key=None if public_key is None else str(public_key))


@dataclass
class Config:
    """A fully resolved configuration. Create one with ``Builder.build``."""

    hoards_root: Path
    config_file: Path
    global_config: GlobalConfig
    environments: EnvironmentTable
    exclusivity: ExclusivityConstraints
    hoards: dict[str, ResolvedHoard]

    def get_hoard(self, name: str) -> ResolvedHoard:
        if name not in self.hoards:
            raise NoSuchHoard(name)
        return self.hoards[name]

    def get_hoards(self, names: list[str] | None = None) -> dict[str, ResolvedHoard]:
        """Return the named hoards, or all of them when *names* is empty."""
        if not names:
            logger.debug("no hoard names provided, acting on all of them")
            return dict(sorted(self.hoards.items()))
        return {name: self.get_hoard(name) for name in names}

    def prefix(self, name: str) -> Path:
        """Return the archive directory for a hoard."""
        return self.hoards_root / name


@dataclass
class Builder:
    """Intermediate, unevaluated configuration."""

    environments: dict[str, object] | None = None
    exclusivity: list[list[str]] | None = None
    hoards: dict[str, object] | None = None
    global_config: dict | None = None
    hoards_root: Path | None = None
    config_file: Path | None = None
    dirs: HoardDirs = field(default_factory=HoardDirs.from_env, repr=False)

    @classmethod
    def from_dict(cls, data: dict, dirs: HoardDirs | None = None) -> Builder:
        """Create a Builder from a parsed configuration mapping.

        Raises:
            ConfigError: Unknown top-level keys or wrongly typed sections.
        """
        unknown = set(data) - CONFIG_KEYS
        if unknown:
            raise ConfigError(f"unknown configuration key(s): {', '.join(sorted(unknown))}")

        for key in ("envs", "hoards", "global_config"):
            if data.get(key) is not None and not isinstance(data[key], dict):
                raise ConfigError(f"'{key}' must be a mapping")

        hoards_root = data.get("hoards_root")
        if hoards_root is not None and not isinstance(hoards_root, str):
            raise ConfigError("'hoards_root' must be a path string")

        builder = cls(
            environments=data.get("envs"),
            exclusivity=data.get("exclusivity"),
            hoards=data.get("hoards"),
            global_config=data.get("global_config"),
            hoards_root=Path(hoards_root).expanduser() if hoards_root else None,
        )
        if dirs is not None:
            builder.dirs = dirs
        return builder

    @classmethod
    def from_file(cls, path: Path | str, dirs: HoardDirs | None = None) -> Builder:
        builder = cls.from_dict(load_config_file(path), dirs)
        builder.config_file = Path(path)
        return builder

    @classmethod
    def from_args(cls, args: argparse.Namespace, dirs: HoardDirs | None = None) -> Builder:
        config_file = getattr(args, "config_file", None)
        hoards_root = getattr(args, "hoards_root", None)
        builder = cls(
            config_file=Path(config_file).expanduser() if config_file else None,
            hoards_root=Path(hoards_root).expanduser() if hoards_root else None,
        )
        if dirs is not None:
            builder.dirs = dirs
        return builder

    @classmethod
    def from_args_then_file(
        cls, args: argparse.Namespace, dirs: HoardDirs | None = None
    ) -> Builder:
        """Read the file named on the CLI (or the default) and layer CLI values over it."""
        from_args = cls.from_args(args, dirs)
        config_file = from_args.config_file or from_args.dirs.config_file
        logger.debug("configuration file is %s", config_file)
        return cls.from_file(config_file, from_args.dirs).layer(from_args)

    def layer(self, other: Builder) -> Builder:
        """Apply the values set in *other* over this builder."""
        if other.hoards_root is not None:
            self.hoards_root = other.hoards_root
        if other.config_file is not None:
            self.config_file = other.config_file
        return self

    def build(self, host: HostInfo | None = None) -> Config:
        """Evaluate environments and resolve every hoard.

        Args:
            host: Host snapshot. Defaults to ``HostInfo.current()``.

        Returns:
            The resolved Config.

        Raises:
            ConfigError: Malformed configuration.
            ResolutionError: Unknown/cyclic environments, invalid conditions
                or indecision in any pile.
            ExpandEnvError: A winning path references an unset variable.
        """
        host = host or HostInfo.current()
        logger.debug("building configuration")

        environments = evaluate_environments(self.environments, host)
        logger.debug("active environments: %s", ", ".join(environments.active) or "(none)")

        exclusivity = ExclusivityConstraints.from_config(self.exclusivity, environments)
        global_config = GlobalConfig.from_dict(self.global_config)

        hoards: dict[str, ResolvedHoard] = {}
        for name in sorted(self.hoards or {}):
            logger.debug("processing hoard %s", name)
            hoards[name] = assemble_hoard(
                name, self.hoards[name], environments, exclusivity, host.environ, host.home
            )

        return Config(
            hoards_root=self.hoards_root or self.dirs.hoards_root,
            config_file=self.config_file or self.dirs.config_file,
            global_config=global_config,
            environments=environments,
            exclusivity=exclusivity,
            hoards=hoards,
        )
