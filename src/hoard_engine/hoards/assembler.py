"""Resolve every pile of a hoard against the evaluated environments.

A hoard is either a single anonymous pile:

    fonts:
      linux: ~/.local/share/fonts
      macos: ~/Library/Fonts

or a set of named piles sharing an optional hoard-level config:

    vim:
      config: {hidden: true}
      init:
        linux|neovim: ~/.config/nvim/init.vim
        linux|vim: ~/.vimrc

`config` is reserved and cannot name a pile.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hoard_engine.env_vars import expand_env_in_path
from hoard_engine.errors import ConfigError, ExpandEnvError, ResolutionError
from hoard_engine.hoards.pile_config import PileConfig, parse_pile_config
from hoard_engine.resolver.candidates import CandidateTable
from hoard_engine.resolver.exclusivity import ExclusivityConstraints

logger = logging.getLogger("hoard")

CONFIG_KEY = "config"


@dataclass(frozen=True)
class ResolvedPile:
    """One pile after resolution. ``path`` is None when no condition matched."""

    path: Path | None
    config: PileConfig | None = None

    @property
    def effective_config(self) -> PileConfig:
        return self.config if self.config is not None else PileConfig()

    @property
    def resolved(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class ResolvedHoard:
    """A hoard with either one anonymous pile or several named piles."""

    name: str
    anonymous: ResolvedPile | None = None
    named: dict[str, ResolvedPile] = field(default_factory=dict)

    @property
    def is_anonymous(self) -> bool:
        return self.anonymous is not None

    def piles(self) -> Iterator[tuple[str | None, ResolvedPile]]:
        """Yield ``(pile_name, pile)``; the name is None for an anonymous pile."""
        if self.anonymous is not None:
            yield None, self.anonymous
            return
        for pile_name in sorted(self.named):
            yield pile_name, self.named[pile_name]

    def paths(self) -> dict[str | None, Path | None]:
        return {name: pile.path for name, pile in self.piles()}

    @property
    def unresolved(self) -> list[str | None]:
        return [name for name, pile in self.piles() if pile.path is None]


def _split_config(
    definition: Mapping[str, object], where: str
) -> tuple[PileConfig | None, dict[str, object]]:
    items = {k: v for k, v in definition.items() if k != CONFIG_KEY}
    return parse_pile_config(definition.get(CONFIG_KEY), where), items


def assemble_pile(
    definition: Mapping[str, object],
    env: Mapping[str, bool],
    exclusivity: ExclusivityConstraints | None = None,
    environ: Mapping[str, str] | None = None,
    where: str = "pile",
    home: Path | None = None,
) -> ResolvedPile:
    """Resolve one pile definition.

    Args:
        definition: Condition keys mapped to path templates, plus optional ``config``.
        env: Evaluated environments.
        exclusivity: Exclusivity groups to validate condition keys against.
        environ: Variables for expanding the winning template.
        where: Label used in configuration error messages.
        home: Home directory for a leading ``~``.

    Returns:
        The resolved pile (path None if nothing matched).

    Raises:
        ResolutionError: Invalid condition or indecision.
        ExpandEnvError: The winning template references an unset variable.
    """
    config, items = _split_config(definition, where)
    for key, value in items.items():
        if not isinstance(value, str):
            raise ConfigError(f"{where}: path for condition '{key}' must be a string")

    table = CandidateTable.from_mapping(items, exclusivity)
    template = table.resolve(env)
    if template is None:
        return ResolvedPile(path=None, config=config)
    return ResolvedPile(path=expand_env_in_path(template, environ, home), config=config)


def _is_anonymous(name: str, items: Mapping[str, object]) -> bool:
    for key, value in items.items():
        if not isinstance(value, (str, dict)):
            raise ConfigError(
                f"hoard '{name}': entry '{key}' must be a path or a pile mapping, "
                f"got {type(value).__name__}"
            )
    kinds = {isinstance(v, str) for v in items.values()}
    if len(kinds) > 1:
        raise ConfigError(
            f"hoard '{name}' mixes paths and named piles; use one or the other"
        )
    return kinds != {False}


def assemble_hoard(
    name: str,
    definition: object,
    env: Mapping[str, bool],
    exclusivity: ExclusivityConstraints | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> ResolvedHoard:
    """Resolve all piles of a hoard.

    The first failing pile aborts the whole hoard; resolution errors are
    annotated with the hoard and pile names before propagating.

    Args:
        name: Hoard name.
        definition: Raw hoard mapping from the configuration file.
        env: Evaluated environments.
        exclusivity: Exclusivity groups.
        environ: Variables for expanding winning path templates.
        home: Home directory for a leading ``~``.

    Returns:
        ResolvedHoard with anonymous or named piles.
    """
    if not isinstance(definition, dict):
        raise ConfigError(f"hoard '{name}' must be a mapping")

    hoard_config, items = _split_config(definition, f"hoard '{name}'")

    if _is_anonymous(name, items):
        logger.debug("processing anonymous pile of hoard %s", name)
        try:
            pile = assemble_pile(definition, env, exclusivity, environ, f"hoard '{name}'", home)
        except (ResolutionError, ExpandEnvError) as e:
            raise e.locate(name)
        if pile.path is None:
            logger.warning("hoard %s: no environment matched, skipping", name)
        return ResolvedHoard(name=name, anonymous=pile)

    logger.debug("processing %d named pile(s) of hoard %s", len(items), name)
    piles: dict[str, ResolvedPile] = {}
    for pile_name in sorted(items):
        where = f"hoard '{name}', pile '{pile_name}'"
        try:
            pile = assemble_pile(items[pile_name], env, exclusivity, environ, where, home)
        except (ResolutionError, ExpandEnvError) as e:
            raise e.locate(name, pile_name)
        if pile.config is None and hoard_config is not None:
            pile = ResolvedPile(path=pile.path, config=hoard_config)
        if pile.path is None:
            logger.warning("hoard %s, pile %s: no environment matched, skipping", name, pile_name)
        piles[pile_name] = pile
    return ResolvedHoard(name=name, named=piles)
