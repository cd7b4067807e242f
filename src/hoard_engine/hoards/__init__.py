"""Hoards module: assemble resolved piles and their walker/encryption config."""

from hoard_engine.hoards.assembler import ResolvedHoard, ResolvedPile, assemble_hoard, assemble_pile
from hoard_engine.hoards.pile_config import (
    AsymmetricEncryption,
    PileConfig,
    SymmetricEncryption,
    Walker,
    parse_pile_config,
)

__all__ = [
    "ResolvedHoard",
    "ResolvedPile",
    "assemble_hoard",
    "assemble_pile",
    "AsymmetricEncryption",
    "PileConfig",
    "SymmetricEncryption",
    "Walker",
    "parse_pile_config",
]
