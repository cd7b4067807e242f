"""Resolver module: pick the most specific candidate path for the current environment."""

from hoard_engine.resolver.candidates import CandidateTable, resolve
from hoard_engine.resolver.condition import ConditionKey
from hoard_engine.resolver.exclusivity import ExclusivityConstraints

__all__ = [
    "CandidateTable",
    "resolve",
    "ConditionKey",
    "ExclusivityConstraints",
]
