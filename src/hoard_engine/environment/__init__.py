"""Environment module: named boolean facts about the current machine."""

from hoard_engine.environment.evaluator import (
    EnvironmentEvaluator,
    EnvironmentTable,
    evaluate_environments,
)
from hoard_engine.environment.facts import parse_environment
from hoard_engine.environment.host import HostInfo

__all__ = [
    "EnvironmentEvaluator",
    "EnvironmentTable",
    "evaluate_environments",
    "parse_environment",
    "HostInfo",
]
