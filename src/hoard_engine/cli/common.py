"""Helpers shared by CLI commands."""

import argparse

from hoard_engine.config.builder import Builder, Config


def load_config(args: argparse.Namespace) -> Config:
    """Read the configuration named by *args* and resolve it for this machine."""
    return Builder.from_args_then_file(args).build()
