"""Validate CLI command."""

import argparse

from hoard_engine.errors import HoardError


def cmd_validate(args: argparse.Namespace) -> int:
    from hoard_engine.cli.common import load_config

    try:
        config = load_config(args)
    except FileNotFoundError as e:
        print(f"ERROR: Configuration file not found: {e.filename}")
        return 1
    except HoardError as e:
        print(f"ERROR: {e}")
        return 1

    unresolved = sum(len(hoard.unresolved) for hoard in config.hoards.values())

    print(f"  Config file:  {config.config_file}")
    print(f"  Hoards root:  {config.hoards_root}")
    print(f"  Hoards:       {len(config.hoards)}")
    print(f"  Unresolved:   {unresolved} pile(s)")
    print("\nConfiguration is valid.")
    return 0
