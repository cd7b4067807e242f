"""Paths CLI command."""

import argparse

from hoard_engine.errors import HoardError

NO_MATCH = "(no matching environment)"


def cmd_paths(args: argparse.Namespace) -> int:
    from hoard_engine.cli.common import load_config

    try:
        config = load_config(args)
        hoards = config.get_hoards(args.hoards)
    except FileNotFoundError as e:
        print(f"ERROR: Configuration file not found: {e.filename}")
        return 1
    except HoardError as e:
        print(f"ERROR: {e}")
        return 1

    if not hoards:
        print("No hoards are configured.")
        return 0

    for name, hoard in hoards.items():
        print(f"\n  {name}  ->  {config.prefix(name)}")
        for pile_name, pile in hoard.piles():
            path = str(pile.path) if pile.path is not None else NO_MATCH
            label = pile_name if pile_name is not None else "(anonymous)"
            suffix = ""
            if pile.config is not None and pile.config.encryption is not None:
                suffix = f"  [encrypted: {pile.config.encryption.name}]"
            print(f"    {label:<24} {path}{suffix}")
    print()
    return 0
