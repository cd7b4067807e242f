"""Environment CLI commands."""

import argparse

from hoard_engine.errors import HoardError


def cmd_envs(args: argparse.Namespace) -> int:
    from hoard_engine.cli.common import load_config

    try:
        config = load_config(args)
    except FileNotFoundError as e:
        print(f"ERROR: Configuration file not found: {e.filename}")
        return 1
    except HoardError as e:
        print(f"ERROR: {e}")
        return 1

    envs = config.environments
    if not envs:
        print("No environments are configured.")
        return 0

    width = max(len(name) for name in envs)
    print(f"\n  {'Environment':<{width}}  Applies")
    print(f"  {'─' * (width + 9)}")
    for name in sorted(envs):
        print(f"  {name:<{width}}  {'yes' if envs[name] else 'no'}")

    if config.exclusivity.groups:
        print("\n  Exclusive groups:")
        for group in config.exclusivity.groups:
            print(f"    {', '.join(group)}")

    print(f"\n  {len(envs.active)} of {len(envs)} environment(s) apply")
    return 0
