"""Read hoard configuration files (YAML, JSON or TOML)."""

import json
import logging
import tomllib
from pathlib import Path

import yaml

from hoard_engine.errors import ConfigError

logger = logging.getLogger("hoard")

YAML_SUFFIXES = {".yaml", ".yml"}


def load_config_file(path: Path | str) -> dict:
    """Load a configuration file, choosing the parser by extension.

    ``.yaml``/``.yml`` are read as YAML, ``.json`` as JSON and anything else
    as TOML.

    Args:
        path: Path to the configuration file.

    Returns:
        Parsed configuration dict (empty for an empty YAML file).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    config_path = Path(path)
    suffix = config_path.suffix.lower()
    logger.debug("reading configuration from %s", config_path)

    with open(config_path, "rb") as f:
        raw = f.read()

    try:
        if suffix in YAML_SUFFIXES:
            data = yaml.safe_load(raw.decode("utf-8"))
        elif suffix == ".json":
            data = json.loads(raw.decode("utf-8"))
        else:
            data = tomllib.loads(raw.decode("utf-8"))
    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to parse {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"configuration at {config_path} is not a mapping")
    return data
