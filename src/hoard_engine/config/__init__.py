"""Config module: load configuration files and build a resolved Config."""

from hoard_engine.config.builder import Builder, Config, GlobalConfig
from hoard_engine.config.loader import load_config_file

__all__ = ["Builder", "Config", "GlobalConfig", "load_config_file"]
