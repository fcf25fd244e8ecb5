"""Configuration module for the MISP client."""

from misp_search.config.factory import create_from_config
from misp_search.config.loader import get_default_config_path, load_config
from misp_search.config.models import MispConfig

__all__ = [
    "MispConfig",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
