"""YAML configuration loading utilities."""

from pathlib import Path

import yaml

from misp_search.config.models import MispConfig


def load_config(path: Path | str) -> MispConfig:
    """Load configuration from a YAML (or JSON) file.

    Args:
        path: Path to the config file.

    Returns:
        Validated MispConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If a required key is missing or invalid.
    """
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f)

    return MispConfig.model_validate(raw)


def get_default_config_path() -> Path:
    """Get path to default config file."""
    return Path(__file__).parent.parent.parent.parent / "configs" / "default.yaml"
