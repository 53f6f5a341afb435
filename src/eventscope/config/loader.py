"""YAML configuration loading utilities."""

from pathlib import Path

import yaml

from eventscope.config.models import EventscopeConfig


def load_config(path: Path | str) -> EventscopeConfig:
    """Load configuration from YAML file.

    An empty file yields the all-defaults configuration.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated EventscopeConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f)

    return EventscopeConfig.model_validate(raw or {})


def get_default_config_path() -> Path:
    """Get path to default config file."""
    return Path(__file__).parent.parent.parent.parent / "configs" / "default.yaml"
