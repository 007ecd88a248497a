"""Global configuration for the form-fhir CLI.

Configuration lives in ``$FORM_FHIR_HOME/config.yaml`` (default
``~/.config/form-fhir/config.yaml``). Every key is optional; a missing file
yields the defaults. Command-line flags take precedence over the file.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

CONFIG_FILENAME = "config.yaml"


class GlobalConfig(BaseModel):
    """Settings read from config.yaml."""

    indent: int | None = 2
    validate_output: bool = False


def get_form_fhir_home() -> Path:
    """Return the configuration directory."""
    env_path = os.environ.get("FORM_FHIR_HOME")
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "form-fhir"


def get_config_path() -> Path:
    return get_form_fhir_home() / CONFIG_FILENAME


def load_global_config(path: Path | None = None) -> GlobalConfig:
    """Load the global configuration.

    Args:
        path: Explicit config file. Defaults to :func:`get_config_path`.

    Returns:
        The parsed config, or defaults when the file does not exist.

    Raises:
        ValueError: If the file is not a YAML mapping.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return GlobalConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return GlobalConfig.model_validate(data)
