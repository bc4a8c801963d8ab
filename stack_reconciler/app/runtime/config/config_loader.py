"""Reading and writing config.yaml."""

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic_core import ValidationError

from stack_reconciler.app.runtime.config.config_data import ConfigData
from stack_reconciler.app.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path("config.yaml")
ENVIRONMENT_VAR = "STACK_RECONCILER_ENV"


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Copy ``{ENV}_*`` variables onto their unprefixed names.

    ``PRODUCTION_DATABASE_URL`` becomes ``DATABASE_URL`` when the environment
    is ``production``.

    Returns:
        The unprefixed names that were set
    """
    prefix = f"{env_mode.upper()}_"
    applied = []
    for var_name, value in list(os.environ.items()):
        if var_name.startswith(prefix) and len(var_name) > len(prefix):
            os.environ[var_name[len(prefix) :]] = value
            applied.append(var_name[len(prefix) :])
    return applied


def read_raw_config(file_path: Path = CONFIG_PATH) -> dict[str, Any]:
    """Read config.yaml as-is, placeholders untouched."""
    with open(file_path) as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML: {e}") from e
    return loaded or {}


def load_config(file_path: Path = CONFIG_PATH) -> ConfigData:
    """Load and validate config.yaml.

    Environment overrides are applied first, then ``${VAR}`` placeholders are
    substituted and the ``config:`` section is validated.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a required variable is missing, the YAML is invalid or
            the ``config`` key is absent
    """
    env_mode = os.getenv(ENVIRONMENT_VAR, "development")
    logger.info(f"Loading configuration from {file_path} for environment: {env_mode}")

    applied = apply_environment_overrides(env_mode)
    if applied:
        logger.debug(f"Environment overrides: {applied}")

    with open(file_path) as f:
        content = substitute_env_vars(f.read())

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")
    try:
        config = ConfigData(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    config.app.environment = env_mode
    return config


class _QuotingDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    # Placeholders and digit strings must survive a reload as strings
    if "${" in data or data.isdigit():
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_QuotingDumper.add_representer(str, _represent_str)


def save_config(config: ConfigData | dict[str, Any], file_path: Path = CONFIG_PATH) -> None:
    """Write config atomically through a temporary file next to ``file_path``.

    A ConfigData is written under a ``config`` key; a dict is written as-is.
    """
    document = {"config": config.model_dump()} if isinstance(config, ConfigData) else config
    temp_path = file_path.with_suffix(".tmp")
    with open(temp_path, "w") as f:
        yaml.dump(
            document,
            f,
            Dumper=_QuotingDumper,
            default_flow_style=False,
            sort_keys=False,
            indent=2,
        )
    temp_path.replace(file_path)
