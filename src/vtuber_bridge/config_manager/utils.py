# config_manager/utils.py
import os
import re
from typing import Any, Dict

import yaml
from loguru import logger
from pydantic import ValidationError

from .main import Config

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def read_yaml(config_path: str) -> Dict[str, Any]:
    """
    Read a YAML configuration file, expanding ``${ENV_VAR}`` references.

    Args:
        config_path: Path to the YAML file.

    Returns:
        The parsed configuration (empty dict for an empty file).

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        content = f.read()

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        value = os.environ.get(name)
        if value is None:
            logger.bind(component="config").warning(
                f"Environment variable {name} referenced in {config_path} is not set"
            )
            return match.group(0)
        return value

    content = _ENV_VAR_RE.sub(_replace, content)
    return yaml.safe_load(content) or {}


def validate_config(config_data: Dict[str, Any]) -> Config:
    """
    Validate configuration data against the Config model.

    Raises:
        ValidationError: If the configuration fails validation.
    """
    try:
        return Config.model_validate(config_data)
    except ValidationError as e:
        logger.bind(component="config").error(f"Error validating configuration: {e}")
        raise
