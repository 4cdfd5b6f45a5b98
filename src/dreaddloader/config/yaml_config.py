"""
YAML configuration handling utilities.

Loads a pipeline configuration from a YAML file or a dictionary and validates
it through the Pydantic models. Relative ``data_path`` entries in a YAML file
are resolved against the file's directory.

Example file::

    data_path: activity_results.csv
    timepoints: [0, 1, 2, 4, 6, 8, 10]
    known_exceptions:
      - {compound_dose: "21_1", subject: "742"}
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import PipelineConfig

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _validation_details(error: ValidationError):
    details = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item['loc'])
        details.append(f"Field '{field_path}': {item['msg']}")
    return details


def _build_config(raw_config: Dict[str, Any], config_path: Optional[Path] = None) -> PipelineConfig:
    try:
        return PipelineConfig(**raw_config)
    except ValidationError as e:
        error_details = _validation_details(e)
        where = f" for {config_path}" if config_path else ""
        detailed_error = f"Pipeline configuration validation failed{where}:\n" + "\n".join(error_details)
        logger.error(detailed_error)
        context: Dict[str, Any] = {"validation_errors": error_details}
        if config_path is not None:
            context["config_path"] = config_path
        raise ConfigError(detailed_error, error_code="CONFIG_003", context=context) from e


def load_config(config_path_or_dict: Union[str, Path, Dict[str, Any]]) -> PipelineConfig:
    """Load and validate a pipeline configuration.

    Args:
        config_path_or_dict: Path to a YAML file, or an already parsed
            dictionary

    Returns:
        PipelineConfig: The validated configuration

    Raises:
        ConfigError: If the file is missing (CONFIG_001), is not valid YAML
            or not a mapping (CONFIG_002), or fails validation (CONFIG_003)
    """
    if isinstance(config_path_or_dict, dict):
        logger.debug("Processing dictionary-based configuration input")
        return _build_config(config_path_or_dict)

    if not isinstance(config_path_or_dict, (str, Path)):
        raise ConfigError(
            f"Invalid input type: {type(config_path_or_dict)}. Expected a string, Path, or dictionary.",
            error_code="CONFIG_003",
        )

    config_path = Path(config_path_or_dict)
    if not config_path.is_file():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            error_code="CONFIG_001",
            context={"config_path": config_path},
        )

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Error parsing YAML configuration {config_path}: {e}",
                error_code="CONFIG_002",
                context={"config_path": config_path},
            ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            f"Configuration in {config_path} must be a mapping, got {type(raw_config).__name__}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        )
    logger.debug(f"Raw YAML configuration loaded from {config_path}")

    data_path = raw_config.get("data_path")
    if data_path is not None and not Path(data_path).is_absolute():
        raw_config = {**raw_config, "data_path": config_path.parent / data_path}

    config = _build_config(raw_config, config_path)
    logger.info(f"Configuration loaded from {config_path}")
    return config
