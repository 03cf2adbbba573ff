"""Configuration file management utilities.

This module loads and saves the per-directory .filemech.yml file.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..constants import CONFIG_FILE_NAME
from ..schemas.config import FileMechConfig
from .errors import FileOperationError, format_error

_logger = logging.getLogger(__name__)


def load_config(directory: str | os.PathLike) -> FileMechConfig:
    """Load .filemech.yml from a directory.

    A missing, empty, unreadable or invalid file yields the defaults; parse
    and validation failures are logged as warnings.
    """
    config_path = Path(directory) / CONFIG_FILE_NAME
    if not config_path.exists():
        return FileMechConfig()

    try:
        with open(config_path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        _logger.warning(format_error(e, f"load_config({config_path})"))
        return FileMechConfig()

    if not data:
        return FileMechConfig()

    if not isinstance(data, dict):
        _logger.warning("Ignoring %s: top level is not a mapping", config_path)
        return FileMechConfig()

    try:
        return FileMechConfig(**data)
    except ValidationError as e:
        _logger.warning(format_error(e, f"load_config({config_path})"))
        return FileMechConfig()


def save_config(directory: str | os.PathLike, config: FileMechConfig) -> Path:
    """Save configuration to .filemech.yml, returning the written path.

    Raises:
        FileOperationError: If the file cannot be written
    """
    config_path = Path(directory) / CONFIG_FILE_NAME
    data = config.model_dump(mode="json")
    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

            f.write("\n")
            f.write("# " + "=" * 76 + "\n")
            f.write("# Buffer sizes are in bytes; zero or negative means the platform default.\n")
            f.write("# Permissions use the 10-character symbolic form, e.g. -rw-r--r--\n")
            f.write("# default_copy_strategy: io, io_buffered, link, io_then_link, link_then_io\n")
    except OSError as e:
        raise FileOperationError.wrap(e, "save_config", config_path) from e

    return config_path
