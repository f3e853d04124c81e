"""Constants used in the project."""

import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    NOT_FOUND = 1
    CONFIG_ERROR = 2
    PACKAGE_ERROR = 3


class ErrorCodes(Enum):
    """Stable ``code`` values carried by resolution errors.

    Args:
        Enum (string): Error codes exposed to callers.
    """

    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    INVALID_BASEDIR = "INVALID_BASEDIR"
    INVALID_OPTIONS = "INVALID_OPTIONS"
    PACKAGE_PATH_NOT_EXPORTED = "ERR_PACKAGE_PATH_NOT_EXPORTED"
    INVALID_PACKAGE_MAIN = "INVALID_PACKAGE_MAIN"
    INCORRECT_PACKAGE_MAIN = "INCORRECT_PACKAGE_MAIN"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PACKAGE_JSON_FILE = "package.json"
    INDEX_NAME = "index"
    DEFAULT_EXTENSIONS = [".js"]
    DEFAULT_CONDITIONS = ["require", "node", "default"]
    DEFAULT_MODULE_DIRECTORIES = ["node_modules"]
    DEFAULT_GLOBAL_DIRS = [".node_modules", ".node_libraries"]
    DEFAULT_NODE_VERSION = "20.11.1"
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    # Environment variables
    ENV_LOG_LEVEL = "NODE_RESOLVE_LOG_LEVEL"
    ENV_CATEGORY = "NODE_RESOLVE_CATEGORY"
    ENV_NODE_VERSION = "NODE_RESOLVE_NODE_VERSION"

    # Config file lookup, first existing wins
    CONFIG_FILE_NAMES = ["noderesolve.yml", "noderesolve.yaml"]
    CONFIG_USER_DIR = os.path.join("~", ".config", "noderesolve")


def _config_candidates():
    """Return default config file locations in precedence order."""
    candidates = [os.path.join(os.getcwd(), name) for name in Constants.CONFIG_FILE_NAMES]
    user_dir = os.path.expanduser(Constants.CONFIG_USER_DIR)
    candidates.extend(os.path.join(user_dir, name) for name in Constants.CONFIG_FILE_NAMES)
    return candidates


def _load_yaml_config(path=None):
    """Load the YAML configuration file.

    Args:
        path (str, optional): Explicit config path. When omitted the default
            locations are searched and the first existing file is used.

    Returns:
        dict: Parsed configuration, empty when no file is found.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    if path and not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}
    paths = [path] if path else _config_candidates()
    for candidate in paths:
        if not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}
