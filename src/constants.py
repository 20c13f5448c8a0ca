"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_FAILURE = 3
    INPUT_ERROR = 4
    TIMEOUT = 5


class OutputFormats(Enum):
    """Output formats supported by the CLI.

    Args:
        Enum (string): Output formats supported by the CLI.
    """

    JSON = "json"
    TEXT = "text"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_PYPI = "https://pypi.org/pypi/"
    REQUIREMENTS_FILE = "requirements.txt"
    DEFAULT_ROOT_NAME = "root"
    DEFAULT_ROOT_VERSION = "0.0.0"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "DEPSOLVER_LOG_LEVEL"
    ENV_CONFIG = "DEPSOLVER_CONFIG"
    CONFIG_FILE = "depsolver.yml"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    CACHE_TTL_SEC = 600
    RESOLUTION_TIMEOUT_SEC: Optional[float] = None
    USER_AGENT = "depsolver/0.1"


# YAML keys mapped to the Constants attribute they override and its coercion.
_CONFIG_KEYS = {
    "registry_url": ("REGISTRY_URL_PYPI", str),
    "request_timeout": ("REQUEST_TIMEOUT", int),
    "http_retry_max": ("HTTP_RETRY_MAX", int),
    "http_retry_base_delay": ("HTTP_RETRY_BASE_DELAY_SEC", float),
    "cache_ttl_sec": ("CACHE_TTL_SEC", int),
    "resolution_timeout": ("RESOLUTION_TIMEOUT_SEC", float),
}


def _default_config_paths():
    """Return candidate config file locations in priority order."""
    paths = []
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        paths.append(env_path)
    paths.append(os.path.join(os.getcwd(), Constants.CONFIG_FILE))
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    paths.append(os.path.join(xdg, "depsolver", Constants.CONFIG_FILE))
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first readable YAML config file.

    Args:
        path: Explicit path; when omitted the default locations are searched.

    Returns:
        Parsed mapping, or an empty dict when no config file exists.
    """
    candidates = [path] if path else _default_config_paths()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", candidate, exc)
            continue
        if isinstance(data, dict):
            logger.debug("Loaded config from %s", candidate)
            return data
        logger.warning("Ignoring config %s: top level is not a mapping", candidate)
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply known configuration keys onto Constants.

    Unknown keys are ignored; values that cannot be coerced are logged and skipped.
    """
    for key, (attr, cast) in _CONFIG_KEYS.items():
        if key not in cfg or cfg[key] is None:
            continue
        try:
            setattr(Constants, attr, cast(cfg[key]))
        except (TypeError, ValueError):
            logger.warning("Invalid value for config key '%s': %r", key, cfg[key])
