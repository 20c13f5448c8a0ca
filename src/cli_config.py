"""Runtime configuration layering for the CLI.

Precedence, lowest to highest: Constants defaults, YAML config file,
DEPSOLVER_* environment variables, command-line flags.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from constants import Constants, _CONFIG_KEYS, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)

ENV_PREFIX = "DEPSOLVER_"


def env_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect DEPSOLVER_<KEY> overrides for the known config keys."""
    environ = os.environ if environ is None else environ
    cfg: Dict[str, Any] = {}
    for key in _CONFIG_KEYS:
        value = environ.get(ENV_PREFIX + key.upper())
        if value not in (None, ""):
            cfg[key] = value
    return cfg


def apply_cli_overrides(args) -> None:
    """Apply command-line tunables onto Constants (highest precedence)."""
    if getattr(args, "REGISTRY_URL", None):
        Constants.REGISTRY_URL_PYPI = args.REGISTRY_URL
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.RESOLUTION_TIMEOUT_SEC = float(args.TIMEOUT)


def load_runtime_config(args) -> None:
    """Layer YAML, environment and CLI settings onto Constants."""
    apply_config(_load_yaml_config(getattr(args, "CONFIG", None)))
    apply_config(env_config())
    apply_cli_overrides(args)
    logger.debug(
        "Effective configuration: registry=%s timeout=%s retries=%s",
        Constants.REGISTRY_URL_PYPI, Constants.RESOLUTION_TIMEOUT_SEC, Constants.HTTP_RETRY_MAX
    )
