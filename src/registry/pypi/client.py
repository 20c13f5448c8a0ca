"""PyPI JSON API client: release listings and per-release requirements."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from errors import PackageNotFound, ProviderError

logger = logging.getLogger(__name__)


def _base_url(url: Optional[str]) -> str:
    base = url or Constants.REGISTRY_URL_PYPI
    return base if base.endswith("/") else base + "/"


def _fetch(fullurl: str, package: str, version: Optional[str] = None) -> Dict[str, Any]:
    """GET a PyPI JSON document, mapping failures onto the provider errors."""
    with Timer() as timer:
        status, _, data = get_json(fullurl)

    if status == 404:
        logger.debug(
            "HTTP 404 received",
            extra=extra_context(
                event="http_response",
                outcome="not_found",
                status_code=404,
                target=safe_url(fullurl),
                package_manager="pypi"
            )
        )
        raise PackageNotFound(package, "not found on registry", version)
    if status == 0:
        raise ProviderError(package, "registry unreachable", version)
    if status != 200:
        logger.warning(
            "HTTP non-2xx handled",
            extra=extra_context(
                event="http_response",
                outcome="handled_non_2xx",
                status_code=status,
                duration_ms=timer.duration_ms(),
                target=safe_url(fullurl),
                package_manager="pypi"
            )
        )
        raise ProviderError(package, f"unexpected HTTP status {status}", version)
    if not isinstance(data, dict):
        raise ProviderError(package, "malformed JSON response", version)

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response ok",
            extra=extra_context(
                event="http_response",
                outcome="success",
                status_code=status,
                duration_ms=timer.duration_ms(),
                package_manager="pypi"
            )
        )
    return data


def _is_yanked(files: Any) -> bool:
    """A release counts as yanked when it has files and every one is yanked."""
    if not isinstance(files, list) or not files:
        return False
    return all(isinstance(f, dict) and f.get("yanked", False) for f in files)


def fetch_release_versions(name: str, url: Optional[str] = None, include_yanked: bool = False) -> List[str]:
    """Return the raw version strings PyPI lists for a project.

    Args:
        name: Project name (any normalization).
        url: Registry base URL; defaults to Constants.REGISTRY_URL_PYPI.
        include_yanked: Keep releases whose files are all yanked.

    Raises:
        PackageNotFound: the registry does not know the project.
        ProviderError: transport failure or malformed response.
    """
    fullurl = f"{_base_url(url)}{quote(name)}/json"
    data = _fetch(fullurl, name)
    releases = data.get("releases") or {}
    if not isinstance(releases, dict):
        raise ProviderError(name, "malformed 'releases' in response")
    if include_yanked:
        return list(releases)
    return [version for version, files in releases.items() if not _is_yanked(files)]


def fetch_requires_dist(name: str, version: str, url: Optional[str] = None) -> List[str]:
    """Return the raw ``Requires-Dist`` strings of one release.

    A release without metadata (``requires_dist: null``) has no requirements.

    Raises:
        PackageNotFound: the registry does not know the project or release.
        ProviderError: transport failure or malformed response.
    """
    fullurl = f"{_base_url(url)}{quote(name)}/{quote(version)}/json"
    data = _fetch(fullurl, name, version)
    info = data.get("info") or {}
    requires = info.get("requires_dist") or []
    if not isinstance(requires, list):
        raise ProviderError(name, "malformed 'requires_dist' in response", version)
    return [str(r) for r in requires]
