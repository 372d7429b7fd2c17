"""Version detection with support for container builds."""

from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version

# Fallback version if nothing else works
_FALLBACK_VERSION = "unknown"


def get_version() -> str:
    """Get the current version string.

    Priority:
    1. BUILD_VERSION environment variable (set during CI/CD)
    2. GIT_BRANCH + GIT_SHA environment variables (Docker build args)
    3. Installed package metadata
    4. Fallback to "unknown"
    """
    build_version = os.environ.get("BUILD_VERSION")
    if build_version:
        return build_version.strip()

    env_branch = os.environ.get("GIT_BRANCH")
    env_sha = os.environ.get("GIT_SHA")
    if env_branch and env_sha:
        return f"{env_branch} ({env_sha})"
    if env_sha:
        return f"dev ({env_sha})"

    try:
        return version("watchlink")
    except PackageNotFoundError:
        return _FALLBACK_VERSION


# Cache the version on module load
__version__ = get_version()
