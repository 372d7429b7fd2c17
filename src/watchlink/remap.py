"""Translate library-reported container paths into host paths."""

from __future__ import annotations

import logging
import posixpath

from .errors import PathRemapError

LOGGER = logging.getLogger(__name__)


def remap_path(
    container_path: str,
    container_prefix: str,
    host_prefix: str,
    *,
    strict: bool = False,
) -> str:
    """Replace the first occurrence of ``container_prefix`` with ``host_prefix``.

    A single trailing ``/`` is stripped from ``host_prefix`` before the
    substitution. When the prefix does not occur the path is returned
    unchanged, or ``PathRemapError`` is raised if ``strict`` is set.

    >>> remap_path("/media/movies/Foo", "/media", "/host/media/")
    '/host/media/movies/Foo'
    """
    replacement = host_prefix[:-1] if host_prefix.endswith("/") else host_prefix

    if not container_prefix or container_prefix not in container_path:
        if strict:
            raise PathRemapError(
                f"Path {container_path!r} does not contain the container prefix {container_prefix!r}"
            )
        LOGGER.warning(
            "Container prefix %r not found in %r; leaving path unchanged",
            container_prefix,
            container_path,
        )
        return container_path

    return container_path.replace(container_prefix, replacement, 1)


def destination_leaf_name(container_path: str) -> str:
    """Final segment of the original container path, ignoring trailing slashes."""
    return posixpath.basename(container_path.rstrip("/"))
