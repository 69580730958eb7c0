"""Local and remote path resolution for staged deal payloads."""

import os
from pathlib import Path

from .errors import MissingConfiguration, PathResolutionFailed


def join_path(base: str, name: str) -> str:
    """Join a base directory (or URL) and a file name with exactly one '/'."""
    if base.endswith('/'):
        return f'{base}{name}'
    return f'{base}/{name}'


def expand_home(path: str) -> str:
    """
    Expand a leading ``~`` to the current user's home directory.

    Only the bare ``~`` and ``~/...`` forms are supported; ``~other`` is
    rejected rather than looked up.
    """
    if not path.startswith('~'):
        return path
    if len(path) > 1 and path[1] not in ('/', os.sep):
        raise PathResolutionFailed(
            f'expanding file path {path}: cannot expand user-specific home dir',
            context={'path': path},
        )
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise PathResolutionFailed(
            f'expanding file path {path}: {exc}',
            context={'path': path},
        ) from exc
    return str(home) + path[1:]


def resolve_local_path(base: str, file_name: str) -> str:
    """
    Build the absolute local path a deal payload is staged at.

    Raises:
        MissingConfiguration: if no base path was given
        PathResolutionFailed: if the path cannot be expanded or made absolute
    """
    if not base:
        raise MissingConfiguration('local-path must not be empty')

    path = expand_home(join_path(base, file_name))
    try:
        return os.path.abspath(path)
    except OSError as exc:
        raise PathResolutionFailed(
            f'failed to get absolute path for file {path}: {exc}',
            context={'path': path},
        ) from exc


def resolve_remote_url(base: str, file_name: str) -> str:
    """Build the download URL for a deal payload."""
    if not base:
        raise MissingConfiguration('remote-path must not be empty')
    return join_path(base, file_name)
