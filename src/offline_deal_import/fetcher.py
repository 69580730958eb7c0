"""
Remote payload download into the local staging path.

The fetcher is only consulted when nothing exists at the local path. A
download is all-or-nothing: any failure removes whatever was written so a
later run never mistakes a partial file for a staged payload.
"""

import os
from contextlib import contextmanager
from typing import Generator

import httpx
import structlog

from .errors import RemoteFetchFailed, StagingError

logger = structlog.get_logger(__name__)

_CHUNK_SIZE = 1024 * 1024


def path_exists(path: str) -> bool:
    """
    Check whether a file exists at ``path``.

    Raises:
        StagingError: for stat failures other than "not found"
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StagingError(
            f'checking local file {path}: {exc}',
            context={'path': path, 'error_type': type(exc).__name__},
        ) from exc
    return True


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning('fetch.cleanup_failed', path=path, error=str(exc))


@contextmanager
def staged_download(path: str) -> Generator[str, None, None]:
    """
    Scope a download into ``path``.

    On failure the partial file is removed (best effort) and the error is
    re-raised. A successful download is left in place.
    """
    try:
        yield path
    except BaseException:
        _remove_partial(path)
        raise


class RemoteFetcher:
    """
    Downloads a whole remote resource over HTTP GET.

    Success is strictly HTTP 200. There is no resume and no checksum
    validation of the transferred bytes.
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            timeout: Transport timeout in seconds (None waits indefinitely)
            transport: Optional httpx transport, used to substitute the network
        """
        self.timeout = timeout
        self.transport = transport

    def fetch(self, local_path: str, url: str) -> int:
        """
        Download ``url`` into ``local_path``.

        Returns:
            Number of bytes written

        Raises:
            RemoteFetchFailed: on non-200 status, transport or write errors
        """
        log = logger.bind(url=url, path=local_path)
        log.info('fetch.started')

        with staged_download(local_path):
            written = self._download(local_path, url)

        log.info('fetch.complete', bytes=written)
        return written

    def _download(self, local_path: str, url: str) -> int:
        context = {'url': url, 'path': local_path}
        written = 0
        try:
            with open(local_path, 'wb') as out:
                with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                    with client.stream('GET', url) as response:
                        if response.status_code != 200:
                            context['status_code'] = response.status_code
                            raise RemoteFetchFailed(
                                f'download file error code: {response.status_code}',
                                context=context,
                            )
                        for chunk in response.iter_bytes(_CHUNK_SIZE):
                            out.write(chunk)
                            written += len(chunk)
        except httpx.HTTPError as exc:
            context['error_type'] = type(exc).__name__
            raise RemoteFetchFailed(f'downloading {url}: {exc}', context=context) from exc
        except OSError as exc:
            context['error_type'] = type(exc).__name__
            raise RemoteFetchFailed(f'writing {local_path}: {exc}', context=context) from exc
        return written
