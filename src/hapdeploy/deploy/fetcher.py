"""
ArtifactFetcher - download a package into the local cache, once.

The cache key is the last segment of the URL path, so fetching the same URL
twice hits the network only the first time.

Security note:
    TLS certificate validation is disabled for downloads. Build artifacts are
    commonly served from private hosts with self-signed certificates; the
    price is that a network attacker can substitute the artifact. Only point
    the fetcher at hosts reachable over networks you trust.
"""

import asyncio
import os
from pathlib import Path
from typing import Optional, Union

import httpx

from hapdeploy.core.protocols import Logger
from hapdeploy.deploy.base import CacheEntry
from hapdeploy.deploy.exceptions import FetchError
from hapdeploy.deploy.transcript import Transcript

DEFAULT_CACHE_FILENAME = 'package.hap'
DEFAULT_DOWNLOAD_TIMEOUT = 300.0
PARTIAL_SUFFIX = '.part'


def cache_filename(url: str) -> str:
    """Return the cache file name for ``url``.

    Uses the final "/"-delimited segment of the URL path; falls back to
    DEFAULT_CACHE_FILENAME when that segment is empty.
    """
    try:
        path = httpx.URL(url).path
    except httpx.InvalidURL:
        path = url.split('#', 1)[0].split('?', 1)[0]
    name = path.rsplit('/', 1)[-1]
    if name in ('', '.', '..'):
        return DEFAULT_CACHE_FILENAME
    return name


class ArtifactFetcher:
    """
    Conditional, idempotent downloader.

    Args:
        cache_dir: Shared directory holding cached artifacts
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
        logger: Diagnostics sink
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[Logger] = None
    ):
        self.cache_dir = Path(cache_dir)
        self.timeout = timeout
        self.transport = transport
        self.log = logger

    def cache_entry(self, url: str) -> CacheEntry:
        return CacheEntry(url, self.cache_dir / cache_filename(url))

    async def fetch(self, url: str, transcript: Transcript) -> CacheEntry:
        """
        Make sure the artifact for ``url`` is in the cache.

        Returns:
            CacheEntry whose local_path exists

        Raises:
            FetchError: On client, request, body or write failure (no retries)
        """
        entry = self.cache_entry(url)

        if entry.local_path.is_file():
            transcript.append(f"Found cached artifact: {entry.local_path}")
            return entry

        transcript.append(f"Downloading {url} ...")
        if self.log:
            self.log.warning(f"TLS certificate verification is disabled for {url}")

        try:
            client = httpx.AsyncClient(
                verify=False,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport
            )
        except Exception as e:
            raise FetchError(f"Failed to create HTTP client: {e}") from e

        async with client:
            try:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    try:
                        body = await response.aread()
                    except httpx.HTTPError as e:
                        raise FetchError(f"Failed to read response body from {url}: {e}") from e
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(f"Download request failed for {url}: {e}") from e

        await asyncio.to_thread(self._write_atomic, entry.local_path, body)
        transcript.append(f"Download complete: {entry.local_path} ({len(body)} bytes)")
        return entry

    @staticmethod
    def _write_atomic(path: Path, content: bytes) -> None:
        """Write to a sibling .part file, then rename over ``path``."""
        tmp_path = path.with_name(path.name + PARTIAL_SUFFIX)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(content)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise FetchError(f"Failed to write cached artifact {path}: {e}") from e
