"""
HTTP client for the crate mirror.

The mirror is trusted for bytes only: it serves ``.crate`` files at the
sharded path and nothing it returns is used as metadata.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from . import __version__
from .errors import ArtifactDownloadError, ArtifactNotFound
from .layout import mirror_url
from .models import PackageRef
from .settings import Settings

__all__ = ["MirrorClient"]

logger = logging.getLogger(__name__)


class MirrorClient:
    """
    Download crates from a mirror over plain HTTP GET.

    Success is strictly a final status of 200. Transport errors are retried
    ``settings.http_retry`` times; HTTP statuses are never retried.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize mirror client.

        Args:
            settings: Run settings (mirror URL, timeout, retry count)
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.settings = settings
        self.base_url = settings.mirror_url.rstrip("/")
        self.client = httpx.Client(
            timeout=httpx.Timeout(settings.http_timeout_s, connect=min(5.0, settings.http_timeout_s)),
            follow_redirects=True,
            headers={"User-Agent": f"cargo-mirror/{__version__}"},
            transport=transport,
        )
        self._get = retry(
            stop=stop_after_attempt(settings.http_retry + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )(self.client.get)

    def url_for(self, ref: PackageRef) -> str:
        return mirror_url(self.base_url, ref)

    def fetch(self, ref: PackageRef) -> bytes:
        """
        Fetch the ``.crate`` bytes for ``ref``.

        Returns:
            Full response body

        Raises:
            ArtifactNotFound: If the mirror answers 404
            ArtifactDownloadError: For any other non-200 status or transport error
        """
        url = self.url_for(ref)
        logger.info(f"downloading {url} from {self.base_url}")

        try:
            response = self._get(url)
        except httpx.RequestError as e:
            raise ArtifactDownloadError(f"Network error fetching {ref}: {e}") from e

        if response.status_code == 200:
            return response.content
        if response.status_code == 404:
            raise ArtifactNotFound(f"{ref} not found on mirror ({url})", status_code=404)
        raise ArtifactDownloadError(
            f"Mirror returned HTTP {response.status_code} for {ref}",
            status_code=response.status_code,
        )

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
