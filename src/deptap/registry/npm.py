"""HTTP client for the public npm registry.

Used only for the advisory version check before an install; nothing in the
install pipeline depends on it succeeding.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import quote as urlquote

import httpx

from deptap.errors import RegistryError
from deptap.models import VersionInfo

logger = logging.getLogger(__name__)

_BASE_URL = "https://registry.npmjs.org"


@dataclass
class NpmRegistryClient:
    """Async client for npm registry package metadata."""

    http: httpx.AsyncClient
    base_url: str = _BASE_URL

    async def get_latest_version(self, name: str) -> str:
        """Return the ``latest`` dist-tag version of a package.

        Scoped names (``@scope/pkg``) are URL-encoded automatically.

        Raises:
            RegistryError: On HTTP failure, unknown package, or a response
                without a version.
        """
        encoded = urlquote(name, safe="@")
        try:
            response = await self.http.get(f"{self.base_url}/{encoded}/latest")
            if response.status_code == 404:
                raise RegistryError(f"Package '{name}' not found in the npm registry.")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise RegistryError(f"Failed to fetch '{name}' from the npm registry: {exc}") from exc
        except ValueError as exc:
            raise RegistryError(f"Invalid registry response for '{name}': {exc}") from exc

        version = data.get("version") if isinstance(data, dict) else None
        if not version:
            raise RegistryError(f"Registry response for '{name}' has no version.")
        return str(version)

    async def fetch_latest_versions(
        self, names: list[str], *, limit: int = 5
    ) -> list[VersionInfo]:
        """Look up the first ``limit`` packages concurrently.

        Failures are logged and skipped; the result only holds packages the
        registry answered for.
        """
        to_check = names[:limit]
        if not to_check:
            return []

        results = await asyncio.gather(
            *(self.get_latest_version(name) for name in to_check),
            return_exceptions=True,
        )

        found: list[VersionInfo] = []
        for name, result in zip(to_check, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Version check failed for %s: %s", name, result)
                continue
            found.append(VersionInfo(name=name, latest=result))
        return found
