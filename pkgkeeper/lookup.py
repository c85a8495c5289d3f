"""Package version lookup against PyPI-compatible JSON APIs."""

import asyncio
import logging
from datetime import datetime, timezone

import httpx
from packaging.version import InvalidVersion, Version

from .errors import PackageLookupError
from .models import (
    PackageIdentity,
    PackageSearchMetadata,
    PackageSource,
    PackageSources,
    VersionChange,
)

logger = logging.getLogger(__name__)


class PackageLookup:
    """Find the best allowed version of a package across sources."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_concurrency: int = 6,
    ):
        """Initialize package lookup.

        Args:
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
        """
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._cache: dict[str, dict | None] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def find_version_update(
        self,
        package_name: str,
        current: Version,
        sources: PackageSources,
        allowed_change: VersionChange,
    ) -> PackageSearchMetadata | None:
        """Find the highest version newer than ``current`` within ``allowed_change``.

        Sources are tried in order; the first one that knows the package is used.
        A source that fails is skipped.

        Returns:
            Metadata for the chosen version, or None when no newer version is allowed

        Raises:
            PackageLookupError: If no source knows the package and at least one failed
        """
        last_error: PackageLookupError | None = None
        async with self._semaphore:
            for source in sources:
                try:
                    metadata = await self._fetch_package_metadata(source, package_name)
                except PackageLookupError as e:
                    logger.warning("Lookup of %s on %s failed: %s", package_name, source.url, e)
                    last_error = e
                    continue
                if metadata is None:
                    continue
                return self._choose_version(package_name, current, source, metadata, allowed_change)

        if last_error is not None:
            raise last_error
        logger.debug("Package %s not found on any source", package_name)
        return None

    def _choose_version(
        self,
        package_name: str,
        current: Version,
        source: PackageSource,
        metadata: dict,
        allowed_change: VersionChange,
    ) -> PackageSearchMetadata | None:
        releases = metadata.get("releases", {})
        name = metadata.get("info", {}).get("name") or package_name

        candidates: list[Version] = []
        for version_str, files in releases.items():
            try:
                version = Version(version_str)
            except InvalidVersion:
                continue  # Skip invalid versions

            if version <= current:
                continue
            if version.is_prerelease and not current.is_prerelease:
                continue
            if files and all(file_info.get("yanked") for file_info in files):
                continue
            if not allowed_change.allows(VersionChange.between(current, version)):
                continue
            candidates.append(version)

        if not candidates:
            return None

        chosen = max(candidates)
        return PackageSearchMetadata(
            identity=PackageIdentity(name, chosen),
            source=source,
            published=_published_date(releases.get(str(chosen)) or _files_for(releases, chosen)),
        )

    async def _fetch_package_metadata(self, source: PackageSource, package_name: str) -> dict | None:
        """Fetch package metadata from a source.

        Returns:
            Package metadata dict or None if not found
        """
        url = source.json_url(package_name)

        # Check cache first
        if url in self._cache:
            return self._cache[url]

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, follow_redirects=True)
                if response.status_code == 404:
                    self._cache[url] = None
                    return None
                response.raise_for_status()

                metadata = response.json()
                self._cache[url] = metadata
                return metadata

        except httpx.TimeoutException as e:
            raise PackageLookupError(f"Timeout fetching metadata for {package_name}") from e
        except httpx.HTTPStatusError as e:
            raise PackageLookupError(f"HTTP error fetching {package_name}: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise PackageLookupError(f"Network error fetching {package_name}: {e}") from e


def _files_for(releases: dict, version: Version) -> list[dict]:
    """Release files for a version whose key is not in normalized form."""
    for version_str, files in releases.items():
        try:
            if Version(version_str) == version:
                return files
        except InvalidVersion:
            continue
    return []


def _published_date(files: list[dict]) -> datetime | None:
    """Earliest upload time of a release's files."""
    times = []
    for file_info in files:
        raw = file_info.get("upload_time_iso_8601") or file_info.get("upload_time")
        if not raw:
            continue
        try:
            published = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            continue
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        times.append(published)

    if not times:
        return None
    return min(times)
