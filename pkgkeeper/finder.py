"""Discover available updates for the pinned packages in a project tree."""

import asyncio
import logging
from pathlib import Path

from packaging.utils import canonicalize_name

from .detect import identify
from .lookup import PackageLookup
from .models import (
    PackageIdentity,
    PackageInProject,
    PackagePath,
    PackageSources,
    PackageUpdateSet,
    VersionChange,
)
from .parse_python import parse_requirements

logger = logging.getLogger(__name__)

SKIP_DIRECTORIES = {
    ".git",
    ".hg",
    ".tox",
    ".nox",
    ".venv",
    "venv",
    "env",
    "node_modules",
    "__pycache__",
    "site-packages",
}


def find_manifests(root: Path) -> list[Path]:
    """Python requirement manifests under ``root``, in sorted path order."""
    manifests = []
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if any(part in SKIP_DIRECTORIES for part in relative.parts[:-1]):
            continue
        if not path.is_file() or path.suffix not in (".txt", ".in"):
            continue

        if identify("", path.name) == "python":
            manifests.append(path)
        elif path.parent.name == "requirements":
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            if identify(content) == "python":
                manifests.append(path)

    return manifests


def find_packages_in_project(root: Path) -> list[PackageInProject]:
    """Every exactly pinned package in the manifests under ``root``."""
    packages = []
    for manifest_path in find_manifests(root):
        try:
            content = manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read %s", manifest_path)
            continue

        path = PackagePath(root, manifest_path.relative_to(root))
        for entry in parse_requirements(content).pinned_entries:
            packages.append(
                PackageInProject(PackageIdentity(entry.name, entry.pinned_version), path)
            )

    return packages


class PythonUpdateFinder:
    """Finder that looks pinned requirements up on package indexes."""

    def __init__(self, lookup: PackageLookup | None = None):
        self.lookup = lookup or PackageLookup()

    async def find_package_update_sets(
        self,
        working_folder: Path,
        sources: PackageSources,
        allowed_change: VersionChange,
    ) -> list[PackageUpdateSet]:
        """Find updates for every pinned package under ``working_folder``.

        Args:
            working_folder: Root of the checkout to scan
            sources: Package indexes, in priority order
            allowed_change: Largest version jump to propose

        Returns:
            One update set per package that has a newer allowed version, in
            the order the packages were first found
        """
        packages = find_packages_in_project(working_folder)
        logger.info("Found %d pinned packages in %s", len(packages), working_folder)

        grouped: dict[str, list[PackageInProject]] = {}
        for package in packages:
            grouped.setdefault(canonicalize_name(package.name), []).append(package)

        groups = list(grouped.values())
        tasks = [
            self.lookup.find_version_update(
                group[0].name,
                min(package.version for package in group),
                sources,
                allowed_change,
            )
            for group in groups
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        updates = []
        for group, result in zip(groups, results):
            if isinstance(result, Exception):
                logger.warning("Lookup of %s failed: %s", group[0].name, result)
                continue
            if result is None:
                continue
            behind = tuple(package for package in group if package.version < result.identity.version)
            updates.append(PackageUpdateSet(result, behind))

        logger.info("Found %d possible updates", len(updates))
        return updates
