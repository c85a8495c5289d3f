"""Apply a package update to the manifests that pin it."""

import logging
import re
from pathlib import Path
from typing import Collection

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

from .errors import UpdateApplyError
from .models import PackageSources, PackageUpdateSet
from .parse_python import strip_comment
from .restore import SolutionsRestore

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"(==\s*)([^\s,;#\\]+)")


def update_requirement_line(
    line: str,
    package_name: str,
    new_version: Version,
    current_versions: Collection[Version] | None = None,
) -> str:
    """Re-pin ``package_name`` on one requirements line.

    Only pins lower than ``new_version`` are rewritten and, when
    ``current_versions`` is given, only pins at one of those versions.
    Extras, markers, inline comments and surrounding whitespace are kept.
    Lines for other packages come back unchanged.
    """
    requirement_part = strip_comment(line)
    try:
        req = Requirement(requirement_part.strip().split(" --hash", 1)[0].rstrip(" \\"))
    except InvalidRequirement:
        return line

    if canonicalize_name(req.name) != canonicalize_name(package_name):
        return line

    # Only rewrite the version of an exact pin
    if not any(spec.operator == "==" for spec in req.specifier):
        return line

    match = PIN_PATTERN.search(requirement_part)
    if not match:
        return line

    try:
        pinned = Version(match.group(2))
    except InvalidVersion:
        return line
    if pinned >= new_version:
        return line
    if current_versions is not None and pinned not in current_versions:
        return line

    start, end = match.span(2)
    return line[:start] + str(new_version) + line[end:]


def update_manifest_content(
    content: str,
    package_name: str,
    new_version: Version,
    current_versions: Collection[Version] | None = None,
) -> str:
    """Update manifest content with the new pinned version."""
    lines = content.splitlines(keepends=True)
    updated_lines = []

    for line in lines:
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        updated_lines.append(
            update_requirement_line(body, package_name, new_version, current_versions) + ending
        )

    return "".join(updated_lines)


class RequirementsUpdateRunner:
    """Rewrite pinned versions in requirements files, then restore."""

    def __init__(self, solutions_restore: SolutionsRestore):
        self.solutions_restore = solutions_restore

    def update(self, update: PackageUpdateSet, sources: PackageSources) -> None:
        versions_by_manifest: dict[Path, set[Version]] = {}
        for package in update.current_packages:
            versions_by_manifest.setdefault(package.path.full_path, set()).add(package.version)
        manifests = sorted(versions_by_manifest)

        for manifest in manifests:
            try:
                with manifest.open(encoding="utf-8", newline="") as f:
                    content = f.read()
            except OSError as e:
                raise UpdateApplyError(f"Could not read {manifest}: {e}") from e

            updated = update_manifest_content(
                content, update.package_id, update.selected_version, versions_by_manifest[manifest]
            )
            if updated == content:
                raise UpdateApplyError(f"{update.package_id} is not pinned in {manifest}")

            with manifest.open("w", encoding="utf-8", newline="") as f:
                f.write(updated)
            logger.debug("Updated %s to %s in %s", update.package_id, update.selected_version, manifest)

        self.solutions_restore.restore(manifests, sources)
