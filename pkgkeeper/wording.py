"""Branch names, commit messages and pull request text for updates.

Everything here is derived only from package ids and versions, so running
again over the same updates produces the same branch and the same PR.
"""

import hashlib
from typing import Sequence

from .models import PackageUpdateSet

BRANCH_PREFIX = "pkgkeeper-update"


def branch_name(updates: Sequence[PackageUpdateSet]) -> str:
    """Name of the branch that carries these updates."""
    if not updates:
        raise ValueError("Cannot name a branch for no updates")

    if len(updates) == 1:
        update = updates[0]
        return f"{BRANCH_PREFIX}-{update.package_id}-to-{update.selected_version}"

    return f"{BRANCH_PREFIX}-{len(updates)}-packages-{_updates_digest(updates)}"


def _updates_digest(updates: Sequence[PackageUpdateSet]) -> str:
    key = ",".join(
        sorted(f"{update.package_id.lower()}{update.selected_version}" for update in updates)
    )
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def pull_request_title(updates: Sequence[PackageUpdateSet]) -> str:
    if len(updates) == 1:
        return commit_message(updates[0])
    return f"Automatic update of {len(updates)} packages"


def commit_message(update: PackageUpdateSet) -> str:
    return f"Automatic update of {update.package_id} to {update.selected_version}"


def pull_request_body(updates: Sequence[PackageUpdateSet]) -> str:
    """Markdown body describing every update in the pull request."""
    if len(updates) == 1:
        return commit_details(updates[0])

    sections = [f"{len(updates)} packages were updated in this pull request:", ""]
    for update in updates:
        sections.append(f"## {update.package_id}")
        sections.append("")
        sections.append(commit_details(update))
    return "\n".join(sections)


def commit_details(update: PackageUpdateSet) -> str:
    """Longer description of one update, used in pull request bodies."""
    lines = []
    old_versions = ", ".join(f"`{version}`" for version in update.current_versions)
    change = update.change.name.lower()

    lines.append(
        f"PkgKeeper has generated a {change} update of `{update.package_id}` "
        f"to `{update.selected_version}` from {old_versions}"
    )

    if update.count_current_versions > 1:
        lines.append(f"{update.count_current_versions} versions of `{update.package_id}` were found in use")

    if update.published:
        lines.append(
            f"`{update.package_id} {update.selected_version}` was published at "
            f"`{update.published:%Y-%m-%dT%H:%M:%SZ}`"
        )

    lines.append("")
    count = len(update.current_packages)
    lines.append(f"{count} project update{'s' if count != 1 else ''}:")
    lines.append("")
    lines.append("| Manifest | From | To |")
    lines.append("| --- | --- | --- |")
    for package in update.current_packages:
        lines.append(
            f"| `{package.path.relative_path.as_posix()}` | `{package.version}` "
            f"| `{update.selected_version}` |"
        )

    lines.append("")
    lines.append("This is an automated update. Merge only if it passes tests.")
    lines.append("")
    return "\n".join(lines)
