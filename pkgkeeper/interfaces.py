"""Contracts between the update engine and its collaborators.

The orchestrator and composer only ever talk to these protocols, so tests
can swap any of them for a mock.
"""

from pathlib import Path
from typing import Protocol, Sequence

from .models import (
    ForkData,
    NewPullRequest,
    PackageSources,
    PackageUpdateSet,
    PullRequest,
    RepositoryData,
    VersionChange,
)
from .settings import FilterSettings, SettingsContainer


class PackageSourcesReader(Protocol):
    def read(self, working_folder: Path, overrides: Sequence[str] = ()) -> PackageSources: ...


class UpdateFinder(Protocol):
    async def find_package_update_sets(
        self,
        working_folder: Path,
        sources: PackageSources,
        allowed_change: VersionChange,
    ) -> list[PackageUpdateSet]: ...


class PackageUpdateSelection(Protocol):
    async def select_targets(
        self,
        push_fork: ForkData,
        candidates: Sequence[PackageUpdateSet],
        filters: FilterSettings,
    ) -> list[PackageUpdateSet]: ...


class RestoreCommand(Protocol):
    def invoke(self, manifest: Path, sources: PackageSources) -> None: ...


class UpdateRunner(Protocol):
    def update(self, update: PackageUpdateSet, sources: PackageSources) -> None: ...


class GitDriver(Protocol):
    working_folder: Path

    def clone(self, url: str) -> None: ...

    def add_remote(self, name: str, url: str) -> None: ...

    def get_current_head(self) -> str: ...

    def checkout(self, branch_name: str) -> None: ...

    def checkout_new_branch(self, branch_name: str) -> None: ...

    def commit(self, message: str) -> None: ...

    def push(self, remote_name: str, branch_name: str) -> None: ...

    def discard_changes(self) -> None: ...


class PullRequestHost(Protocol):
    async def open_pull_request(
        self,
        target: ForkData,
        request: NewPullRequest,
        reviewers: Sequence[str],
    ) -> PullRequest: ...

    async def branch_exists(self, fork: ForkData, branch_name: str) -> bool: ...


class AvailableUpdatesReporter(Protocol):
    def report(
        self,
        name: str,
        updates: Sequence[PackageUpdateSet],
        settings: SettingsContainer,
    ) -> None: ...


class PackageUpdater(Protocol):
    async def make_update_pull_requests(
        self,
        git: GitDriver,
        repository: RepositoryData,
        updates: Sequence[PackageUpdateSet],
        sources: PackageSources,
        settings: SettingsContainer,
    ) -> int: ...
