"""Turn accepted updates into commits, branches and pull requests."""

import logging
from typing import Sequence

from . import wording
from .interfaces import GitDriver, PullRequestHost, UpdateRunner
from .models import NewPullRequest, PackageSources, PackageUpdateSet, RepositoryData
from .settings import SettingsContainer

logger = logging.getLogger(__name__)

PUSH_REMOTE = "pkgkeeper_push"


class PackageUpdater:
    """Apply updates on branches and open pull requests for them."""

    def __init__(self, pull_request_host: PullRequestHost, update_runner: UpdateRunner):
        self.pull_request_host = pull_request_host
        self.update_runner = update_runner

    async def make_update_pull_requests(
        self,
        git: GitDriver,
        repository: RepositoryData,
        updates: Sequence[PackageUpdateSet],
        sources: PackageSources,
        settings: SettingsContainer,
    ) -> int:
        """Commit each update and open pull requests.

        With consolidation on, every update is committed to one shared branch
        and a single pull request covers them all. Otherwise each update gets
        its own branch and pull request.

        Returns:
            Number of updates committed
        """
        if not updates:
            return 0

        default_branch = git.get_current_head()

        if settings.user_settings.consolidate_updates_in_single_pull_request:
            return await self._make_consolidated_pull_request(
                git, repository, updates, sources, settings, default_branch
            )

        total = 0
        for update in updates:
            try:
                await self._make_single_pull_request(
                    git, repository, update, sources, settings, default_branch
                )
                total += 1
            except Exception:
                logger.exception(
                    "Update of %s to %s failed", update.package_id, update.selected_version
                )
                _reset_to(git, default_branch)

        return total

    async def _make_single_pull_request(
        self,
        git: GitDriver,
        repository: RepositoryData,
        update: PackageUpdateSet,
        sources: PackageSources,
        settings: SettingsContainer,
        default_branch: str,
    ) -> None:
        branch = wording.branch_name([update])
        logger.info(
            "Updating %s from %s to %s on branch %s",
            update.package_id,
            update.min_current_version,
            update.selected_version,
            branch,
        )

        git.checkout(default_branch)
        git.checkout_new_branch(branch)
        self._apply_and_commit(git, update, sources)
        git.push(PUSH_REMOTE, branch)
        await self._open_pull_request(repository, [update], branch, default_branch, settings)
        git.checkout(default_branch)

    async def _make_consolidated_pull_request(
        self,
        git: GitDriver,
        repository: RepositoryData,
        updates: Sequence[PackageUpdateSet],
        sources: PackageSources,
        settings: SettingsContainer,
        default_branch: str,
    ) -> int:
        branch = wording.branch_name(updates)
        logger.info("Updating %d packages on branch %s", len(updates), branch)

        committed = 0
        try:
            git.checkout(default_branch)
            git.checkout_new_branch(branch)

            for update in updates:
                self._apply_and_commit(git, update, sources)
                committed += 1

            git.push(PUSH_REMOTE, branch)
            await self._open_pull_request(repository, updates, branch, default_branch, settings)
            git.checkout(default_branch)
        except Exception:
            # Commits already made stay on the local branch; nothing is pushed.
            logger.exception(
                "Consolidated update failed after %d of %d commits; abandoning the rest",
                committed,
                len(updates),
            )
            _reset_to(git, default_branch)

        return committed

    def _apply_and_commit(
        self, git: GitDriver, update: PackageUpdateSet, sources: PackageSources
    ) -> None:
        self.update_runner.update(update, sources)
        git.commit(wording.commit_message(update))

    async def _open_pull_request(
        self,
        repository: RepositoryData,
        updates: Sequence[PackageUpdateSet],
        branch: str,
        default_branch: str,
        settings: SettingsContainer,
    ) -> None:
        server_settings = settings.source_control_server_settings
        request = NewPullRequest(
            title=wording.pull_request_title(updates),
            head=f"{repository.push.owner}:{branch}",
            base=default_branch,
            body=wording.pull_request_body(updates),
            labels=tuple(server_settings.labels),
        )

        pull_request = await self.pull_request_host.open_pull_request(
            repository.pull, request, list(server_settings.reviewers)
        )
        logger.info("Opened pull request %s", pull_request.url)


def _reset_to(git: GitDriver, default_branch: str) -> None:
    """Drop uncommitted edits and return to the default branch."""
    git.discard_changes()
    git.checkout(default_branch)
