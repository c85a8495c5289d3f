"""Per-repository update workflow."""

import logging

from .interfaces import (
    AvailableUpdatesReporter,
    GitDriver,
    PackageSourcesReader,
    PackageUpdater,
    PackageUpdateSelection,
    UpdateFinder,
)
from .models import RepositoryData
from .settings import ReportMode, SettingsContainer

logger = logging.getLogger(__name__)


class RepositoryUpdater:
    """
    Find, select and apply dependency updates for one checked-out repository.

    The workflow is strictly sequential: sources, then finder, then
    selection, then the package updater. Git and the pull request host are
    only touched by the package updater, and never in report-only mode.
    """

    def __init__(
        self,
        sources_reader: PackageSourcesReader,
        update_finder: UpdateFinder,
        update_selection: PackageUpdateSelection,
        package_updater: PackageUpdater,
        reporter: AvailableUpdatesReporter,
    ):
        self.sources_reader = sources_reader
        self.update_finder = update_finder
        self.update_selection = update_selection
        self.package_updater = package_updater
        self.reporter = reporter

    async def run(
        self,
        git: GitDriver,
        repository: RepositoryData,
        settings: SettingsContainer,
    ) -> int:
        """
        Run the update workflow.

        Args:
            git: Driver for the repository checkout
            repository: Pull and push forks
            settings: Run configuration

        Returns:
            Number of updates committed (0 when nothing was applied)
        """
        user_settings = settings.user_settings
        try:
            sources = self.sources_reader.read(git.working_folder, user_settings.package_sources)
        except Exception:
            logger.exception("Reading package sources for %s failed", git.working_folder)
            return 0

        logger.debug("Using package sources: %s", ", ".join(sources.urls))

        try:
            updates = await self.update_finder.find_package_update_sets(
                git.working_folder, sources, user_settings.allowed_change
            )
        except Exception:
            logger.exception("Finding updates in %s failed", git.working_folder)
            updates = []

        if user_settings.report_mode != ReportMode.OFF:
            self._report(repository, updates, settings)
            if user_settings.report_mode == ReportMode.REPORT_ONLY:
                logger.info("Report only: %d updates found, none applied", len(updates))
                return 0

        if not updates:
            logger.info("No potential updates found. Well done.")
            return 0

        try:
            targets = await self.update_selection.select_targets(
                repository.push, updates, settings.package_filters
            )
        except Exception:
            logger.exception("Selecting updates failed")
            targets = []

        if not targets:
            logger.info("No updates can be applied. Exiting.")
            return 0

        updates_done = await self.package_updater.make_update_pull_requests(
            git, repository, targets, sources, settings
        )

        if updates_done < len(targets):
            logger.warning("Attempted %d updates and did %d", len(targets), updates_done)
        else:
            logger.info("Done %d updates", updates_done)

        return updates_done

    def _report(self, repository: RepositoryData, updates, settings: SettingsContainer) -> None:
        try:
            self.reporter.report(repository.pull.name, updates, settings)
        except Exception:
            logger.exception("Reporting updates failed")
