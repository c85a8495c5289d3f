"""Choose which candidate updates to apply."""

import logging
import re
from datetime import datetime, timezone
from typing import Sequence

from . import wording
from .interfaces import PullRequestHost
from .models import ForkData, PackageUpdateSet
from .settings import FilterSettings

logger = logging.getLogger(__name__)


class UpdateSelection:
    """Filter candidates by name, age and existing branches, then cap the count.

    The result is always a subsequence of the candidates in their original
    order.
    """

    def __init__(self, pull_request_host: PullRequestHost | None = None, now=None):
        self.pull_request_host = pull_request_host
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def select_targets(
        self,
        push_fork: ForkData,
        candidates: Sequence[PackageUpdateSet],
        filters: FilterSettings,
    ) -> list[PackageUpdateSet]:
        selected = [
            update
            for update in candidates
            if self._matches_name(update, filters) and self._is_old_enough(update, filters)
        ]

        targets = []
        for update in selected:
            if len(targets) >= filters.max_pull_requests:
                break
            if await self._has_existing_branch(push_fork, update):
                logger.info(
                    "Skipping %s to %s: branch already exists",
                    update.package_id,
                    update.selected_version,
                )
                continue
            targets.append(update)

        logger.info("Selected %d of %d candidate updates", len(targets), len(candidates))
        return targets

    def _matches_name(self, update: PackageUpdateSet, filters: FilterSettings) -> bool:
        if filters.includes and not re.search(filters.includes, update.package_id, re.IGNORECASE):
            return False
        if filters.excludes and re.search(filters.excludes, update.package_id, re.IGNORECASE):
            return False
        return True

    def _is_old_enough(self, update: PackageUpdateSet, filters: FilterSettings) -> bool:
        if not filters.min_package_age or update.published is None:
            return True
        return self._now() - update.published >= filters.min_package_age

    async def _has_existing_branch(self, push_fork: ForkData, update: PackageUpdateSet) -> bool:
        if self.pull_request_host is None:
            return False
        return await self.pull_request_host.branch_exists(push_fork, wording.branch_name([update]))
