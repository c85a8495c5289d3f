"""Run configuration for PkgKeeper."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path

from .models import VersionChange

GITHUB_API_URL = "https://api.github.com"


class ReportMode(Enum):
    """Whether to report available updates, and whether to stop there."""

    OFF = "off"
    ON = "on"
    REPORT_ONLY = "report-only"


class OutputFormat(Enum):
    TABLE = "table"
    JSON = "json"


@dataclass(frozen=True)
class SourceControlServerSettings:
    """Where and how pull requests are opened."""

    token: str | None = None
    api_url: str = GITHUB_API_URL
    labels: tuple[str, ...] = ("pkgkeeper",)
    reviewers: tuple[str, ...] = ()


@dataclass(frozen=True)
class UserSettings:
    """Per-run choices made by the user."""

    report_mode: ReportMode = ReportMode.OFF
    consolidate_updates_in_single_pull_request: bool = False
    allowed_change: VersionChange = VersionChange.MAJOR
    package_sources: tuple[str, ...] = ()
    output_format: OutputFormat = OutputFormat.TABLE
    output_file: Path | None = None


@dataclass(frozen=True)
class FilterSettings:
    """Which candidate updates may be applied."""

    includes: str | None = None  # regex
    excludes: str | None = None  # regex
    min_package_age: timedelta = timedelta(days=7)
    max_pull_requests: int = 3


@dataclass(frozen=True)
class SettingsContainer:
    """Everything a single run needs, passed explicitly to each stage."""

    source_control_server_settings: SourceControlServerSettings = field(
        default_factory=SourceControlServerSettings
    )
    user_settings: UserSettings = field(default_factory=UserSettings)
    package_filters: FilterSettings = field(default_factory=FilterSettings)
