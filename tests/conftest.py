"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from packaging.version import Version

from pkgkeeper.models import (
    ForkData,
    PackageIdentity,
    PackageInProject,
    PackagePath,
    PackageSearchMetadata,
    PackageSource,
    PackageUpdateSet,
    RepositoryData,
)
from pkgkeeper.settings import (
    ReportMode,
    SettingsContainer,
    SourceControlServerSettings,
    UserSettings,
)


@pytest.fixture
def make_update_set():
    """Factory for update sets: foo 1.2.3 -> 1.3.0 in requirements.txt by default."""

    def _make(
        name: str = "foo",
        current: str = "1.2.3",
        target: str = "1.3.0",
        manifest: str = "requirements.txt",
        base: Path = Path("/repo"),
        published: datetime | None = datetime(2018, 2, 19, 11, 12, 7, tzinfo=timezone.utc),
    ) -> PackageUpdateSet:
        path = PackagePath(base, Path(manifest))
        current_package = PackageInProject(PackageIdentity(name, Version(current)), path)
        selected = PackageSearchMetadata(
            PackageIdentity(name, Version(target)),
            PackageSource("https://pypi.org/simple"),
            published,
        )
        return PackageUpdateSet(selected, (current_package,))

    return _make


@pytest.fixture
def repository_data():
    """Pull and push forks pointing at the same repository."""
    fork = ForkData(url="https://github.com/me/test.git", owner="me", name="test")
    return RepositoryData(pull=fork, push=fork)


@pytest.fixture
def make_settings():
    """Factory for settings with a given report mode and consolidation flag."""

    def _make(report_mode: ReportMode = ReportMode.OFF, consolidate: bool = False) -> SettingsContainer:
        return SettingsContainer(
            source_control_server_settings=SourceControlServerSettings(
                token="tok", labels=("deps",), reviewers=("alice",)
            ),
            user_settings=UserSettings(
                report_mode=report_mode,
                consolidate_updates_in_single_pull_request=consolidate,
            ),
        )

    return _make


@pytest.fixture
def sample_requirements():
    """Sample requirements.txt content for testing."""
    return "fastapi==0.85.0\nuvicorn>=0.18.0\nrequests==2.28.0  # http\n"


@pytest.fixture
def project_tree(tmp_path, sample_requirements):
    """A small project with two manifests and a virtualenv to ignore."""
    (tmp_path / "requirements.txt").write_text(sample_requirements)
    (tmp_path / "requirements").mkdir()
    (tmp_path / "requirements" / "dev.txt").write_text("pytest==7.0.0\nrequests==2.27.0\n")
    (tmp_path / ".venv").mkdir()
    (tmp_path / ".venv" / "requirements.txt").write_text("ignored==1.0.0\n")
    (tmp_path / "README.txt").write_text("Nothing to see here\n")
    return tmp_path
