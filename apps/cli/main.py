"""CLI application for PkgKeeper."""

import asyncio
import logging
import re
import tempfile
from datetime import timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from pkgkeeper.finder import PythonUpdateFinder
from pkgkeeper.git_driver import GitCommandDriver
from pkgkeeper.github_client import GitHubClient
from pkgkeeper.models import ForkData, RepositoryData, VersionChange
from pkgkeeper.package_updater import PUSH_REMOTE, PackageUpdater
from pkgkeeper.reporter import ConsoleUpdatesReporter
from pkgkeeper.repository_updater import RepositoryUpdater
from pkgkeeper.restore import PipRestoreCommand, SolutionsRestore
from pkgkeeper.selection import UpdateSelection
from pkgkeeper.settings import (
    GITHUB_API_URL,
    FilterSettings,
    OutputFormat,
    ReportMode,
    SettingsContainer,
    SourceControlServerSettings,
    UserSettings,
)
from pkgkeeper.sources import PackageSourcesReader
from pkgkeeper.update_runner import RequirementsUpdateRunner

console = Console()

GITHUB_URL_PATTERN = re.compile(
    r"^https://(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


def setup_logging(verbose: bool = False) -> None:
    """Send log records through rich, at INFO or DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # Request-level chatter from httpx is only useful when debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_version_change(value: str) -> VersionChange:
    try:
        return VersionChange[value.upper()]
    except KeyError:
        raise typer.BadParameter(f"Unknown version change '{value}'. Use major, minor or patch.")


def parse_report_mode(value: str) -> ReportMode:
    try:
        return ReportMode(value.lower())
    except ValueError:
        raise typer.BadParameter(f"Unknown report mode '{value}'. Use off, on or report-only.")


def parse_output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(value.lower())
    except ValueError:
        raise typer.BadParameter(f"Unknown format '{value}'. Use table or json.")


def parse_repository_url(url: str) -> ForkData:
    """Split a repository URL like https://github.com/owner/name into a ForkData."""
    match = GITHUB_URL_PATTERN.match(url.strip())
    if not match:
        raise typer.BadParameter(f"'{url}' is not a repository URL like https://github.com/owner/name")
    return ForkData(
        url=f"https://{match['host']}/{match['owner']}/{match['name']}.git",
        owner=match["owner"],
        name=match["name"],
    )


def authenticated_url(url: str, token: str | None) -> str:
    if not token:
        return url
    return url.replace("https://", f"https://x-access-token:{token}@", 1)


def build_repository_updater(github: GitHubClient | None = None) -> RepositoryUpdater:
    """Wire the default collaborators together."""
    update_runner = RequirementsUpdateRunner(SolutionsRestore(PipRestoreCommand()))
    return RepositoryUpdater(
        sources_reader=PackageSourcesReader(),
        update_finder=PythonUpdateFinder(),
        update_selection=UpdateSelection(github),
        package_updater=PackageUpdater(github, update_runner),
        reporter=ConsoleUpdatesReporter(console),
    )


app = typer.Typer(
    name="pkgkeeper",
    help="PkgKeeper - Find out-of-date Python dependencies and open pull requests to update them",
    add_completion=False,
)


@app.command()
def inspect(
    path: str | None = typer.Argument(
        None,
        help="Folder to scan for requirements files. Given a requirements file, "
        "the whole folder containing it is scanned. "
        "If none is specified, the current directory will be used.",
    ),
    change: str = typer.Option("major", "--change", "-c", help="Largest version change: major, minor or patch"),
    sources: list[str] = typer.Option([], "--source", "-s", help="Package index URL (repeatable)"),
    format_type: str = typer.Option("table", "--format", help="Output format: table or json"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Write the report to a file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Report available updates for a local folder without changing anything."""
    setup_logging(verbose)

    try:
        folder = _resolve_local_folder(path)
        settings = SettingsContainer(
            user_settings=UserSettings(
                report_mode=ReportMode.REPORT_ONLY,
                allowed_change=parse_version_change(change),
                package_sources=tuple(sources),
                output_format=parse_output_format(format_type),
                output_file=output,
            ),
        )
        fork = ForkData(url=folder.as_uri(), owner="local", name=folder.name)
        repository = RepositoryData(pull=fork, push=fork)

        updater = build_repository_updater()
        asyncio.run(updater.run(GitCommandDriver(folder), repository, settings))

    except typer.Exit:
        raise
    except typer.BadParameter as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


@app.command()
def repo(
    url: str = typer.Argument(help="Repository URL, e.g. https://github.com/owner/name"),
    token: str | None = typer.Option(None, "--token", "-t", envvar="GITHUB_TOKEN", help="GitHub token"),
    api_url: str = typer.Option(GITHUB_API_URL, "--api-url", envvar="PKGKEEPER_API_URL", help="GitHub API base URL"),
    consolidate: bool = typer.Option(
        False, "--consolidate", envvar="PKGKEEPER_CONSOLIDATE", help="Put all updates in a single pull request"
    ),
    max_prs: int = typer.Option(3, "--max-prs", "-m", help="Maximum number of updates to apply"),
    change: str = typer.Option("major", "--change", "-c", help="Largest version change: major, minor or patch"),
    sources: list[str] = typer.Option([], "--source", "-s", help="Package index URL (repeatable)"),
    include: str | None = typer.Option(None, "--include", "-i", help="Only update packages matching this regex"),
    exclude: str | None = typer.Option(None, "--exclude", "-e", help="Never update packages matching this regex"),
    age: int = typer.Option(7, "--age", "-a", help="Minimum age in days of a release before it is applied"),
    labels: list[str] = typer.Option(["pkgkeeper"], "--label", "-l", help="Label for pull requests (repeatable)"),
    reviewers: list[str] = typer.Option([], "--reviewer", "-r", help="Reviewer for pull requests (repeatable)"),
    report: str = typer.Option("off", "--report", envvar="PKGKEEPER_REPORT_MODE", help="Report mode: off, on or report-only"),
    format_type: str = typer.Option("table", "--format", help="Report format: table or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Clone a repository, apply updates on branches and open pull requests."""
    setup_logging(verbose)

    try:
        fork = parse_repository_url(url)
        if not token:
            console.print("Error: a GitHub token is required (--token or GITHUB_TOKEN)", style="red")
            raise typer.Exit(1)
        if max_prs < 1:
            raise typer.BadParameter("--max-prs must be at least 1")

        settings = SettingsContainer(
            source_control_server_settings=SourceControlServerSettings(
                token=token,
                api_url=api_url,
                labels=tuple(labels),
                reviewers=tuple(reviewers),
            ),
            user_settings=UserSettings(
                report_mode=parse_report_mode(report),
                consolidate_updates_in_single_pull_request=consolidate,
                allowed_change=parse_version_change(change),
                package_sources=tuple(sources),
                output_format=parse_output_format(format_type),
            ),
            package_filters=FilterSettings(
                includes=include,
                excludes=exclude,
                min_package_age=timedelta(days=age),
                max_pull_requests=max_prs,
            ),
        )

        count = asyncio.run(_run_repository(fork, settings))
        console.print(f"Applied {count} update{'s' if count != 1 else ''} to {fork.owner}/{fork.name}")

    except typer.Exit:
        raise
    except typer.BadParameter as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


async def _run_repository(fork: ForkData, settings: SettingsContainer) -> int:
    server_settings = settings.source_control_server_settings
    repository = RepositoryData(pull=fork, push=fork)
    github = GitHubClient(server_settings.token, api_url=server_settings.api_url)

    try:
        with tempfile.TemporaryDirectory(prefix="pkgkeeper-") as workdir:
            git = GitCommandDriver(Path(workdir))
            git.clone(authenticated_url(fork.url, server_settings.token))
            git.add_remote(PUSH_REMOTE, authenticated_url(repository.push.url, server_settings.token))

            updater = build_repository_updater(github)
            return await updater.run(git, repository, settings)
    finally:
        await github.close()


def _resolve_local_folder(path: str | None) -> Path:
    """The folder to inspect; must exist. A file path means its parent folder."""
    if not path or not path.strip():
        return Path.cwd()

    target = Path(path)
    if not target.exists():
        raise typer.BadParameter(f"Path '{path}' was not found")
    if target.is_file():
        return target.resolve().parent
    return target.resolve()


if __name__ == "__main__":
    app()
