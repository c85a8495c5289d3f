"""Human-readable reports of available updates."""

import json
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .models import PackageUpdateSet
from .settings import OutputFormat, SettingsContainer


def format_json_output(name: str, updates: Sequence[PackageUpdateSet]) -> str:
    """Format JSON output."""
    reports = []
    for update in updates:
        reports.append({
            "name": update.package_id,
            "current_versions": [str(version) for version in update.current_versions],
            "target_version": str(update.selected_version),
            "change": update.change.name.lower(),
            "published": update.published.isoformat() if update.published else None,
            "source": update.source.url,
            "manifests": sorted(
                {package.path.relative_path.as_posix() for package in update.current_packages}
            ),
        })

    return json.dumps({"repository": name, "updates": reports}, indent=2)


def build_table(name: str, updates: Sequence[PackageUpdateSet]) -> Table:
    table = Table(title=f"Available updates for {name}")
    table.add_column("Package", style="bold")
    table.add_column("Current")
    table.add_column("Target", style="green")
    table.add_column("Change")
    table.add_column("Published")
    table.add_column("Manifests")

    for update in updates:
        table.add_row(
            update.package_id,
            ", ".join(str(version) for version in update.current_versions),
            str(update.selected_version),
            update.change.name.lower(),
            f"{update.published:%Y-%m-%d}" if update.published else "-",
            str(len({package.path for package in update.current_packages})),
        )

    return table


class ConsoleUpdatesReporter:
    """Write a table or JSON report to the console or to a file."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def report(
        self,
        name: str,
        updates: Sequence[PackageUpdateSet],
        settings: SettingsContainer,
    ) -> None:
        user_settings = settings.user_settings

        if user_settings.output_format == OutputFormat.JSON:
            output = format_json_output(name, updates)
            if user_settings.output_file:
                user_settings.output_file.write_text(output + "\n", encoding="utf-8")
            else:
                self.console.print_json(output)
            return

        if not updates:
            self.console.print(f"No updates available for {name}")
            return

        table = build_table(name, updates)
        if user_settings.output_file:
            with user_settings.output_file.open("w", encoding="utf-8") as f:
                Console(file=f, width=120).print(table)
        else:
            self.console.print(table)
