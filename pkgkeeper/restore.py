"""Check that updated manifests still resolve."""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Iterable

from .errors import RestoreError
from .interfaces import RestoreCommand
from .models import PackageSources

logger = logging.getLogger(__name__)


class PipRestoreCommand:
    """Resolve a requirements file with pip without installing anything."""

    def __init__(self, timeout: int = 600, python: str = sys.executable):
        self.timeout = timeout
        self.python = python

    def build_command(self, manifest: Path, sources: PackageSources) -> list[str]:
        cmd = [
            self.python,
            "-m",
            "pip",
            "install",
            "--dry-run",
            "--quiet",
            "--ignore-installed",
            "--disable-pip-version-check",
        ]
        urls = sources.urls
        if urls:
            cmd.extend(["--index-url", urls[0]])
            for url in urls[1:]:
                cmd.extend(["--extra-index-url", url])
        cmd.extend(["-r", manifest.name])
        return cmd

    def invoke(self, manifest: Path, sources: PackageSources) -> None:
        cmd = self.build_command(manifest, sources)
        logger.debug("Restoring %s", manifest)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=manifest.parent,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as e:
            raise RestoreError(f"Restore of {manifest} timed out") from e
        except OSError as e:
            raise RestoreError(f"Could not run pip for {manifest}: {e}") from e

        if result.returncode != 0:
            raise RestoreError(f"Restore of {manifest} failed: {result.stderr.strip()}")


class SolutionsRestore:
    """Restore each distinct manifest touched by an update, once."""

    def __init__(self, restore_command: RestoreCommand):
        self.restore_command = restore_command

    def restore(self, manifests: Iterable[Path], sources: PackageSources) -> None:
        for manifest in sorted(set(manifests)):
            self.restore_command.invoke(manifest, sources)
