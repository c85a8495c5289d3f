"""Git operations on a local checkout, via the git command line."""

import logging
import subprocess
from pathlib import Path

from .errors import GitCommandError, mask_credentials

logger = logging.getLogger(__name__)

COMMIT_AUTHOR_NAME = "PkgKeeper"
COMMIT_AUTHOR_EMAIL = "pkgkeeper@users.noreply.github.com"


class GitCommandDriver:
    """Run git commands in ``working_folder``."""

    def __init__(self, working_folder: Path, timeout: int = 300):
        self.working_folder = Path(working_folder)
        self.timeout = timeout

    def run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Uses stdin=DEVNULL to prevent hanging when git prompts for credentials.
        """
        cmd = ["git", *args]
        logger.debug("Running %s", mask_credentials(" ".join(cmd)))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=self.working_folder,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(cmd, -1, "Command timed out") from e

        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr.strip())
        return result.stdout.strip()

    def clone(self, url: str) -> None:
        self.working_folder.mkdir(parents=True, exist_ok=True)
        self.run("clone", url, ".")

    def add_remote(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url)

    def get_current_head(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD")

    def checkout(self, branch_name: str) -> None:
        self.run("checkout", branch_name)

    def checkout_new_branch(self, branch_name: str) -> None:
        self.run("checkout", "-b", branch_name)

    def commit(self, message: str) -> None:
        self.run("add", "--all")
        self.run(
            "-c",
            f"user.name={COMMIT_AUTHOR_NAME}",
            "-c",
            f"user.email={COMMIT_AUTHOR_EMAIL}",
            "commit",
            "--message",
            message,
        )

    def push(self, remote_name: str, branch_name: str) -> None:
        self.run("push", "--set-upstream", remote_name, branch_name)

    def discard_changes(self) -> None:
        self.run("reset", "--hard", "HEAD")
        self.run("clean", "--force", "-d")
