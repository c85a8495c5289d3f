"""Python requirements file parsing."""

import re

from packaging.requirements import InvalidRequirement, Requirement

from .models import Manifest, ManifestEntry


class RequirementsParser:
    """Parser for Python requirements.txt files."""

    def __init__(self):
        # Patterns for lines to skip
        self.skip_patterns = [
            r"^\s*#",  # Comment lines
            r"^\s*$",  # Empty lines
            r"^-e\s+",  # Editable installs
            r"^git\+",  # Git URLs
            r"^hg\+",  # Mercurial URLs
            r"^svn\+",  # SVN URLs
            r"^bzr\+",  # Bazaar URLs
            r"^https?://",  # Direct URLs
            r"^file://",  # File URLs
            r"^\./",  # Local paths
            r"^-r\s+",  # Include other requirements files
            r"^-c\s+",  # Constraint files
            r"^-f\s+",  # Find links
            r"^--",  # Other pip options
        ]

    def _should_skip_line(self, line: str) -> bool:
        """Check if a line should be skipped during parsing."""
        stripped = line.strip()
        if not stripped:
            return True

        return any(re.match(pattern, stripped) for pattern in self.skip_patterns)

    def _parse_requirement_line(self, line: str, line_number: int) -> ManifestEntry | None:
        """Parse a single requirement line using packaging library."""
        line_for_parsing = strip_comment(line).strip()
        if not line_for_parsing:
            return None

        # Hash-checking options trail the requirement itself
        line_for_parsing = line_for_parsing.split(" --hash", 1)[0].rstrip(" \\")

        try:
            req = Requirement(line_for_parsing)
        except InvalidRequirement:
            # Skip malformed requirements gracefully
            return None

        # Direct references have no index version to update
        if req.url:
            return None

        return ManifestEntry(
            name=req.name,
            spec=str(req.specifier) if req.specifier else None,
            markers=str(req.marker) if req.marker else None,
            extras=sorted(req.extras) if req.extras else None,
            line_number=line_number,
        )

    def parse(self, content: str) -> Manifest:
        """Parse requirements.txt content into Manifest."""
        entries: list[ManifestEntry] = []

        for line_number, line in enumerate(content.splitlines()):
            if self._should_skip_line(line):
                continue

            entry = self._parse_requirement_line(line, line_number)
            if entry:
                entries.append(entry)

        return Manifest(raw=content, entries=entries)


def strip_comment(line: str) -> str:
    """Remove an inline ``#`` comment from a requirement line."""
    match = re.search(r"(^|\s)#", line)
    if match:
        return line[: match.start()]
    return line


def parse_requirements(content: str) -> Manifest:
    """Parse requirements.txt content into Manifest.

    Args:
        content: The requirements.txt file content

    Returns:
        Parsed Manifest object
    """
    parser = RequirementsParser()
    return parser.parse(content)
