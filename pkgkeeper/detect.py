"""Manifest detection for Python dependency files."""

import re
from fnmatch import fnmatch

MANIFEST_PATTERNS = [
    "requirements*.txt",
    "*requirements.txt",
    "*-requirements.txt",
    "constraints*.txt",
    "requirements*.in",
]


def identify(content: str, filename: str | None = None) -> str:
    """Detect whether a file is a Python requirements manifest.

    Args:
        content: The file content
        filename: Optional filename for additional context

    Returns:
        'python' for requirements manifests, otherwise 'unknown'
    """
    # Filename-based detection (takes precedence)
    if filename:
        basename = filename.replace("\\", "/").rsplit("/", 1)[-1].lower()
        if any(fnmatch(basename, pattern) for pattern in MANIFEST_PATTERNS):
            return "python"
        if basename in ("package.json", "pyproject.toml", "setup.cfg"):
            return "unknown"

    # Content-based detection
    python_patterns = [
        r"^[a-zA-Z0-9\-_\.]+\s*[><=!~]=\s*[\d\w\.\-]+",  # package>=1.0.0
        r"^[a-zA-Z0-9\-_\.]+\[.*?\]\s*[><=!~]=",  # package[extras]>=1.0.0
        r"^-r\s+\S+\.txt",  # nested requirements include
    ]

    for pattern in python_patterns:
        if re.search(pattern, content, re.MULTILINE):
            return "python"

    return "unknown"
