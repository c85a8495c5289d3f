"""Core data models for PkgKeeper."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

PYPI_SIMPLE_URL = "https://pypi.org/simple"


class VersionChange(Enum):
    """Size of a version jump, ordered from smallest to largest."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @classmethod
    def between(cls, old: Version, new: Version) -> "VersionChange":
        """Classify the change from ``old`` to ``new``."""
        if new <= old:
            return cls.NONE
        if new.major != old.major:
            return cls.MAJOR
        if new.minor != old.minor:
            return cls.MINOR
        return cls.PATCH

    def allows(self, change: "VersionChange") -> bool:
        return change.value <= self.value


@dataclass(frozen=True)
class PackageIdentity:
    """A package name at a specific version."""

    name: str
    version: Version

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True)
class PackagePath:
    """Location of a manifest file inside a checkout."""

    base_directory: Path
    relative_path: Path

    @property
    def full_path(self) -> Path:
        return self.base_directory / self.relative_path


@dataclass(frozen=True)
class PackageInProject:
    """A pinned package found in one manifest."""

    identity: PackageIdentity
    path: PackagePath

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> Version:
        return self.identity.version


@dataclass(frozen=True)
class PackageSource:
    """A package index, identified by its simple-API URL."""

    url: str

    def json_url(self, package_name: str) -> str:
        """JSON API endpoint for a package on this index."""
        base = self.url.rstrip("/")
        if base.endswith("/simple"):
            base = base[: -len("/simple")]
        return f"{base}/pypi/{package_name}/json"


@dataclass(frozen=True)
class PackageSources:
    """Ordered package indexes; earlier sources win."""

    items: tuple[PackageSource, ...]

    @classmethod
    def from_urls(cls, urls) -> "PackageSources":
        return cls(tuple(PackageSource(url) for url in urls))

    @classmethod
    def default(cls) -> "PackageSources":
        return cls.from_urls([PYPI_SIMPLE_URL])

    @property
    def urls(self) -> list[str]:
        return [source.url for source in self.items]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class PackageSearchMetadata:
    """A version of a package as published on a source."""

    identity: PackageIdentity
    source: PackageSource
    published: datetime | None = None


@dataclass(frozen=True)
class PackageUpdateSet:
    """A proposed update of one package across every manifest that pins it.

    ``selected`` is the target version; ``current_packages`` lists each
    pinned occurrence that the update will rewrite.
    """

    selected: PackageSearchMetadata
    current_packages: tuple[PackageInProject, ...]

    def __post_init__(self):
        if not self.current_packages:
            raise ValueError(f"No current packages for {self.selected.identity.name}")

        # Accept lists from callers but keep the stored value immutable
        if not isinstance(self.current_packages, tuple):
            object.__setattr__(self, "current_packages", tuple(self.current_packages))

        wanted = canonicalize_name(self.selected.identity.name)
        for package in self.current_packages:
            if canonicalize_name(package.name) != wanted:
                raise ValueError(
                    f"Package {package.name} does not match selected package "
                    f"{self.selected.identity.name}"
                )

    @property
    def selected_id(self) -> PackageIdentity:
        return self.selected.identity

    @property
    def package_id(self) -> str:
        return self.selected_id.name

    @property
    def selected_version(self) -> Version:
        return self.selected_id.version

    @property
    def source(self) -> PackageSource:
        return self.selected.source

    @property
    def published(self) -> datetime | None:
        return self.selected.published

    @property
    def current_versions(self) -> list[Version]:
        return sorted({package.version for package in self.current_packages})

    @property
    def min_current_version(self) -> Version:
        return self.current_versions[0]

    @property
    def count_current_versions(self) -> int:
        return len(self.current_versions)

    @property
    def change(self) -> VersionChange:
        return VersionChange.between(self.min_current_version, self.selected_version)


@dataclass(frozen=True)
class ForkData:
    """One remote repository: where to read from or push to."""

    url: str
    owner: str
    name: str


@dataclass(frozen=True)
class RepositoryData:
    """The repository to pull from and the fork to push branches to."""

    pull: ForkData
    push: ForkData

    def __post_init__(self):
        if self.pull is None:
            raise ValueError("pull fork is required")
        if self.push is None:
            raise ValueError("push fork is required")


@dataclass(frozen=True)
class NewPullRequest:
    """Payload for opening a pull request."""

    title: str
    head: str
    base: str
    body: str = ""
    labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class PullRequest:
    """A pull request opened on the host."""

    number: int
    url: str


@dataclass
class ManifestEntry:
    """A single dependency entry in a manifest file."""

    name: str
    spec: str | None = None
    markers: str | None = None
    extras: list[str] | None = None
    line_number: int = 0

    @property
    def pinned_version(self) -> Version | None:
        """The exact version this entry pins, if it pins one."""
        if not self.spec or not self.spec.startswith("==") or "," in self.spec:
            return None
        raw = self.spec[2:].strip()
        if raw.endswith(".*"):
            return None
        try:
            return Version(raw)
        except InvalidVersion:
            return None


@dataclass
class Manifest:
    """A parsed requirements manifest."""

    raw: str
    entries: list[ManifestEntry]

    @property
    def pinned_entries(self) -> list[ManifestEntry]:
        return [entry for entry in self.entries if entry.pinned_version is not None]
