"""Test that project structure is correct and modules can be imported."""

from pathlib import Path

from packaging.version import Version

import pkgkeeper.detect
import pkgkeeper.models
import pkgkeeper.package_updater
import pkgkeeper.parse_python
import pkgkeeper.repository_updater
from pkgkeeper.models import Manifest, ManifestEntry, PackageIdentity, PackageInProject, PackagePath


def test_core_modules_importable():
    """Ensure pkgkeeper modules can be imported."""
    # This will fail if modules have syntax errors or missing dependencies

    assert hasattr(pkgkeeper.models, "PackageUpdateSet")
    assert hasattr(pkgkeeper.repository_updater, "RepositoryUpdater")
    assert hasattr(pkgkeeper.package_updater, "PackageUpdater")
    assert hasattr(pkgkeeper.detect, "identify")
    assert hasattr(pkgkeeper.parse_python, "parse_requirements")


def test_model_creation():
    """Test that basic models can be instantiated."""
    entry = ManifestEntry(name="fastapi", spec="==0.85.0")
    assert entry.name == "fastapi"
    assert entry.pinned_version == Version("0.85.0")

    manifest = Manifest(raw="", entries=[entry])
    assert len(manifest.pinned_entries) == 1

    package = PackageInProject(
        PackageIdentity("fastapi", Version("0.85.0")),
        PackagePath(Path("/repo"), Path("requirements.txt")),
    )
    assert package.path.full_path == Path("/repo/requirements.txt")
