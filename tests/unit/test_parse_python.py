"""Tests for Python requirements.txt parsing."""

from packaging.version import Version

from pkgkeeper.parse_python import parse_requirements, strip_comment


class TestPythonParser:
    """Test Python requirements.txt parsing."""

    def test_parse_single_requirement(self):
        """Should parse a single package requirement."""
        content = "fastapi==0.85.0"
        manifest = parse_requirements(content)

        assert manifest.raw == content
        assert len(manifest.entries) == 1

        entry = manifest.entries[0]
        assert entry.name == "fastapi"
        assert entry.spec == "==0.85.0"
        assert entry.pinned_version == Version("0.85.0")
        assert entry.line_number == 0

    def test_parse_multiple_requirements(self):
        """Should parse multiple package requirements."""
        content = "fastapi==0.85.0\nuvicorn>=0.18.0\nrequests~=2.28.0"
        manifest = parse_requirements(content)

        assert len(manifest.entries) == 3
        assert [entry.name for entry in manifest.entries] == ["fastapi", "uvicorn", "requests"]
        assert manifest.entries[1].spec == ">=0.18.0"
        assert manifest.entries[2].spec == "~=2.28.0"
        assert [entry.line_number for entry in manifest.entries] == [0, 1, 2]

    def test_pinned_entries_only_include_exact_pins(self):
        """Should expose only == pins as pinned entries."""
        content = "fastapi==0.85.0\nuvicorn>=0.18.0\nrequests~=2.28.0"
        manifest = parse_requirements(content)

        assert [entry.name for entry in manifest.pinned_entries] == ["fastapi"]

    def test_parse_with_comments(self):
        """Should preserve comments and skip comment lines."""
        content = """# Web framework
fastapi==0.85.0  # Fast API framework
# Server
uvicorn>=0.18.0"""

        manifest = parse_requirements(content)

        assert "# Web framework" in manifest.raw
        assert len(manifest.entries) == 2
        assert manifest.entries[0].name == "fastapi"
        assert manifest.entries[0].line_number == 1
        assert manifest.entries[1].name == "uvicorn"

    def test_parse_with_environment_markers(self):
        """Should parse environment markers correctly."""
        content = 'uvloop==0.17.0; sys_platform != "win32"'
        manifest = parse_requirements(content)

        entry = manifest.entries[0]
        assert entry.name == "uvloop"
        assert entry.spec == "==0.17.0"
        assert entry.markers == 'sys_platform != "win32"'

    def test_parse_with_extras(self):
        """Should parse package extras correctly."""
        content = "fastapi[all]==0.85.0"
        manifest = parse_requirements(content)

        entry = manifest.entries[0]
        assert entry.name == "fastapi"
        assert entry.spec == "==0.85.0"
        assert entry.extras == ["all"]

    def test_parse_hashed_requirement(self):
        """Should parse a pin followed by hash options."""
        content = "requests==2.31.0 \\\n    --hash=sha256:abc123\n"
        manifest = parse_requirements(content)

        assert len(manifest.entries) == 1
        assert manifest.entries[0].pinned_version == Version("2.31.0")

    def test_parse_vcs_and_options(self):
        """Should skip VCS, editable, include and option lines."""
        content = """--index-url https://example.com/simple
-r base.txt
-c constraints.txt
-e ./local-package
git+https://github.com/user/repo.git@v1.0.0#egg=custom-lib
custom @ https://example.com/custom-1.0.tar.gz
fastapi==0.85.0"""

        manifest = parse_requirements(content)

        assert [entry.name for entry in manifest.entries] == ["fastapi"]
        assert "git+https://github.com/user/repo.git" in manifest.raw

    def test_parse_malformed_line_gracefully(self):
        """Should skip malformed lines and continue."""
        content = "fastapi==0.85.0\nnot a valid ==== line\nuvicorn>=0.18.0"

        manifest = parse_requirements(content)

        assert [entry.name for entry in manifest.entries] == ["fastapi", "uvicorn"]

    def test_parse_empty_file(self):
        """Should handle empty files gracefully."""
        manifest = parse_requirements("")

        assert manifest.raw == ""
        assert manifest.entries == []


class TestStripComment:
    """Test inline comment removal."""

    def test_strips_inline_comment(self):
        """Should drop everything from a whitespace-led #."""
        assert strip_comment("fastapi==0.85.0  # pinned").rstrip() == "fastapi==0.85.0"

    def test_keeps_fragment_without_whitespace(self):
        """Should keep a # that is part of a URL fragment."""
        line = "git+https://example.com/repo.git#egg=lib"
        assert strip_comment(line) == line
