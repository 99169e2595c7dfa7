"""Tests for source loading and path resolution."""

import os

import pytest

from cypress_extractor.core.errors import PathResolutionError, SourceParseError
from cypress_extractor.services.loader import load_source, load_text, resolve_paths


class TestLoadText:
    def test_parses_source(self):
        """Valid JavaScript yields a parsed source."""
        parsed = load_text("cy.visit('/');", filename="a.js")
        assert parsed.filename == "a.js"
        assert parsed.root.type == "program"

    def test_skips_interpreter_directive(self, fixtures_path):
        """Node scripts are not analysed."""
        assert load_source(str(fixtures_path / "shebang.js")) is None

    def test_invalid_source(self, fixtures_path):
        """Syntax errors are raised with a 1-based position."""
        path = str(fixtures_path / "invalid.js")
        with pytest.raises(SourceParseError) as exc_info:
            load_source(path)
        error = exc_info.value
        assert error.filename == path
        assert error.line >= 1
        assert error.column >= 1
        assert path in str(error)

    def test_code_point_out_of_range(self):
        """Escapes above U+10FFFF are syntax errors with their position."""
        with pytest.raises(SourceParseError) as exc_info:
            load_text('it("\\u{110000}", () => {});', filename="a.js")
        error = exc_info.value
        assert error.message == "Code point out of bounds"
        assert (error.line, error.column) == (1, 5)


class TestResolvePaths:
    def given_tree(self, tmp_path):
        (tmp_path / "e2e").mkdir()
        (tmp_path / "e2e" / "login.cy.js").write_text("")
        (tmp_path / "e2e" / "types.ts").write_text("")
        (tmp_path / "commands.js").write_text("")
        (tmp_path / "notes.txt").write_text("")
        self.root = str(tmp_path)

    def test_directory(self, tmp_path):
        """Directories contribute their JavaScript files, sorted."""
        self.given_tree(tmp_path)
        assert resolve_paths([self.root]) == [
            os.path.join(self.root, "commands.js"),
            os.path.join(self.root, "e2e", "login.cy.js"),
        ]

    def test_explicit_typescript_file(self, tmp_path):
        """Explicit .ts files are accepted."""
        self.given_tree(tmp_path)
        path = os.path.join(self.root, "e2e", "types.ts")
        assert resolve_paths([path]) == [path]

    def test_duplicates_collapse(self, tmp_path):
        """A file reached twice is listed once."""
        self.given_tree(tmp_path)
        path = os.path.join(self.root, "commands.js")
        assert resolve_paths([path, self.root]).count(path) == 1

    def test_missing_path(self, tmp_path):
        """Missing paths are rejected."""
        with pytest.raises(PathResolutionError, match="does not exist"):
            resolve_paths([str(tmp_path / "nope")])

    def test_unsupported_file(self, tmp_path):
        """Files must be JavaScript or TypeScript."""
        self.given_tree(tmp_path)
        with pytest.raises(PathResolutionError, match="Expecting"):
            resolve_paths([os.path.join(self.root, "notes.txt")])
