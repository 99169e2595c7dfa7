"""Tests for multi-file analysis."""

import pytest

from cypress_extractor.core.errors import SourceParseError
from cypress_extractor.models.schemas import AnalyzeOptions
from cypress_extractor.services.loader import resolve_paths
from cypress_extractor.services.project import analyze_file, analyze_paths, analyze_sources


class TestAnalyzePaths:
    def given_project(self, fixtures_path):
        self.paths = resolve_paths([str(fixtures_path / "project")])

    def when_analyzed(self, workers=2):
        self.results = analyze_paths(self.paths, AnalyzeOptions(), max_workers=workers)

    def test_results_keyed_by_sorted_path(self, fixtures_path):
        """Results are ordered by path whatever the completion order."""
        self.given_project(fixtures_path)
        self.when_analyzed()
        assert list(self.results) == sorted(self.paths)
        assert list(self.results)[0].endswith("checkout.cy.js")

    def test_each_file_is_independent(self, fixtures_path):
        """Every file gets its own result."""
        self.given_project(fixtures_path)
        self.when_analyzed()
        by_name = {path.rsplit("/", 1)[-1]: result for path, result in self.results.items()}
        assert [d.name for d in by_name["commands.js"].added] == ["login", "logout"]
        assert by_name["checkout.cy.js"].added == []
        assert len(by_name["checkout.cy.js"].tests) == 3

    def test_same_result_as_single_worker(self, fixtures_path):
        """Parallelism does not change the output."""
        self.given_project(fixtures_path)
        self.when_analyzed(workers=1)
        sequential = {p: r.to_json_dict() for p, r in self.results.items()}
        self.when_analyzed(workers=4)
        assert {p: r.to_json_dict() for p, r in self.results.items()} == sequential

    def test_records_duration(self, fixtures_path):
        """The last run duration is exposed on the function."""
        self.given_project(fixtures_path)
        self.when_analyzed()
        assert analyze_paths.last_duration_ms is not None

    def test_parse_failure_propagates(self, fixtures_path):
        """An unparseable file fails the run."""
        self.given_project(fixtures_path)
        self.paths.append(str(fixtures_path / "invalid.js"))
        with pytest.raises(SourceParseError):
            self.when_analyzed()


class TestAnalyzeFile:
    def test_skipped_file(self, fixtures_path):
        """A skipped file yields an empty result."""
        result = analyze_file(str(fixtures_path / "shebang.js"))
        assert result.used == []
        assert result.errors == []


class TestAnalyzeSources:
    def when_analyzed(self, sources, workers=2):
        self.results = analyze_sources(sources, AnalyzeOptions(), max_workers=workers)

    def test_results_keyed_by_sorted_name(self):
        """In-memory sources come back keyed by name in sorted order."""
        self.when_analyzed(
            iter(
                [
                    ("b.cy.js", "it('b', () => { cy.visit('/b'); });"),
                    ("a.js", "Cypress.Commands.add('login', () => {});"),
                ]
            )
        )
        assert list(self.results) == ["a.js", "b.cy.js"]
        assert [d.name for d in self.results["a.js"].added] == ["login"]
        assert [t.name for t in self.results["b.cy.js"].tests] == ["b"]

    def test_failure_carries_source_name(self):
        """The error of a broken source names it."""
        with pytest.raises(SourceParseError) as exc_info:
            self.when_analyzed([("ok.js", "cy.visit('/');"), ("broken.js", "it('x', () => {")])
        assert exc_info.value.filename == "broken.js"

    def test_no_sources(self):
        """Nothing to analyse yields an empty result."""
        self.when_analyzed([])
        assert self.results == {}
