"""Tests for scope name inference and frame building."""

import pytest

from cypress_extractor.services.js_ast import is_call, parse_source, walk
from cypress_extractor.services.scope import build_scope, frame_kind, infer_scope_name
from cypress_extractor.services.vocabulary import DEFAULT_VOCABULARY


class TestInferScopeName:
    def given_call(self, text):
        self.source = parse_source(text)
        self.call = next(node for node in walk(self.source.root) if is_call(node))

    def when_name_is_inferred(self):
        self.name = infer_scope_name(self.call, self.source)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ('describe("Checkout");', "Checkout"),
            ("describe(42);", "42"),
            ("describe(true);", "true"),
            ("describe(`Suite ${name}`);", "Suite ${name}"),
            ("describe(`Suite ${a.b}`);", "Suite ${a.b}"),
            ("describe(suiteName);", "${suiteName}"),
            ("describe();", "[Unparseable: NoArguments]"),
            ("describe(getName());", "[Unparseable: CallExpression]"),
            ("describe(1 + 2);", "[Unparseable: BinaryExpression]"),
        ],
    )
    def test_names(self, text, expected):
        """The first argument decides the display name; inference never fails."""
        self.given_call(text)
        self.when_name_is_inferred()
        assert self.name == expected


class TestFrameKind:
    @pytest.mark.parametrize(
        "dotted, expected",
        [
            ("it", "test"),
            ("it.skip", "test-skip"),
            ("it.only", "test-only"),
            ("describe", "suite"),
            ("describe.skip", "suite-skip"),
            ("describe.only", "suite-only"),
        ],
    )
    def test_kinds(self, dotted, expected):
        """The kind follows the call's own name."""
        assert frame_kind(dotted, DEFAULT_VOCABULARY) == expected


class TestBuildScope:
    def test_filters_and_orders_frames(self):
        """Only matching calls become frames, outermost first."""
        text = 'describe.only("A", () => { wrap(() => { it("b", () => {}); }); });'
        source = parse_source(text)
        calls = [node for node in walk(source.root) if is_call(node)]

        frames = build_scope(calls, source, DEFAULT_VOCABULARY, DEFAULT_VOCABULARY.is_test_or_suite)

        assert [frame.name for frame in frames] == ["A", "b"]
        assert [frame.kind for frame in frames] == ["suite-only", "test"]
        assert frames[0].only is True
        assert frames[0].skip is None
        assert text[frames[1].start:frames[1].end] == 'it("b", () => {})'
