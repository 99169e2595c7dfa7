"""Tests for callee resolution."""

from cypress_extractor.services.callee import (
    name_anchor,
    resolve_callee,
    resolve_callee_segments,
    strip_call_marker,
)
from cypress_extractor.services.js_ast import is_call, parse_source, walk


def outermost_call(source):
    return next(node for node in walk(source.root) if is_call(node))


class TestResolveCallee:
    def given_source(self, text):
        self.source = parse_source(text)
        self.call = outermost_call(self.source)

    def when_callee_is_resolved(self):
        self.dotted = resolve_callee(self.call, self.source)

    def then_dotted_name_is(self, expected):
        assert self.dotted == expected

    def test_registration_path(self):
        """Member access on identifiers is joined with dots."""
        self.given_source('Cypress.Commands.add("login", () => {});')
        self.when_callee_is_resolved()
        self.then_dotted_name_is("Cypress.Commands.add")

    def test_chained_calls_are_marked(self):
        """Every invoked segment of a chain carries the call marker."""
        self.given_source("cy.a().b().c();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is("cy.a().b().c")

    def test_property_access_is_not_marked(self):
        """cy.a.b() and cy.a().b() resolve differently."""
        self.given_source("cy.a.b();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is("cy.a.b")

    def test_identifier_call_base(self):
        """A called identifier at the base of a chain is marked too."""
        self.given_source("expect(x).to.equal(1);")
        self.when_callee_is_resolved()
        self.then_dotted_name_is("expect().to.equal")

    def test_repeated_invocation(self):
        """Markers accumulate on a segment invoked more than once."""
        self.given_source("foo()()();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is("foo()()")

    def test_parenthesized_callee(self):
        """Parentheses around the callee are transparent."""
        self.given_source("(a.b)();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is("a.b")

    def test_array_base_is_unresolvable(self):
        """A literal base cannot be linearised."""
        self.given_source("[1, 2].map(f);")
        self.when_callee_is_resolved()
        self.then_dotted_name_is(None)

    def test_computed_access_is_unresolvable(self):
        """Computed member access aborts resolution."""
        self.given_source("a[b]();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is(None)

    def test_this_base_is_unresolvable(self):
        """Calls on this are skipped."""
        self.given_source("this.foo();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is(None)

    def test_new_expression_base_is_unresolvable(self):
        """Calls on a freshly constructed object are skipped."""
        self.given_source("new Foo().bar();")
        self.when_callee_is_resolved()
        self.then_dotted_name_is(None)

    def test_segments(self):
        """The segment list keeps the call markers."""
        self.given_source("cy.get('a').click();")
        assert resolve_callee_segments(self.call, self.source) == ["cy", "get()", "click"]


class TestNameAnchor:
    def test_points_at_last_property(self):
        """The anchor of a chained call is its own name."""
        source = parse_source("cy.get('a').click();")
        anchor = name_anchor(outermost_call(source))
        assert source.node_text(anchor) == "click"

    def test_identifier_call(self):
        """The anchor of a repeated call is the base identifier."""
        source = parse_source("foo()();")
        anchor = name_anchor(outermost_call(source))
        assert source.node_text(anchor) == "foo"


class TestStripCallMarker:
    def test_strips_one_marker(self):
        """Only the trailing marker is removed."""
        assert strip_call_marker("get()") == "get"
        assert strip_call_marker("foo()()") == "foo()"
        assert strip_call_marker("its") == "its"
