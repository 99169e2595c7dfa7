"""Tests for the inner-call aggregator."""

from cypress_extractor.services.inner_calls import aggregate_inner_calls, nested_fields
from cypress_extractor.services.js_ast import is_function, parse_source, walk
from cypress_extractor.services.vocabulary import DEFAULT_VOCABULARY


BODY = """
const run = () => {
  cy.get("#a").click();
  helpers.fill(form);
  this.reset();
  cy.window.then(noop);
};
"""


class TestAggregateInnerCalls:
    def given_function(self, text=BODY):
        self.text = text
        self.source = parse_source(text)
        self.func = next(node for node in walk(self.source.root) if is_function(node))

    def when_aggregated(self, **modes):
        self.found = aggregate_inner_calls(self.func, self.source, DEFAULT_VOCABULARY, **modes)

    def test_collects_commands_and_other_calls(self):
        """Commands and resolvable non-command calls are split."""
        self.given_function()
        self.when_aggregated()
        assert [(u.name, u.chain) for u in self.found.commands_used] == [
            ("get", []),
            ("click", ["get"]),
        ]
        assert [c.name for c in self.found.other_calls] == ["helpers.fill"]

    def test_other_call_positions(self):
        """start points at the called name, rootStart at the expression."""
        self.given_function()
        self.when_aggregated()
        fill = self.found.other_calls[0]
        assert self.text[fill.start:fill.end] == "fill(form)"
        assert self.text[fill.root_start:fill.end] == "helpers.fill(form)"
        assert [a.type for a in fill.arguments] == ["Identifier"]

    def test_modes(self):
        """Each side channel can be collected on its own."""
        self.given_function()
        self.when_aggregated(commands=False)
        assert self.found.commands_used == []
        assert len(self.found.other_calls) == 1

        self.when_aggregated(other=False)
        assert len(self.found.commands_used) == 2
        assert self.found.other_calls == []


class TestNestedFields:
    def test_disabled(self):
        """Disabled nested calls contribute no fields."""
        source = parse_source(BODY)
        func = next(node for node in walk(source.root) if is_function(node))
        assert nested_fields(func, source, DEFAULT_VOCABULARY, enabled=False) == {}

    def test_enabled(self):
        """Enabled nested calls fill both fields."""
        source = parse_source(BODY)
        func = next(node for node in walk(source.root) if is_function(node))
        fields = nested_fields(func, source, DEFAULT_VOCABULARY, enabled=True)
        assert set(fields) == {"commands_used", "other_calls"}
