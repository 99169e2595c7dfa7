"""Tests for literal materialization."""

from cypress_extractor.services.js_ast import call_arguments, is_call, parse_source, walk
from cypress_extractor.services.literals import NO_VALUE, materialize, property_key, render_template


class TestMaterialize:
    def given_argument(self, expression):
        self.source = parse_source(f"f({expression});")
        call = next(node for node in walk(self.source.root) if is_call(node))
        self.node = call_arguments(call)[0]

    def when_materialized(self):
        self.value = materialize(self.node, self.source)

    def then_value_is(self, expected):
        assert self.value == expected
        assert type(self.value) is type(expected)

    def then_no_value(self):
        assert self.value is NO_VALUE

    def test_string(self):
        """Quoted strings are unquoted."""
        self.given_argument("'#login'")
        self.when_materialized()
        self.then_value_is("#login")

    def test_string_escapes(self):
        """Escape sequences are decoded."""
        self.given_argument(r'"a\nb\"cA"')
        self.when_materialized()
        self.then_value_is('a\nb"cA')

    def test_integer(self):
        """Whole numbers become ints."""
        self.given_argument("42")
        self.when_materialized()
        self.then_value_is(42)

    def test_float(self):
        """Fractions stay floats."""
        self.given_argument("1.5")
        self.when_materialized()
        self.then_value_is(1.5)

    def test_hex(self):
        """Prefixed integer literals are supported."""
        self.given_argument("0x10")
        self.when_materialized()
        self.then_value_is(16)

    def test_booleans(self):
        """true and false map to Python booleans."""
        self.given_argument("true")
        self.when_materialized()
        self.then_value_is(True)

        self.given_argument("false")
        self.when_materialized()
        self.then_value_is(False)

    def test_null(self):
        """null is a value, not an absence of value."""
        self.given_argument("null")
        self.when_materialized()
        assert self.value is None

    def test_template_with_identifier(self):
        """Identifier interpolations become placeholders."""
        self.given_argument("`Hi ${user}!`")
        self.when_materialized()
        self.then_value_is("Hi ${user}!")

    def test_template_with_expression(self):
        """Any other interpolation declines the whole template."""
        self.given_argument("`Hi ${user.name}!`")
        self.when_materialized()
        self.then_no_value()

    def test_object(self):
        """Objects with literal keys and values are materialised recursively."""
        self.given_argument("{ a: 1, 'b': [1, 'x'], 3: false }")
        self.when_materialized()
        self.then_value_is({"a": 1, "b": [1, "x"], "3": False})

    def test_object_with_shorthand(self):
        """Shorthand properties are not literal."""
        self.given_argument("{ a }")
        self.when_materialized()
        self.then_no_value()

    def test_object_with_spread(self):
        """Spreads are not literal."""
        self.given_argument("{ ...rest }")
        self.when_materialized()
        self.then_no_value()

    def test_object_with_non_literal_value(self):
        """One non-literal value declines the whole object."""
        self.given_argument("{ a: 1, b: getB() }")
        self.when_materialized()
        self.then_no_value()

    def test_array_with_trailing_comma(self):
        """A trailing comma is not a hole."""
        self.given_argument("[1, 2,]")
        self.when_materialized()
        self.then_value_is([1, 2])

    def test_array_with_hole(self):
        """Holes decline the array."""
        self.given_argument("[1, , 2]")
        self.when_materialized()
        self.then_no_value()

    def test_identifier(self):
        """Bare identifiers have no value."""
        self.given_argument("user")
        self.when_materialized()
        self.then_no_value()

    def test_arrow_function(self):
        """Functions have no value."""
        self.given_argument("() => 1")
        self.when_materialized()
        self.then_no_value()

    def test_surrogate_pair_escape(self):
        """A UTF-16 surrogate pair decodes to a single code point."""
        self.given_argument(r'"smile \uD83D\uDE00"')
        self.when_materialized()
        self.then_value_is("smile \U0001F600")

    def test_code_point_escape(self):
        """Braced escapes cover the astral planes directly."""
        self.given_argument(r'"\u{1F600}"')
        self.when_materialized()
        self.then_value_is("\U0001F600")

    def test_deeply_nested_array(self):
        """Nesting deeper than the interpreter stack has no value."""
        self.given_argument("[" * 1000 + "1" + "]" * 1000)
        self.when_materialized()
        self.then_no_value()


class TestRenderTemplate:
    def test_lenient_mode_keeps_expression_source(self):
        """Without strict mode, the interpolated source text is kept."""
        source = parse_source("f(`Hi ${user.name}`);")
        call = next(node for node in walk(source.root) if is_call(node))
        rendered = render_template(call_arguments(call)[0], source, strict=False)
        assert rendered == "Hi ${user.name}"


class TestPropertyKey:
    def given_object(self, text):
        self.source = parse_source(f"f({text});")
        call = next(node for node in walk(self.source.root) if is_call(node))
        self.props = call_arguments(call)[0].named_children

    def test_keys(self):
        """Identifier, string, number, shorthand and method keys are readable."""
        self.given_object("{ a: 1, 'b c': 2, 7: 3, d, e() {} }")
        keys = [property_key(prop, self.source) for prop in self.props]
        assert keys == ["a", "b c", "7", "d", "e"]

    def test_computed_key(self):
        """Computed keys have no name."""
        self.given_object("{ [k]: 1 }")
        assert property_key(self.props[0], self.source) is None
