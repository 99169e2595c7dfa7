"""
Best-effort conversion of literal JavaScript subtrees into Python values.

Only fully literal shapes are materialised: literals, template strings whose
interpolations are bare identifiers, and objects/arrays built from those.
Everything else yields NO_VALUE. That is the normal outcome for most
arguments, not an error, and nothing here raises for unsupported shapes.
"""

from typing import Any, Dict, List, Optional

from tree_sitter import Node

from cypress_extractor.services.js_ast import (
    NodeKind,
    ParsedSource,
    kind_of,
    named_children,
    unwrap,
)


class _NoValue:
    """Sentinel for "could not materialise"; JS null maps to None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_CONTINUATIONS = ("\r\n", "\n", "\r", "\u2028", "\u2029")


def placeholder(name: str) -> str:
    return "${" + name + "}"


def join_surrogates(text: str) -> str:
    """Merge UTF-16 surrogate pairs (from "\\uD83D\\uDE00" escapes); lone halves stay."""
    if not any("\ud800" <= c <= "\udfff" for c in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _decode_escape(raw: str) -> str:
    body = raw[1:]
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body.startswith("u") and len(body) == 5:
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:
        return chr(int(body[1:], 16))
    if body in _LINE_CONTINUATIONS:
        return ""
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body.isdigit() and all(c in "01234567" for c in body):
        return chr(int(body, 8))
    # \' \" \\ and identity escapes
    return body


def string_value(node: Node, source: ParsedSource) -> str:
    """Cooked value of a quoted string literal."""
    start, end = source.start(node) + 1, source.end(node) - 1
    pieces: List[str] = []
    cursor = start
    for child in node.children:
        if child.type != "escape_sequence":
            continue
        pieces.append(source.text[cursor:source.start(child)])
        pieces.append(_decode_escape(source.node_text(child)))
        cursor = source.end(child)
    pieces.append(source.text[cursor:end])
    return join_surrogates("".join(pieces))


def _number_value(raw: str):
    raw = raw.replace("_", "")
    if raw.endswith("n"):
        return int(raw[:-1], 0)
    if raw[:2].lower() in ("0x", "0o", "0b"):
        return int(raw, 0)
    if len(raw) > 1 and raw[0] == "0" and raw.isdigit():
        # legacy octal, unless a digit rules it out
        return int(raw, 8) if all(c in "01234567" for c in raw) else int(raw)
    value = float(raw)
    return int(value) if value.is_integer() else value


def literal_value(node: Node, source: ParsedSource) -> Any:
    node = unwrap(node)
    if node.type == "string":
        return string_value(node, source)
    if node.type == "number":
        try:
            return _number_value(source.node_text(node))
        except ValueError:
            return NO_VALUE
    if node.type == "true":
        return True
    if node.type == "false":
        return False
    if node.type == "null":
        return None
    if node.type == "regex":
        return source.node_text(node)
    return NO_VALUE


def render_template(node: Node, source: ParsedSource, strict: bool = True) -> Any:
    """
    Interleave the raw text chunks of a template string with a placeholder
    for each interpolation: `Hi ${user}!` -> "Hi ${user}!".

    With ``strict`` only bare identifier interpolations are accepted and any
    other expression yields NO_VALUE; otherwise the expression's source text
    is used inside the placeholder.
    """
    node = unwrap(node)
    start, end = source.start(node) + 1, source.end(node) - 1
    pieces: List[str] = []
    cursor = start

    for child in node.named_children:
        if child.type != "template_substitution":
            continue
        pieces.append(source.text[cursor:source.start(child)])

        inner = named_children(child)
        expr = unwrap(inner[0]) if inner else None
        if expr is not None and kind_of(expr) is NodeKind.IDENTIFIER:
            pieces.append(placeholder(source.node_text(expr)))
        elif strict or expr is None:
            return NO_VALUE
        else:
            pieces.append(placeholder(source.node_text(expr)))
        cursor = source.end(child)

    pieces.append(source.text[cursor:end])
    return "".join(pieces)


def property_key(prop: Node, source: ParsedSource) -> Optional[str]:
    """
    Name of an object member: ``a: 1``, ``"a": 1``, ``1: x``, ``a`` (shorthand)
    and ``a() {}`` (method). Computed keys and spreads have no name.
    """
    if prop.type == "shorthand_property_identifier":
        return source.node_text(prop)

    if prop.type == "pair":
        key = prop.child_by_field_name("key")
    elif prop.type == "method_definition":
        key = prop.child_by_field_name("name")
    else:
        return None

    if key is None:
        return None
    if key.type in ("property_identifier", "identifier", "private_property_identifier"):
        return source.node_text(key)
    if key.type == "string":
        return string_value(key, source)
    if key.type == "number":
        value = literal_value(key, source)
        return None if value is NO_VALUE else str(value)
    return None


def _materialize_object(node: Node, source: ParsedSource) -> Any:
    output: Dict[str, Any] = {}
    for prop in named_children(node):
        # shorthand, methods, spreads and computed keys are not literal
        if prop.type != "pair":
            return NO_VALUE
        key = property_key(prop, source)
        if key is None:
            return NO_VALUE
        value = _materialize(prop.child_by_field_name("value"), source)
        if value is NO_VALUE:
            return NO_VALUE
        output[key] = value
    return output


def _materialize_array(node: Node, source: ParsedSource) -> Any:
    output: List[Any] = []
    expecting_value = True
    for child in node.children:
        if child.type in ("[", "]", "comment"):
            continue
        if child.type == ",":
            if expecting_value:
                # hole: [1, , 2]
                return NO_VALUE
            expecting_value = True
            continue
        value = _materialize(child, source)
        if value is NO_VALUE:
            return NO_VALUE
        output.append(value)
        expecting_value = False
    return output


def materialize(node: Optional[Node], source: ParsedSource) -> Any:
    try:
        return _materialize(node, source)
    except RecursionError:
        # nesting deeper than the interpreter stack has no value
        return NO_VALUE


def _materialize(node: Optional[Node], source: ParsedSource) -> Any:
    if node is None:
        return NO_VALUE

    node = unwrap(node)
    kind = kind_of(node)

    if kind is NodeKind.LITERAL:
        return literal_value(node, source)
    if kind is NodeKind.TEMPLATE:
        return render_template(node, source, strict=True)
    if kind is NodeKind.OBJECT:
        return _materialize_object(node, source)
    if kind is NodeKind.ARRAY:
        return _materialize_array(node, source)
    return NO_VALUE
