"""
JavaScript parsing on top of Tree-sitter (NO BUILD STEP REQUIRED).

Compatible with:
- tree-sitter>=0.23
- tree-sitter-javascript>=0.23

Tree-sitter reports byte offsets. ParsedSource converts them to character
offsets so that every span handed out by the extraction services slices
the analysed text directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from cypress_extractor.core.errors import SourceParseError
from cypress_extractor.services.locations import LineIndex


# ------------------------------
# Load JavaScript grammar
# ------------------------------
LANGUAGE = Language(tree_sitter_javascript.language())

MAX_CODE_POINT = 0x10FFFF


# ------------------------------
# Node kinds
# ------------------------------
class NodeKind(str, Enum):
    CALL = "CallExpression"
    MEMBER = "MemberExpression"
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"
    TEMPLATE = "TemplateLiteral"
    OBJECT = "ObjectExpression"
    ARRAY = "ArrayExpression"
    FUNCTION = "FunctionExpression"
    ARROW_FUNCTION = "ArrowFunctionExpression"
    OTHER = "Other"


_KINDS = {
    "call_expression": NodeKind.CALL,
    "member_expression": NodeKind.MEMBER,
    "identifier": NodeKind.IDENTIFIER,
    "undefined": NodeKind.IDENTIFIER,
    "string": NodeKind.LITERAL,
    "number": NodeKind.LITERAL,
    "true": NodeKind.LITERAL,
    "false": NodeKind.LITERAL,
    "null": NodeKind.LITERAL,
    "regex": NodeKind.LITERAL,
    "template_string": NodeKind.TEMPLATE,
    "object": NodeKind.OBJECT,
    "array": NodeKind.ARRAY,
    # older grammars name function expressions "function"
    "function": NodeKind.FUNCTION,
    "function_expression": NodeKind.FUNCTION,
    "generator_function": NodeKind.FUNCTION,
    "arrow_function": NodeKind.ARROW_FUNCTION,
}

FUNCTION_KINDS = (NodeKind.FUNCTION, NodeKind.ARROW_FUNCTION)


def named_children(node: Node) -> List[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def unwrap(node: Node) -> Node:
    """Skip parentheses: (a.b)() has the callee a.b."""
    while node.type == "parenthesized_expression":
        inner = named_children(node)
        if not inner:
            break
        node = inner[0]
    return node


def kind_of(node: Node) -> NodeKind:
    node = unwrap(node)
    kind = _KINDS.get(node.type, NodeKind.OTHER)
    if kind is NodeKind.CALL and not is_call(node):
        # tagged template: tag`...`
        return NodeKind.OTHER
    return kind


def kind_name(node: Node) -> str:
    """ESTree-style name of a node kind, e.g. "ArrowFunctionExpression"."""
    kind = kind_of(node)
    if kind is not NodeKind.OTHER:
        return kind.value
    return "".join(part.capitalize() for part in unwrap(node).type.split("_"))


def is_call(node: Node) -> bool:
    if node.type != "call_expression":
        return False
    args = node.child_by_field_name("arguments")
    return args is not None and args.type == "arguments"


def is_function(node: Node) -> bool:
    return kind_of(node) in FUNCTION_KINDS


def call_arguments(call: Node) -> List[Node]:
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return named_children(args)


def call_callee(call: Node) -> Optional[Node]:
    callee = call.child_by_field_name("function")
    return unwrap(callee) if callee is not None else None


# ------------------------------
# Traversal
# ------------------------------
def walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(n.named_children))


def walk_with_ancestors(node: Node) -> Iterator[Tuple[Node, Tuple[Node, ...]]]:
    """
    Pre-order walk yielding (node, ancestors).

    ``ancestors`` runs from the root down to the node's parent. The stack
    is explicit so deeply nested suites do not hit the recursion limit.
    """
    stack: List[Tuple[Node, Tuple[Node, ...]]] = [(node, ())]
    while stack:
        n, ancestors = stack.pop()
        yield n, ancestors
        path = ancestors + (n,)
        stack.extend((child, path) for child in reversed(n.named_children))


# ------------------------------
# Parsed source
# ------------------------------
@dataclass
class ParsedSource:
    text: str
    tree: Tree
    filename: Optional[str] = None
    _char_offsets: Optional[List[int]] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.text.isascii():
            offsets: List[int] = []
            for index, char in enumerate(self.text):
                offsets.extend([index] * len(char.encode("utf-8")))
            offsets.append(len(self.text))
            self._char_offsets = offsets

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def offset(self, byte_offset: int) -> int:
        if self._char_offsets is None:
            return byte_offset
        return self._char_offsets[byte_offset]

    def start(self, node: Node) -> int:
        return self.offset(node.start_byte)

    def end(self, node: Node) -> int:
        return self.offset(node.end_byte)

    def node_text(self, node: Node) -> str:
        return self.text[self.start(node):self.end(node)]


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        n = stack.pop()
        if n.type == "ERROR" or n.is_missing:
            return n
        if n.has_error:
            stack.extend(reversed(n.children))
    return None


def _out_of_range_escape(parsed: ParsedSource) -> Optional[Node]:
    """First \\u{...} escape above U+10FFFF; the grammar accepts any length."""
    if "\\u{" not in parsed.text:
        return None
    for n in walk(parsed.root):
        if n.type != "escape_sequence":
            continue
        raw = parsed.node_text(n)
        if raw.startswith("\\u{") and int(raw[3:-1], 16) > MAX_CODE_POINT:
            return n
    return None


def _parse_error(parsed: ParsedSource, offset: int, message: str) -> SourceParseError:
    loc = LineIndex(parsed.text).locate(offset)
    lines = parsed.text.split("\n")
    return SourceParseError(
        message,
        line=loc.line,
        column=loc.column,
        filename=parsed.filename,
        line_text=lines[loc.line - 1] if loc.line <= len(lines) else "",
    )


def parse_source(text: str, filename: Optional[str] = None) -> ParsedSource:
    """
    Parse JavaScript text.

    Raises SourceParseError when the text is not syntactically valid;
    the extraction services only ever see complete trees.
    """
    parser = Parser(LANGUAGE)
    tree = parser.parse(text.encode("utf-8"))
    parsed = ParsedSource(text=text, tree=tree, filename=filename)

    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        if bad.is_missing:
            message = f"Missing {bad.type!r}"
        else:
            token = parsed.node_text(bad).split(None, 1)
            message = f"Unexpected token {token[0][:30]!r}" if token else "Unexpected token"
        raise _parse_error(parsed, parsed.start(bad), message)

    escape = _out_of_range_escape(parsed)
    if escape is not None:
        raise _parse_error(parsed, parsed.start(escape), "Code point out of bounds")

    return parsed
