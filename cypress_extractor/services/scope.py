from typing import Any, Callable, Iterable, List

from tree_sitter import Node

from cypress_extractor.models.schemas import ScopeFrame
from cypress_extractor.services.callee import resolve_callee
from cypress_extractor.services.js_ast import (
    NodeKind,
    ParsedSource,
    call_arguments,
    is_call,
    kind_name,
    kind_of,
    unwrap,
)
from cypress_extractor.services.literals import (
    NO_VALUE,
    literal_value,
    placeholder,
    render_template,
)
from cypress_extractor.services.vocabulary import Vocabulary, is_only, is_skip


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def infer_scope_name(call: Node, source: ParsedSource) -> str:
    """
    Display name of a test or suite call, taken from its first argument.

    Never fails: a name that cannot be read becomes "[Unparseable: <Kind>]".
    """
    args = call_arguments(call)
    if not args:
        return "[Unparseable: NoArguments]"

    node = unwrap(args[0])
    kind = kind_of(node)

    if kind is NodeKind.LITERAL:
        value = literal_value(node, source)
        if value is not NO_VALUE:
            return _display(value)
    if kind is NodeKind.TEMPLATE:
        rendered = render_template(node, source, strict=False)
        if rendered is not NO_VALUE:
            return rendered
    if kind is NodeKind.IDENTIFIER:
        return placeholder(source.node_text(node))
    return f"[Unparseable: {kind_name(node)}]"


def frame_kind(dotted: str, vocabulary: Vocabulary) -> str:
    base = "test" if vocabulary.is_test(dotted) else "suite"
    if is_skip(dotted):
        return base + "-skip"
    if is_only(dotted):
        return base + "-only"
    return base


def build_scope(
    nodes: Iterable[Node],
    source: ParsedSource,
    vocabulary: Vocabulary,
    include: Callable[[str], bool],
) -> List[ScopeFrame]:
    """
    One frame per call in ``nodes`` (outermost first) whose dotted name
    passes ``include``. Frame flags come from the call's own name only.
    """
    frames: List[ScopeFrame] = []
    for node in nodes:
        if not is_call(node):
            continue
        dotted = resolve_callee(node, source)
        if dotted is None or not include(dotted):
            continue
        frames.append(
            ScopeFrame(
                name=infer_scope_name(node, source),
                kind=frame_kind(dotted, vocabulary),
                start=source.start(node),
                end=source.end(node),
                skip=True if is_skip(dotted) else None,
                only=True if is_only(dotted) else None,
            )
        )
    return frames
