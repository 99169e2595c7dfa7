from typing import Any, Dict, List, Optional

from tree_sitter import Node

from cypress_extractor.core.logging import logger
from cypress_extractor.models.schemas import ArgumentInfo, CommandUsage, OtherCall
from cypress_extractor.services.callee import (
    CALL_MARKER,
    name_anchor,
    strip_call_marker,
)
from cypress_extractor.services.js_ast import (
    NodeKind,
    ParsedSource,
    call_arguments,
    call_callee,
    kind_name,
    kind_of,
)
from cypress_extractor.services.literals import NO_VALUE, materialize
from cypress_extractor.services.vocabulary import Vocabulary


def describe_arguments(args: List[Node], source: ParsedSource) -> List[ArgumentInfo]:
    return [
        ArgumentInfo(type=kind_name(arg), start=source.start(arg), end=source.end(arg))
        for arg in args
    ]


def literal_arguments(args: List[Node], source: ParsedSource) -> Optional[Dict[int, Any]]:
    """Sparse index -> value map of the arguments that are fully literal."""
    values: Dict[int, Any] = {}
    for index, arg in enumerate(args):
        value = materialize(arg, source)
        if value is not NO_VALUE:
            values[index] = value
    return values or None


def match_command_usage(
    call: Node,
    segments: List[str],
    source: ParsedSource,
    vocabulary: Vocabulary,
) -> Optional[CommandUsage]:
    """
    Build a CommandUsage for ``cy.<...>.name(...)`` calls.

    Every segment between the command root and the final name must be an
    invocation: ``cy.get().type()`` chains, ``cy.state.foo()`` reads a
    property of ``cy`` and is not a command.
    """
    if len(segments) < 2 or segments[0] != vocabulary.command_root:
        return None

    callee = call_callee(call)
    if callee is None or kind_of(callee) is not NodeKind.MEMBER:
        return None

    parents, name = segments[1:-1], segments[-1]
    for segment in parents:
        if not segment.endswith(CALL_MARKER):
            logger.debug(
                f"Ignoring property access on '{vocabulary.command_root}': "
                f"{'.'.join(segments)} at {source.start(call)}"
            )
            return None

    args = call_arguments(call)
    return CommandUsage(
        name=name,
        start=source.start(callee.child_by_field_name("property")),
        end=source.end(call),
        arguments=describe_arguments(args, source),
        literal_arguments=literal_arguments(args, source),
        chain=[strip_call_marker(segment) for segment in parents],
    )


def build_other_call(call: Node, dotted: str, source: ParsedSource) -> OtherCall:
    anchor = name_anchor(call)
    return OtherCall(
        name=dotted,
        start=source.start(anchor) if anchor is not None else source.start(call),
        root_start=source.start(call),
        end=source.end(call),
        arguments=describe_arguments(call_arguments(call), source),
    )
