"""
Linearise call-expression callees into dotted names.

    Cypress.Commands.add(...)   -> "Cypress.Commands.add"
    cy.get(...).type(...)       -> "cy.get().type"
    expect(x).to.equal(1)       -> "expect().to.equal"

A segment followed by CALL_MARKER was itself invoked, which keeps
``cy.a.b`` apart from ``cy.a().b``. Callees built on anything other than
identifiers, member access and calls (array/string/template/new bases,
computed access, ``this``) cannot be linearised unambiguously and resolve
to None; callers treat that as "not a call of interest".
"""

from typing import List, Optional

from tree_sitter import Node

from cypress_extractor.services.js_ast import (
    NodeKind,
    ParsedSource,
    call_callee,
    is_call,
    kind_of,
    unwrap,
)


CALL_MARKER = "()"

_PROPERTY_TYPES = ("property_identifier", "private_property_identifier")


def resolve_callee_segments(call: Node, source: ParsedSource) -> Optional[List[str]]:
    if not is_call(call):
        return None

    node = call_callee(call)
    segments: List[str] = []
    suffix = ""

    while node is not None:
        node = unwrap(node)
        kind = kind_of(node)

        if kind is NodeKind.IDENTIFIER:
            segments.append(source.node_text(node) + suffix)
            segments.reverse()
            return segments

        if kind is NodeKind.MEMBER:
            prop = node.child_by_field_name("property")
            if prop is None or prop.type not in _PROPERTY_TYPES:
                return None
            segments.append(source.node_text(prop) + suffix)
            suffix = ""
            node = node.child_by_field_name("object")

        elif kind is NodeKind.CALL:
            suffix = CALL_MARKER + suffix
            node = call_callee(node)

        else:
            return None

    return None


def resolve_callee(call: Node, source: ParsedSource) -> Optional[str]:
    segments = resolve_callee_segments(call, source)
    if segments is None:
        return None
    return ".".join(segments)


def strip_call_marker(segment: str) -> str:
    if segment.endswith(CALL_MARKER):
        return segment[: -len(CALL_MARKER)]
    return segment


def name_anchor(call: Node) -> Optional[Node]:
    """
    The final identifier of a call's callee: ``b`` in ``a.b()``, ``a`` in
    ``a()()``. Chained usages point at their own name, not the chain root.
    """
    node = call_callee(call)
    while node is not None and is_call(node):
        node = call_callee(node)
    if node is None:
        return None
    if kind_of(node) is NodeKind.MEMBER:
        return node.child_by_field_name("property")
    return node
