from dataclasses import dataclass, field
from typing import List

from tree_sitter import Node

from cypress_extractor.models.schemas import CommandUsage, OtherCall
from cypress_extractor.services.callee import resolve_callee_segments
from cypress_extractor.services.commands import build_other_call, match_command_usage
from cypress_extractor.services.js_ast import ParsedSource, is_call, walk
from cypress_extractor.services.vocabulary import Vocabulary


@dataclass
class InnerCalls:
    """Calls found inside a command, test, hook or scenario function body."""

    commands_used: List[CommandUsage] = field(default_factory=list)
    other_calls: List[OtherCall] = field(default_factory=list)


def _by_position(record):
    return (record.start, record.end)


def aggregate_inner_calls(
    func: Node,
    source: ParsedSource,
    vocabulary: Vocabulary,
    commands: bool = True,
    other: bool = True,
) -> InnerCalls:
    """
    Scan every call below ``func``.

    Command usages follow the same rule as top-level usages; other calls
    are the resolvable calls outside the command prefix. This is a plain
    descent, enclosing suites and tests play no part here.
    """
    found = InnerCalls()

    for node in walk(func):
        if not is_call(node):
            continue
        segments = resolve_callee_segments(node, source)
        if segments is None:
            continue

        dotted = ".".join(segments)
        if dotted.startswith(vocabulary.command_prefix):
            if commands:
                usage = match_command_usage(node, segments, source, vocabulary)
                if usage is not None:
                    found.commands_used.append(usage)
        elif other:
            found.other_calls.append(build_other_call(node, dotted, source))

    found.commands_used.sort(key=_by_position)
    found.other_calls.sort(key=_by_position)
    return found


def nested_fields(
    func: Node,
    source: ParsedSource,
    vocabulary: Vocabulary,
    enabled: bool,
) -> dict:
    """Keyword arguments populating commands_used / other_calls on a record."""
    if not enabled:
        return {}
    found = aggregate_inner_calls(func, source, vocabulary)
    return {
        "commands_used": found.commands_used,
        "other_calls": found.other_calls,
    }
