"""
Scenario-factory extension.

A second walk over the tree, enabled per request, with two checks:

- suite bodies may only call tests, suites, hooks and scenario factories;
- ``expectStandardScenariosFor*({ ... })`` calls are parsed into Scenario
  records, one ScenarioFunction per ``*Fn`` property.

Only the callee resolver and the inner-call aggregator are shared with the
base extractor.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node

from cypress_extractor.core.logging import logger
from cypress_extractor.models.schemas import ParseDiagnostic, Scenario, ScenarioFunction
from cypress_extractor.services.callee import resolve_callee
from cypress_extractor.services.inner_calls import nested_fields
from cypress_extractor.services.js_ast import (
    NodeKind,
    ParsedSource,
    call_arguments,
    is_call,
    is_function,
    kind_name,
    kind_of,
    named_children,
    unwrap,
    walk_with_ancestors,
)
from cypress_extractor.services.literals import property_key
from cypress_extractor.services.scope import build_scope
from cypress_extractor.services.vocabulary import Vocabulary


@dataclass
class ScenarioReport:
    scenarios: List[Scenario] = field(default_factory=list)
    errors: List[ParseDiagnostic] = field(default_factory=list)


def _diagnostic(message: str, node: Node, source: ParsedSource, level: str = "error") -> ParseDiagnostic:
    return ParseDiagnostic(message=message, location=source.start(node), level=level)


# -------------------------------------------------
# Suite purity
# -------------------------------------------------
def validate_suite_members(
    call: Node,
    dotted: str,
    source: ParsedSource,
    vocabulary: Vocabulary,
) -> List[ParseDiagnostic]:
    errors: List[ParseDiagnostic] = []
    args = call_arguments(call)

    if len(args) < 2:
        errors.append(
            _diagnostic(f"'{dotted}' has insufficient number of arguments", call, source)
        )
        return errors

    if kind_of(args[0]) is not NodeKind.LITERAL:
        errors.append(
            _diagnostic(
                f"[MAYBE FACTORY] '{dotted}' has non-literal name. "
                f"Assuming this is a test factory. Some checks disabled.",
                call,
                source,
                level="info",
            )
        )
        return errors

    impl = unwrap(args[1])
    if not is_function(impl):
        errors.append(
            _diagnostic(f"function expected, but found {kind_name(impl)}", args[1], source)
        )
        return errors

    body = impl.child_by_field_name("body")
    if body is None or body.type != "statement_block":
        # () => it(...): a single expression, nothing to check
        return errors

    for statement in named_children(body):
        if statement.type != "expression_statement":
            continue
        inner = named_children(statement)
        if not inner or not is_call(unwrap(inner[0])):
            continue

        name = resolve_callee(unwrap(inner[0]), source)
        if name is None:
            continue
        if vocabulary.is_test_or_suite(name) or vocabulary.is_hook(name):
            continue
        if vocabulary.is_scenario(name):
            continue

        errors.append(
            _diagnostic(
                f"[PURE DESCRIBE] '{dotted}' should only call tests or hooks. Found '{name}'",
                statement,
                source,
            )
        )

    return errors


# -------------------------------------------------
# Scenario factories
# -------------------------------------------------
def _scenario_function(
    prop: Node,
    func: Node,
    name: str,
    source: ParsedSource,
    vocabulary: Vocabulary,
    include_nested_calls: bool,
) -> ScenarioFunction:
    return ScenarioFunction(
        name=name,
        start=source.start(prop),
        end=source.end(prop),
        func_start=source.start(func),
        func_end=source.end(func),
        **nested_fields(func, source, vocabulary, include_nested_calls),
    )


def parse_scenario(
    call: Node,
    dotted: str,
    ancestors: Tuple[Node, ...],
    source: ParsedSource,
    vocabulary: Vocabulary,
    include_nested_calls: bool = True,
) -> Tuple[Optional[Scenario], List[ParseDiagnostic]]:
    errors: List[ParseDiagnostic] = []
    suffix = vocabulary.scenario_fn_suffix
    args = call_arguments(call)

    if len(args) != 1:
        errors.append(
            _diagnostic(
                f"{dotted}: Scenario factory should have 1 argument. Found {len(args)}.",
                call,
                source,
            )
        )
        return None, errors

    arg = unwrap(args[0])
    if kind_of(arg) is not NodeKind.OBJECT:
        errors.append(
            _diagnostic(
                f"{dotted}: ObjectExpression expected as argument. Found {kind_name(arg)}.",
                call,
                source,
            )
        )
        return None, errors

    functions: List[ScenarioFunction] = []

    for prop in named_children(arg):
        key = property_key(prop, source)
        if key is None:
            errors.append(
                _diagnostic(
                    f"{dotted}: unsupported property {kind_name(prop)} in scenario factory",
                    prop,
                    source,
                )
            )
            continue

        if prop.type == "method_definition":
            value = prop
        elif prop.type == "pair":
            value = unwrap(prop.child_by_field_name("value"))
        else:
            value = None

        if key.endswith(suffix):
            if prop.type == "shorthand_property_identifier":
                errors.append(
                    _diagnostic(
                        f"{dotted}: Object prop shorthand not allowed for scenario factory - {{ {key} }}",
                        prop,
                        source,
                    )
                )
            elif prop.type == "pair" and not is_function(value):
                errors.append(
                    _diagnostic(
                        f"{dotted}: '{key}' prop value must be a function. Found {kind_name(value)}",
                        value,
                        source,
                    )
                )
            else:
                functions.append(
                    _scenario_function(prop, value, key, source, vocabulary, include_nested_calls)
                )

        elif value is not None and (prop.type == "method_definition" or is_function(value)):
            errors.append(
                _diagnostic(
                    f"{dotted}: '{key}' prop does not end with '*{suffix}'. "
                    f"Must not reference a function",
                    value,
                    source,
                )
            )

    scenario = Scenario(
        name=dotted,
        # hooks and tests do not scope a scenario, only suites do
        scope=build_scope(ancestors, source, vocabulary, vocabulary.is_suite),
        start=source.start(call),
        end=source.end(call),
        functions=functions,
    )
    return scenario, errors


def run_scenario_extension(
    source: ParsedSource,
    vocabulary: Vocabulary,
    include_nested_calls: bool = True,
) -> ScenarioReport:
    report = ScenarioReport()

    for node, ancestors in walk_with_ancestors(source.root):
        if not is_call(node):
            continue
        dotted = resolve_callee(node, source)
        if dotted is None:
            continue

        if vocabulary.is_suite(dotted):
            report.errors.extend(validate_suite_members(node, dotted, source, vocabulary))
        elif vocabulary.is_scenario(dotted):
            scenario, errors = parse_scenario(
                node,
                dotted,
                ancestors,
                source,
                vocabulary,
                include_nested_calls,
            )
            report.errors.extend(errors)
            if scenario is not None:
                report.scenarios.append(scenario)

    logger.debug(
        f"Scenario pass: {len(report.scenarios)} scenario(s), {len(report.errors)} diagnostic(s)"
    )
    return report
