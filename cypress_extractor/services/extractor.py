"""
Extract the structure of a Cypress test file from its syntax tree.

A single ancestor-tracked walk classifies every resolvable call as, in
priority order:

- command definition   Cypress.Commands.add("name", [options,] fn)
- command usage        cy.visit(...), cy.get(...).type(...)
- test case            it("name", fn), it.only(...), it.skip(...)
- hook                 before(fn), beforeEach(fn), after(fn), afterEach(fn)

Anything else is ignored. Structural problems that do not stop the walk
are collected as diagnostics; a non-literal command name is raised.
"""

from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from cypress_extractor.core.errors import InvalidCommandNameError
from cypress_extractor.core.logging import logger
from cypress_extractor.models.schemas import (
    AnalysisResult,
    AnalyzeOptions,
    CommandDefinition,
    CommandUsage,
    Hook,
    ParseDiagnostic,
    TestCase,
)
from cypress_extractor.services.callee import resolve_callee, resolve_callee_segments
from cypress_extractor.services.commands import match_command_usage
from cypress_extractor.services.inner_calls import nested_fields
from cypress_extractor.services.js_ast import (
    ParsedSource,
    call_arguments,
    is_call,
    is_function,
    kind_name,
    unwrap,
    walk_with_ancestors,
)
from cypress_extractor.services.literals import string_value
from cypress_extractor.services.scenarios import run_scenario_extension
from cypress_extractor.services.scope import build_scope
from cypress_extractor.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary


def _by_position(record):
    return (record.start, record.end)


class FileExtractor:
    """Accumulates the records of one parsed file."""

    def __init__(
        self,
        source: ParsedSource,
        options: AnalyzeOptions,
        vocabulary: Vocabulary,
    ):
        self.source = source
        self.options = options
        self.vocabulary = vocabulary

        self.added: List[CommandDefinition] = []
        self.used: List[CommandUsage] = []
        self.tests: List[TestCase] = []
        self.hooks: Dict[str, List[Hook]] = {kind: [] for kind in vocabulary.hooks}
        self.errors: List[ParseDiagnostic] = []

    # -------------------------------------------------
    # Walk
    # -------------------------------------------------
    def run(self) -> AnalysisResult:
        for node, ancestors in walk_with_ancestors(self.source.root):
            if not is_call(node):
                continue

            segments = resolve_callee_segments(node, self.source)
            if segments is None:
                continue

            self._classify(node, segments, ancestors)

        return self._result()

    def _classify(self, call: Node, segments: List[str], ancestors: Tuple[Node, ...]) -> None:
        find = self.options.find
        dotted = ".".join(segments)

        if dotted == self.vocabulary.registration_path:
            if find.added:
                self._add_definition(call)

        elif dotted.startswith(self.vocabulary.command_prefix):
            if find.used:
                usage = match_command_usage(call, segments, self.source, self.vocabulary)
                if usage is not None:
                    self.used.append(usage)

        elif self.vocabulary.is_test(dotted):
            if find.tests:
                self._add_test(call, dotted, ancestors)

        elif self.vocabulary.is_hook(dotted):
            if find.hooks:
                self._add_hook(call, dotted, ancestors)

    def _error(self, message: str, node: Node) -> None:
        self.errors.append(ParseDiagnostic(message=message, location=self.source.start(node)))

    def _nested(self, func: Node) -> dict:
        return nested_fields(
            func,
            self.source,
            self.vocabulary,
            self.options.include_nested_calls,
        )

    # -------------------------------------------------
    # Command definitions
    # -------------------------------------------------
    def _add_definition(self, call: Node) -> None:
        registration = self.vocabulary.registration_path
        args = call_arguments(call)

        name_node = unwrap(args[0]) if args else None
        if name_node is None or name_node.type != "string":
            found = kind_name(name_node) if name_node is not None else "nothing"
            raise InvalidCommandNameError(
                f"{registration}: command name must be a literal string, found {found}",
                location=self.source.start(call),
                filename=self.source.filename,
            )

        # the implementation is always last: add(name, [options,] fn)
        func = unwrap(args[-1])
        if len(args) < 2 or not is_function(func):
            self._error(
                f"{registration}: function expected as last argument, found {kind_name(func)}",
                args[-1],
            )
            return

        self.added.append(
            CommandDefinition(
                name=string_value(name_node, self.source),
                start=self.source.start(call),
                end=self.source.end(call),
                **self._nested(func),
            )
        )

    # -------------------------------------------------
    # Tests
    # -------------------------------------------------
    def _add_test(self, call: Node, dotted: str, ancestors: Tuple[Node, ...]) -> None:
        args = call_arguments(call)
        if len(args) < 2:
            self._error(f"'{dotted}' has insufficient number of arguments", call)
            return

        func = unwrap(args[1])
        if not is_function(func):
            self._error(
                f"'{dotted}' expects a function as second argument, found {kind_name(func)}",
                args[1],
            )
            return

        scope = build_scope(
            ancestors + (call,),
            self.source,
            self.vocabulary,
            self.vocabulary.is_test_or_suite,
        )
        skip = any(frame.skip for frame in scope)
        only = any(frame.only for frame in scope)

        self.tests.append(
            TestCase(
                name=scope[-1].name,
                scope=scope,
                start=self.source.start(call),
                end=self.source.end(call),
                func_start=self.source.start(func),
                func_end=self.source.end(func),
                skip=True if skip else None,
                only=True if only else None,
                **self._nested(func),
            )
        )

    # -------------------------------------------------
    # Hooks
    # -------------------------------------------------
    def _add_hook(self, call: Node, dotted: str, ancestors: Tuple[Node, ...]) -> None:
        args = call_arguments(call)

        # before(42), before("x", fn): most likely an unrelated function
        if len(args) != 1 or not is_function(args[0]):
            logger.debug(
                f"Not a hook: '{dotted}' with {len(args)} argument(s) at {self.source.start(call)}"
            )
            return

        for ancestor in ancestors:
            if not is_call(ancestor):
                continue
            name = resolve_callee(ancestor, self.source)
            if name is not None and self.vocabulary.is_test(name):
                logger.debug(
                    f"Not a hook: '{dotted}' inside test body at {self.source.start(call)}"
                )
                return

        func = unwrap(args[0])
        self.hooks[dotted].append(
            Hook(
                scope=build_scope(
                    ancestors,
                    self.source,
                    self.vocabulary,
                    self.vocabulary.is_test_or_suite,
                ),
                start=self.source.start(call),
                end=self.source.end(call),
                func_start=self.source.start(func),
                func_end=self.source.end(func),
                **self._nested(func),
            )
        )

    # -------------------------------------------------
    # Result
    # -------------------------------------------------
    def _result(self) -> AnalysisResult:
        find = self.options.find
        return AnalysisResult(
            added=sorted(self.added, key=_by_position) if find.added else None,
            used=sorted(self.used, key=_by_position) if find.used else None,
            tests=sorted(self.tests, key=_by_position) if find.tests else None,
            hooks=(
                {kind: sorted(found, key=_by_position) for kind, found in self.hooks.items()}
                if find.hooks
                else None
            ),
            errors=sorted(self.errors, key=lambda e: e.location),
        )


def empty_result(options: AnalyzeOptions, vocabulary: Vocabulary) -> AnalysisResult:
    find = options.find
    return AnalysisResult(
        added=[] if find.added else None,
        used=[] if find.used else None,
        tests=[] if find.tests else None,
        hooks={kind: [] for kind in vocabulary.hooks} if find.hooks else None,
        scenarios=[] if options.scenarios else None,
        errors=[],
    )


def analyze(
    source: Optional[ParsedSource],
    options: Optional[AnalyzeOptions] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> AnalysisResult:
    """
    Analyse one parsed file.

    ``source`` may be None (a skipped file), which gives an empty result.
    The scenario-factory pass runs as a second walk when enabled and its
    records and diagnostics are merged into the result.
    """
    options = options or AnalyzeOptions()
    vocabulary = vocabulary or DEFAULT_VOCABULARY

    if source is None:
        return empty_result(options, vocabulary)

    result = FileExtractor(source, options, vocabulary).run()

    if not options.scenarios:
        return result

    report = run_scenario_extension(
        source,
        vocabulary,
        include_nested_calls=options.include_nested_calls,
    )
    return result.model_copy(
        update={
            "scenarios": report.scenarios,
            "errors": sorted(result.errors + report.errors, key=lambda e: e.location),
        }
    )
