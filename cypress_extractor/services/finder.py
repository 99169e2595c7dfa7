from dataclasses import dataclass, field
from typing import List, Mapping

from cypress_extractor.models.schemas import AnalysisResult
from cypress_extractor.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary


@dataclass
class CommandMatch:
    """A definition or usage of a command, located in a file."""

    filename: str
    start: int
    end: int
    chain: List[str] = field(default_factory=list)


@dataclass
class CommandLookup:
    name: str
    definitions: List[CommandMatch] = field(default_factory=list)
    usages: List[CommandMatch] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.definitions and not self.usages:
            return "missing"
        if not self.definitions:
            return "undefined"
        if len(self.definitions) > 1:
            return "duplicate"
        if not self.usages:
            return "unused"
        return "ok"


def find_command(name: str, results: Mapping[str, AnalysisResult]) -> CommandLookup:
    """
    Collect definitions and usages of one command across per-file results.

    Results must have been computed with definitions and usages enabled.
    """
    lookup = CommandLookup(name=name)

    for filename, result in results.items():
        for definition in result.added or []:
            if definition.name == name:
                lookup.definitions.append(
                    CommandMatch(filename=filename, start=definition.start, end=definition.end)
                )
        for usage in result.used or []:
            if usage.name == name:
                lookup.usages.append(
                    CommandMatch(
                        filename=filename,
                        start=usage.start,
                        end=usage.end,
                        chain=list(usage.chain),
                    )
                )

    return lookup


def format_usage(name: str, chain: List[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> str:
    """cy.get().find().click() for usage 'click' with chain ['get', 'find']."""
    links = "".join(f"{link}()." for link in chain)
    return f"{vocabulary.command_prefix}{links}{name}()"
