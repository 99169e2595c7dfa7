"""
Names that make up the test-suite vocabulary recognised by the extractor.

The defaults describe a stock Cypress + Mocha suite. Deployments can add
aliases (``specify``, ``context``) through the settings.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from cypress_extractor.core.config import Settings


SKIP_SUFFIX = ".skip"
ONLY_SUFFIX = ".only"


def _in_family(name: str, identifiers: Iterable[str]) -> bool:
    return any(name == ident or name.startswith(ident + ".") for ident in identifiers)


def is_skip(name: str) -> bool:
    return name.endswith(SKIP_SUFFIX)


def is_only(name: str) -> bool:
    return name.endswith(ONLY_SUFFIX)


@dataclass(frozen=True)
class Vocabulary:
    registration_path: str = "Cypress.Commands.add"
    command_root: str = "cy"
    test_identifiers: Tuple[str, ...] = ("it",)
    suite_identifiers: Tuple[str, ...] = ("describe",)
    hooks: Tuple[str, ...] = ("before", "beforeEach", "after", "afterEach")
    scenario_prefix: str = "expectStandardScenariosFor"
    scenario_fn_suffix: str = "Fn"

    @classmethod
    def from_settings(cls, settings: Settings) -> "Vocabulary":
        return cls(
            registration_path=settings.COMMAND_REGISTRATION_PATH,
            command_root=settings.COMMAND_ROOT,
            test_identifiers=tuple(settings.TEST_IDENTIFIERS),
            suite_identifiers=tuple(settings.SUITE_IDENTIFIERS),
            hooks=tuple(settings.HOOK_NAMES),
            scenario_prefix=settings.SCENARIO_PREFIX,
            scenario_fn_suffix=settings.SCENARIO_FN_SUFFIX,
        )

    @property
    def command_prefix(self) -> str:
        return self.command_root + "."

    def is_test(self, name: str) -> bool:
        return _in_family(name, self.test_identifiers)

    def is_suite(self, name: str) -> bool:
        return _in_family(name, self.suite_identifiers)

    def is_test_or_suite(self, name: str) -> bool:
        return self.is_test(name) or self.is_suite(name)

    def is_hook(self, name: str) -> bool:
        # exact match only: "before.foo" is not a hook
        return name in self.hooks

    def is_scenario(self, name: str) -> bool:
        return name.startswith(self.scenario_prefix)


DEFAULT_VOCABULARY = Vocabulary()
