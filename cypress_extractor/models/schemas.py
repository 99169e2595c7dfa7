from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Optional, Any, Dict, List, Literal


def utc_timestamp() -> datetime:
    """
    Unified UTC timestamp generator for API logs.

    Returns a timezone-aware UTC datetime without microseconds,
    suitable for MongoDB storage.
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


# -----------------------------------------
# EXTRACTED RECORDS
# -----------------------------------------
# All offsets are character indices into the analysed text, so
# text[start:end] is exactly the matched construct.

class Record(BaseModel):
    """Immutable extraction record serialised with camelCase keys."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ArgumentInfo(Record):
    type: str
    start: int
    end: int


class CommandUsage(Record):
    name: str
    start: int
    end: int
    arguments: List[ArgumentInfo] = Field(default_factory=list)
    literal_arguments: Optional[Dict[int, Any]] = None
    chain: List[str] = Field(default_factory=list)


class OtherCall(Record):
    name: str
    start: int
    root_start: int
    end: int
    arguments: List[ArgumentInfo] = Field(default_factory=list)


class CommandDefinition(Record):
    name: str
    start: int
    end: int
    commands_used: Optional[List[CommandUsage]] = None
    other_calls: Optional[List[OtherCall]] = None


FrameKind = Literal["test", "test-skip", "test-only", "suite", "suite-skip", "suite-only"]


class ScopeFrame(Record):
    name: str
    kind: FrameKind
    start: int
    end: int
    skip: Optional[bool] = None
    only: Optional[bool] = None


class TestCase(Record):
    # keeps pytest from collecting this model as a test class
    __test__ = False

    name: str
    scope: List[ScopeFrame]
    start: int
    end: int
    func_start: int
    func_end: int
    commands_used: Optional[List[CommandUsage]] = None
    other_calls: Optional[List[OtherCall]] = None
    skip: Optional[bool] = None
    only: Optional[bool] = None


class Hook(Record):
    scope: List[ScopeFrame]
    start: int
    end: int
    func_start: int
    func_end: int
    commands_used: Optional[List[CommandUsage]] = None
    other_calls: Optional[List[OtherCall]] = None


class ScenarioFunction(Record):
    name: str
    start: int
    end: int
    func_start: int
    func_end: int
    commands_used: Optional[List[CommandUsage]] = None
    other_calls: Optional[List[OtherCall]] = None


class Scenario(Record):
    name: str
    scope: List[ScopeFrame]
    start: int
    end: int
    functions: List[ScenarioFunction] = Field(default_factory=list)


class ParseDiagnostic(Record):
    message: str
    location: int
    level: Literal["error", "info"] = "error"


class AnalysisResult(Record):
    added: Optional[List[CommandDefinition]] = None
    used: Optional[List[CommandUsage]] = None
    tests: Optional[List[TestCase]] = None
    hooks: Optional[Dict[str, List[Hook]]] = None
    scenarios: Optional[List[Scenario]] = None
    errors: List[ParseDiagnostic] = Field(default_factory=list)


class Location(Record):
    """1-based line and column of a character offset."""

    line: int
    column: int


# -----------------------------------------
# ANALYSIS OPTIONS
# -----------------------------------------
class FindOptions(BaseModel):
    added: bool = True
    used: bool = True
    tests: bool = True
    hooks: bool = True


class AnalyzeOptions(BaseModel):
    find: FindOptions = Field(default_factory=FindOptions)
    # populate commandsUsed / otherCalls on definitions, tests, hooks
    # and scenario functions
    include_nested_calls: bool = True
    scenarios: bool = False


# -----------------------------------------
# API LOG MODEL
# -----------------------------------------
class APILog(BaseModel):
    """
    Stores metadata about API requests served by the extractor.
    """

    timestamp: datetime = Field(default_factory=utc_timestamp)

    # Request info
    method: Optional[str] = None
    path: Optional[str] = None
    query_params: Optional[Dict[str, Any]] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    # Processing info
    duration_ms: Optional[float] = None
    status: Optional[int] = None

    # Extraction-related metadata
    file_name: Optional[str] = None
    file_count: Optional[int] = None
    record_count: Optional[int] = None
    diagnostic_count: Optional[int] = None

    # Errors
    error: Optional[str] = None
    traceback: Optional[str] = None

    model_config = {
        "from_attributes": False
    }
