"""Shared domain models for dbinitializer."""

import codecs
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from dbinitializer.constants import (
    DEFAULT_ENCODING,
    DEFAULT_SEPARATOR,
    STATEMENT_EXCERPT_LENGTH,
)
from dbinitializer.errors import InitializerError, StatementExecutionError
from dbinitializer.errors_catalog import actionable_error


def _as_locations(value: Optional[Iterable[str]], name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    locations = tuple(value)
    if not all(isinstance(location, str) and location.strip() for location in locations):
        raise InitializerError(f"{name} must be a list of non-empty location strings.")
    return tuple(location.strip() for location in locations)


@dataclass(frozen=True)
class InitializationSettings:
    """Immutable inputs for one initialization run."""

    ddl_locations: Tuple[str, ...] = ()
    dml_locations: Tuple[str, ...] = ()
    continue_on_error: bool = False
    separator: str = DEFAULT_SEPARATOR
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self):
        object.__setattr__(self, "ddl_locations", _as_locations(self.ddl_locations, "ddl_locations"))
        object.__setattr__(self, "dml_locations", _as_locations(self.dml_locations, "dml_locations"))
        object.__setattr__(self, "continue_on_error", bool(self.continue_on_error))

        if not isinstance(self.separator, str) or not self.separator:
            raise InitializerError("Statement separator must be a non-empty string.")

        try:
            codecs.lookup(self.encoding)
        except (LookupError, TypeError) as exc:
            raise InitializerError(f"Unknown script encoding: {self.encoding}") from exc

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "InitializationSettings":
        ddl = values.get("ddl_locations", values.get("schema_locations"))
        dml = values.get("dml_locations", values.get("data_locations"))
        return cls(
            ddl_locations=ddl,
            dml_locations=dml,
            continue_on_error=values.get("continue_on_error", False),
            separator=values.get("separator") or DEFAULT_SEPARATOR,
            encoding=values.get("encoding") or DEFAULT_ENCODING,
        )


@dataclass(frozen=True)
class ScriptHandle:
    """Read-only source of script bytes, identified by name."""

    name: str
    opener: Callable[[], bytes] = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        return self.opener()


@dataclass(frozen=True)
class ScriptLocation:
    pattern: str
    optional: bool
    handles: Tuple[ScriptHandle, ...] = ()


@dataclass(frozen=True)
class Statement:
    """One SQL statement extracted from a script."""

    text: str
    index: int
    line: int
    source: ScriptHandle = field(repr=False)

    @property
    def source_name(self) -> str:
        return self.source.name

    @property
    def excerpt(self) -> str:
        flat = " ".join(self.text.split())
        if len(flat) <= STATEMENT_EXCERPT_LENGTH:
            return flat
        return flat[: STATEMENT_EXCERPT_LENGTH - 3] + "..."


@dataclass(frozen=True)
class ExecutionOutcome:
    statement: Statement
    error: Optional[str] = None
    cause: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def succeeded(cls, statement: Statement) -> "ExecutionOutcome":
        return cls(statement=statement)

    @classmethod
    def failed(cls, statement: Statement, cause: BaseException) -> "ExecutionOutcome":
        return cls(statement=statement, error=str(cause) or type(cause).__name__, cause=cause)

    def describe(self) -> str:
        return actionable_error(
            "statement_failed",
            index=self.statement.index,
            script=self.statement.source_name,
            line=self.statement.line,
            error=self.error,
            excerpt=self.statement.excerpt,
        )


class Phase(str, Enum):
    IDLE = "idle"
    RESOLVING_DDL = "resolving_ddl"
    EXECUTING_DDL = "executing_ddl"
    RESOLVING_DML = "resolving_dml"
    EXECUTING_DML = "executing_dml"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunResult:
    """Aggregate outcome of one initialization run."""

    state: Phase = Phase.IDLE
    succeeded: List[Statement] = field(default_factory=list)
    failures: List[ExecutionOutcome] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)

    @property
    def statements_executed(self) -> int:
        return len(self.succeeded) + len(self.failures)

    @property
    def success(self) -> bool:
        return self.state == Phase.DONE and not self.failures

    def raise_for_failure(self):
        if not self.failures:
            return
        first = self.failures[0]
        raise StatementExecutionError(first, first.describe()) from first.cause
