import logging
import uuid
from dataclasses import asdict
from typing import List, Optional, Sequence

from rich.console import Console

from .errors import InitializerError
from .models import InitializationSettings, Phase, RunResult, ScriptLocation
from .services.content_access import ContentAccessService
from .services.location_resolver import LocationResolver
from .services.report import ReportService
from .services.script_splitter import ScriptSplitter
from .services.statement_executor import StatementExecutor

console = Console()
logger = logging.getLogger("dbinitializer")


class DatabaseInitializer:
    """Applies schema scripts, then data scripts, to one database connection."""

    TRANSITIONS = {
        Phase.IDLE: {Phase.RESOLVING_DDL},
        Phase.RESOLVING_DDL: {Phase.EXECUTING_DDL, Phase.ABORTED},
        Phase.EXECUTING_DDL: {Phase.RESOLVING_DML, Phase.ABORTED},
        Phase.RESOLVING_DML: {Phase.EXECUTING_DML, Phase.ABORTED},
        Phase.EXECUTING_DML: {Phase.DONE, Phase.ABORTED},
    }

    def __init__(
        self,
        connection,
        content_access: Optional[ContentAccessService] = None,
        resolver: Optional[LocationResolver] = None,
        splitter: Optional[ScriptSplitter] = None,
        executor: Optional[StatementExecutor] = None,
        report_service: Optional[ReportService] = None,
        output_console: Optional[Console] = None,
    ):
        self.connection = connection
        self.content_access = content_access or ContentAccessService(logger=logger)
        self.resolver = resolver or LocationResolver(self.content_access, logger=logger)
        self.splitter = splitter or ScriptSplitter(logger=logger)
        self.executor = executor or StatementExecutor(logger=logger)
        self.report_service = report_service
        self.console = output_console or console

    def _transition(self, result: RunResult, target: Phase):
        allowed = self.TRANSITIONS.get(result.state, set())
        if target not in allowed:
            raise InitializerError(f"Invalid phase transition: {result.state.value} -> {target.value}")
        logger.debug("Phase %s -> %s", result.state.value, target.value)
        result.state = target

    def _apply_locations(
        self,
        result: RunResult,
        locations: List[ScriptLocation],
        settings: InitializationSettings,
        phase: str,
    ) -> bool:
        for location in locations:
            for handle in location.handles:
                statements = list(self.splitter.split(handle, settings.separator, settings.encoding))
                logger.info("Applying %s script %s (%s statements)", phase, handle.name, len(statements))
                result.scripts.append(handle.name)
                if self.report_service:
                    self.report_service.script_started(phase, handle.name, len(statements))

                for statement in statements:
                    outcome = self.executor.execute(statement, self.connection)
                    if outcome.success:
                        result.succeeded.append(statement)
                        continue

                    result.failures.append(outcome)
                    if self.report_service:
                        self.report_service.record_failure(phase, outcome)

                    if not settings.continue_on_error:
                        logger.error(outcome.describe())
                        return False
                    logger.warning("Continuing after failed statement. %s", outcome.describe())

        return True

    def _run_phase(
        self,
        result: RunResult,
        resolving: Phase,
        executing: Phase,
        patterns: Sequence[str],
        settings: InitializationSettings,
        phase: str,
    ) -> bool:
        self._transition(result, resolving)
        locations = self.resolver.resolve(patterns)

        self._transition(result, executing)
        if not locations:
            logger.info("No %s scripts to apply.", phase)
            return True

        self.console.print(f"[blue]Applying {phase} scripts...[/blue]")
        return self._apply_locations(result, locations, settings, phase)

    def _finalize_report(self, result: RunResult, status: str, error: Optional[str] = None):
        if self.report_service:
            self.report_service.finalize(status, result.statements_executed, error=error)

    def run(self, settings: InitializationSettings) -> RunResult:
        result = RunResult()
        run_id = uuid.uuid4().hex[:10]
        logger.info("Starting database initialization run %s", run_id)
        if self.report_service:
            self.report_service.start_run(run_id, asdict(settings))

        try:
            phases = (
                (Phase.RESOLVING_DDL, Phase.EXECUTING_DDL, settings.ddl_locations, "schema"),
                (Phase.RESOLVING_DML, Phase.EXECUTING_DML, settings.dml_locations, "data"),
            )
            for resolving, executing, patterns, phase in phases:
                if not self._run_phase(result, resolving, executing, patterns, settings, phase):
                    self._transition(result, Phase.ABORTED)
                    self.console.print(
                        "[bold red]Initialization aborted after a failed statement.[/bold red]"
                    )
                    self._finalize_report(result, "aborted")
                    return result

            self._transition(result, Phase.DONE)

        except InitializerError as exc:
            if result.state in self.TRANSITIONS and Phase.ABORTED in self.TRANSITIONS[result.state]:
                result.state = Phase.ABORTED
            logger.error("Initialization aborted: %s", exc)
            self._finalize_report(result, "aborted", error=str(exc))
            raise

        if result.failures:
            self.console.print(
                f"[yellow]Initialization finished with {len(result.failures)} failed statement(s).[/yellow]"
            )
            self._finalize_report(result, "failed")
        else:
            self.console.print(
                f"[green]Initialization complete: {result.statements_executed} statement(s) applied.[/green]"
            )
            self._finalize_report(result, "done")

        return result
