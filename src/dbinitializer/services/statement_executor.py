"""Statement execution service for dbinitializer."""

from dbinitializer.errors import DatabaseError
from dbinitializer.models import ExecutionOutcome, Statement


class StatementExecutor:
    """Applies single statements and classifies the outcome."""

    def __init__(self, logger):
        self.logger = logger

    def execute(self, statement: Statement, connection) -> ExecutionOutcome:
        self.logger.debug(
            "Executing statement %s of %s (line %s): %s",
            statement.index,
            statement.source_name,
            statement.line,
            statement.excerpt,
        )
        try:
            connection.execute(statement.text)
        except DatabaseError as exc:
            outcome = ExecutionOutcome.failed(statement, exc)
            self.logger.debug("Statement %s of %s failed: %s", statement.index, statement.source_name, exc)
            return outcome
        return ExecutionOutcome.succeeded(statement)
