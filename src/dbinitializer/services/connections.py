"""Connection capabilities used to apply statements to a database."""

import sqlite3
from typing import List, Optional, Tuple, Type

from dbinitializer.errors import CommandTimeoutError, DatabaseError, InitializerError


class _ClosingConnection:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        return None


class SqliteConnection(_ClosingConnection):
    """Applies statements to a SQLite database in autocommit mode."""

    def __init__(self, path: str):
        self.path = path
        try:
            self.connection = sqlite3.connect(path, isolation_level=None)
        except sqlite3.Error as exc:
            raise InitializerError(f"Could not open SQLite database '{path}': {exc}") from exc

    def execute(self, statement: str):
        try:
            self.connection.execute(statement)
        except sqlite3.Error as exc:
            raise DatabaseError(str(exc)) from exc

    def close(self):
        self.connection.close()


class DbApiConnection(_ClosingConnection):
    """Wraps any DB-API 2.0 connection, committing after every statement."""

    def __init__(self, connection, error_types: Optional[Tuple[Type[BaseException], ...]] = None):
        self.connection = connection
        if error_types is None:
            error_types = (getattr(connection, "Error", Exception),)
        self.error_types = error_types

    def execute(self, statement: str):
        cursor = self.connection.cursor()
        try:
            cursor.execute(statement)
            self.connection.commit()
        except self.error_types as exc:
            self.connection.rollback()
            raise DatabaseError(str(exc)) from exc
        finally:
            cursor.close()

    def close(self):
        self.connection.close()


class PsqlConnection(_ClosingConnection):
    """Applies statements through the ``psql`` command line client."""

    def __init__(
        self,
        database: str,
        command_runner,
        user: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.database = database
        self.command_runner = command_runner
        self.user = user
        self.host = host
        self.port = port
        self.timeout = timeout

    def build_command(self, statement: str) -> List[str]:
        cmd = ["psql", "-X", "-q", "-v", "ON_ERROR_STOP=1", "-d", self.database]
        if self.user:
            cmd += ["-U", self.user]
        if self.host:
            cmd += ["-h", self.host]
        if self.port:
            cmd += ["-p", str(self.port)]
        return cmd + ["-c", statement]

    def execute(self, statement: str):
        try:
            result = self.command_runner.run(
                self.build_command(statement),
                check=False,
                capture_output=True,
                timeout=self.timeout,
            )
        except CommandTimeoutError as exc:
            raise DatabaseError(str(exc)) from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise DatabaseError(stderr or f"psql exited with status {result.returncode}")
