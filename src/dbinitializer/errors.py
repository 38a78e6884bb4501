"""Domain errors for dbinitializer."""


class InitializerError(RuntimeError):
    """Raised when database initialization cannot continue safely."""


class LocationNotFoundError(InitializerError):
    """A required script location resolved to no scripts."""

    def __init__(self, location: str, message: str):
        super().__init__(message)
        self.location = location


class ScriptEncodingError(InitializerError):
    """Script bytes could not be decoded with the configured encoding."""

    def __init__(self, script: str, encoding: str, message: str):
        super().__init__(message)
        self.script = script
        self.encoding = encoding


class UnterminatedScriptError(InitializerError):
    """A script ended inside a quoted literal or a block comment."""

    def __init__(self, script: str, mode: str, line: int, message: str):
        super().__init__(message)
        self.script = script
        self.mode = mode
        self.line = line


class DatabaseError(InitializerError):
    """Raised by connection capabilities when the database rejects a statement."""


class StatementExecutionError(InitializerError):
    """A statement failed against the database."""

    def __init__(self, outcome, message: str):
        super().__init__(message)
        self.outcome = outcome


class CommandTimeoutError(InitializerError):
    """An external command did not finish within its timeout."""
