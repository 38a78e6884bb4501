"""
dbinitializer - Ordered SQL script database initialization
"""

__version__ = "0.1.0"

from .core import DatabaseInitializer
from .errors import (
    DatabaseError,
    InitializerError,
    LocationNotFoundError,
    ScriptEncodingError,
    StatementExecutionError,
    UnterminatedScriptError,
)
from .models import InitializationSettings, RunResult

__all__ = [
    "DatabaseInitializer",
    "InitializationSettings",
    "RunResult",
    "InitializerError",
    "DatabaseError",
    "LocationNotFoundError",
    "ScriptEncodingError",
    "StatementExecutionError",
    "UnterminatedScriptError",
]
