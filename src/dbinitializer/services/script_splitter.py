"""SQL script splitting service for dbinitializer.

Scripts are scanned one character at a time by a small state machine. The
scanner is in exactly one ``ScanMode`` at any point and ``scan_step`` is the
only place where modes change, so quoting and comment rules can be tested
without touching files or a database.
"""

from enum import Enum
from typing import Iterator, List, NamedTuple

from dbinitializer.constants import (
    BLOCK_COMMENT_END,
    BLOCK_COMMENT_START,
    END_OF_SCRIPT_SEPARATOR,
    FALLBACK_SEPARATOR,
    LINE_COMMENT_PREFIX,
)
from dbinitializer.errors import InitializerError, ScriptEncodingError, UnterminatedScriptError
from dbinitializer.errors_catalog import actionable_error
from dbinitializer.models import ScriptHandle, Statement


class ScanMode(str, Enum):
    NORMAL = "normal"
    SINGLE_QUOTED = "single-quoted"
    DOUBLE_QUOTED = "double-quoted"
    LINE_COMMENT = "line-comment"
    BLOCK_COMMENT = "block-comment"


UNTERMINATED_MODES = {
    ScanMode.SINGLE_QUOTED: "single-quoted literal",
    ScanMode.DOUBLE_QUOTED: "double-quoted literal",
    ScanMode.BLOCK_COMMENT: "block comment",
}

_QUOTE_MODES = {"'": ScanMode.SINGLE_QUOTED, '"': ScanMode.DOUBLE_QUOTED}
_CLOSING_QUOTES = {ScanMode.SINGLE_QUOTED: "'", ScanMode.DOUBLE_QUOTED: '"'}


class ScanStep(NamedTuple):
    """Result of one transition: next mode, text kept, characters consumed, boundary flag."""

    mode: ScanMode
    kept: str
    consumed: int
    boundary: bool = False


def scan_step(mode: ScanMode, text: str, pos: int, separator: str) -> ScanStep:
    char = text[pos]

    if mode == ScanMode.NORMAL:
        if text.startswith(separator, pos):
            return ScanStep(ScanMode.NORMAL, "", len(separator), True)
        if text.startswith(LINE_COMMENT_PREFIX, pos):
            return ScanStep(ScanMode.LINE_COMMENT, "", len(LINE_COMMENT_PREFIX))
        if text.startswith(BLOCK_COMMENT_START, pos):
            return ScanStep(ScanMode.BLOCK_COMMENT, " ", len(BLOCK_COMMENT_START))
        if char in _QUOTE_MODES:
            return ScanStep(_QUOTE_MODES[char], char, 1)
        return ScanStep(ScanMode.NORMAL, char, 1)

    if mode in _CLOSING_QUOTES:
        if char == "\\":
            escaped = text[pos:pos + 2]
            return ScanStep(mode, escaped, len(escaped))
        if char == _CLOSING_QUOTES[mode]:
            return ScanStep(ScanMode.NORMAL, char, 1)
        return ScanStep(mode, char, 1)

    if mode == ScanMode.LINE_COMMENT:
        # The newline is left for NORMAL mode so it can still act as a separator.
        if char == "\n":
            return ScanStep(ScanMode.NORMAL, "", 0)
        return ScanStep(mode, "", 1)

    if text.startswith(BLOCK_COMMENT_END, pos):
        return ScanStep(ScanMode.NORMAL, "", len(BLOCK_COMMENT_END))
    return ScanStep(mode, "", 1)


class ScriptSplitter:
    """Splits decoded scripts into ordered statements."""

    def __init__(self, logger):
        self.logger = logger

    def split(self, handle: ScriptHandle, separator: str, encoding: str) -> Iterator[Statement]:
        if not separator:
            raise InitializerError("Statement separator must be a non-empty string.")

        text = self.decode(handle, encoding)

        if separator == END_OF_SCRIPT_SEPARATOR:
            whole = text.strip()
            if whole:
                yield Statement(text=whole, index=0, line=self._first_line(text), source=handle)
            return

        if not self.contains_separator(text, separator):
            self.logger.debug(
                "Script %s contains no %r separator; splitting on newlines", handle.name, separator
            )
            separator = FALLBACK_SEPARATOR

        yield from self.split_text(text, handle, separator)

    def decode(self, handle: ScriptHandle, encoding: str) -> str:
        raw = handle.read_bytes()
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as exc:
            raise ScriptEncodingError(
                handle.name,
                encoding,
                actionable_error(
                    "script_encoding", script=handle.name, encoding=encoding, reason=exc.reason
                ),
            ) from exc
        return text.lstrip("\ufeff")

    def contains_separator(self, text: str, separator: str) -> bool:
        mode = ScanMode.NORMAL
        pos = 0
        while pos < len(text):
            step = scan_step(mode, text, pos, separator)
            if step.boundary:
                return True
            mode = step.mode
            pos += step.consumed
        return False

    def split_text(self, text: str, source: ScriptHandle, separator: str) -> Iterator[Statement]:
        mode = ScanMode.NORMAL
        pos = 0
        line = 1
        mode_line = 1
        index = 0
        current: List[str] = []
        start_line = None

        while pos < len(text):
            step = scan_step(mode, text, pos, separator)

            if step.boundary:
                statement = "".join(current).strip()
                if statement:
                    yield Statement(text=statement, index=index, line=start_line, source=source)
                    index += 1
                current = []
                start_line = None
            elif step.kept:
                if start_line is None and step.kept.strip():
                    start_line = line
                current.append(step.kept)

            if step.mode != mode:
                mode_line = line
            mode = step.mode
            line += text.count("\n", pos, pos + step.consumed)
            pos += step.consumed

        if mode in UNTERMINATED_MODES:
            description = UNTERMINATED_MODES[mode]
            raise UnterminatedScriptError(
                source.name,
                mode.value,
                mode_line,
                actionable_error(
                    "unterminated_script", script=source.name, mode=description, line=mode_line
                ),
            )

        statement = "".join(current).strip()
        if statement:
            yield Statement(text=statement, index=index, line=start_line, source=source)

    @staticmethod
    def _first_line(text: str) -> int:
        stripped = text.lstrip()
        return text[: len(text) - len(stripped)].count("\n") + 1
