"""Open documents held as lists of lines, updated by incremental edits."""

from __future__ import annotations

from dataclasses import dataclass, field

from cudals.lsp import TextDocumentContentChangeEvent

_LINE_BREAKS = ("\n", "\r\n", "\n\n")


class DiffError(Exception):
    """Raised when an edit cannot be applied to a document."""


class DocumentNotFoundError(LookupError):
    """Raised when an edit names a document that is not open."""


@dataclass(frozen=True)
class Location:
    line: int = 0
    character: int = 0


@dataclass(frozen=True)
class Diff:
    start: Location
    end: Location
    text: str


def new_diff(change: TextDocumentContentChangeEvent) -> Diff:
    """Build a diff from a protocol content change."""
    return Diff(
        start=Location(change.range.start.line, change.range.start.character),
        end=Location(change.range.end.line, change.range.end.character),
        text=change.text,
    )


def parse_input(text: str) -> list[str]:
    """Split text into lines.

    Text without a newline is one line; otherwise anything after the last
    newline is dropped.
    """
    parts = text.split("\n")
    if len(parts) == 1:
        return [text]
    return parts[:-1]


def unwind(lines: list[str]) -> str:
    """Join lines back into text, ending each with a newline."""
    return "".join(line + "\n" for line in lines)


def _line(lines: list[str], index: int) -> str:
    if not 0 <= index < len(lines):
        raise DiffError(f"line {index} is out of range")
    return lines[index]


def _check_column(line: str, column: int) -> None:
    if not 0 <= column <= len(line):
        raise DiffError(f"character {column} is out of range")


def _insert_blank_line(lines: list[str], index: int) -> None:
    index = max(index, 0)
    if index > len(lines):
        raise DiffError(f"cannot insert a line at {index}")
    lines.insert(index, "")


def _insert_text(lines: list[str], diff: Diff) -> None:
    start_line, start_char = diff.start.line, diff.start.character
    end_line, end_char = diff.end.line, diff.end.character
    start_len = len(_line(lines, start_line))

    if diff.text in _LINE_BREAKS:
        if start_line == end_line and start_char == start_len and end_char == start_len:
            _insert_blank_line(lines, end_line + 1)
            return
        if start_line == end_line - 1 and start_char == start_len and end_char == 0:
            _insert_blank_line(lines, end_line + 1)
            return
        if (
            start_line == end_line - 1
            and end_char == len(_line(lines, end_char))
            and start_char == 0
        ):
            _insert_blank_line(lines, start_line)
            return
        if start_line == end_line == start_char == end_char == 0:
            _insert_blank_line(lines, start_line)
            return

    if diff.text == "\n" and start_line < end_line:
        raise DiffError("multi-line insertions are not supported")

    if start_line == end_line:
        line = lines[start_line]
        _check_column(line, start_char)
        _check_column(line, end_char)
        lines[start_line] = line[:start_char] + diff.text + line[end_char:]


def _delete_text(lines: list[str], diff: Diff) -> None:
    start_line, start_char = diff.start.line, diff.start.character
    end_line, end_char = diff.end.line, diff.end.character

    if start_line == end_line and start_char == end_char:
        return

    if start_line < end_line and start_char == 0 and end_char == 0:
        if start_line < 0 or end_line > len(lines):
            raise DiffError(f"lines {start_line}..{end_line} are out of range")
        del lines[start_line:end_line]
        return

    if start_line == end_line and start_char < end_char:
        line = _line(lines, start_line)
        _check_column(line, start_char)
        _check_column(line, end_char)
        lines[start_line] = line[:start_char] + line[end_char:]


@dataclass
class State:
    """Open documents keyed by URI, plus the text of the last one touched."""

    documents: dict[str, list[str]] = field(default_factory=dict)
    current_buffer: str = ""

    def open_document(self, uri: str, text: str) -> None:
        """Store a newly opened document."""
        self.documents[uri] = parse_input(text)
        self.current_buffer = unwind(self.documents[uri])

    def apply_diff(self, uri: str, diff: Diff) -> None:
        """Apply one edit to an open document."""
        try:
            lines = self.documents[uri]
        except KeyError:
            raise DocumentNotFoundError(f"Document not found: {uri}") from None
        if diff.text == "":
            _delete_text(lines, diff)
        else:
            _insert_text(lines, diff)
        self.current_buffer = unwind(lines)