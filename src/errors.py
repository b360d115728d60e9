from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Bytes of context shown on each side of the offending span.
DIAGNOSTIC_WINDOW = 32


class RESPProtocolError(ValueError):
    """Base class for every codec failure."""


class EncodeError(RESPProtocolError):
    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.message = message
        self.offset = offset
        super().__init__(message if offset is None else f"{message} (offset {offset})")


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    offset: int
    length: int
    message: str


class ParseError(RESPProtocolError):
    """
    A decode failure pinned to a span of the input buffer.

    `offset` and `length` index into `source`, the buffer handed to the
    decoder. The span may start at len(source) when the input ran out.
    """

    kind = "parse_error"

    def __init__(self, message: str, *, offset: int, length: int = 1, source: bytes = b"") -> None:
        self.message = message
        self.offset = offset
        self.length = length
        self.source = source
        super().__init__(f"{message} at offset {offset}")

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(self.kind, self.offset, self.length, self.message)


class UnexpectedByte(ParseError):
    kind = "unexpected_byte"

    def __init__(self, offset: int, *, length: int = 2, source: bytes = b"", message: str = "expected CRLF") -> None:
        super().__init__(message, offset=offset, length=length, source=source)


class UnexpectedEndOfInput(ParseError):
    """
    `needed` is the smallest buffer length that could let decoding get
    further: the end of a declared bulk payload, or one more byte.
    """

    kind = "unexpected_end_of_input"

    def __init__(
        self,
        offset: int,
        *,
        source: bytes = b"",
        needed: Optional[int] = None,
        message: str = "the input ended unexpectedly",
    ) -> None:
        self.needed = offset + 1 if needed is None else needed
        super().__init__(message, offset=offset, length=1, source=source)


class UnexpectedType(ParseError):
    kind = "unexpected_type"

    def __init__(self, expected: str, got: str, *, offset: int, length: int, source: bytes = b"") -> None:
        self.expected = expected
        self.got = got
        super().__init__(
            f"expected type {expected} but got {got!r}",
            offset=offset,
            length=length,
            source=source,
        )


class UnexpectedValue(ParseError):
    kind = "unexpected_value"

    def __init__(self, expected: str, got: object, *, offset: int, length: int, source: bytes = b"") -> None:
        self.expected = expected
        self.got = got
        super().__init__(
            f"expected value to be {expected} but got {got}",
            offset=offset,
            length=length,
            source=source,
        )


class UnknownTag(ParseError):
    kind = "unknown_tag"

    def __init__(self, tag: int, *, offset: int, source: bytes = b"") -> None:
        self.tag = tag
        super().__init__(f"unknown type tag {bytes([tag])!r}", offset=offset, length=1, source=source)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _escape(byte: int) -> str:
    if byte == 0x0D:
        return "\\r"
    if byte == 0x0A:
        return "\\n"
    if 0x20 <= byte < 0x7F:
        return chr(byte)
    return f"\\x{byte:02x}"


def render_diagnostic(error: ParseError) -> str:
    """
    Render the error as the offending slice of input with a caret run
    under the span, e.g.

        error[unexpected_byte]: expected CRLF at offset 3
          | +OK\\r?
          |    ^^^
    """
    source = error.source
    start = max(0, error.offset - DIAGNOSTIC_WINDOW)
    end = min(len(source), error.offset + error.length + DIAGNOSTIC_WINDOW)

    line = "..." if start > 0 else ""
    column = len(line)
    caret_col = None
    caret_width = 0

    for idx in range(start, end):
        piece = _escape(source[idx])
        if idx == error.offset:
            caret_col = column
        if error.offset <= idx < error.offset + error.length:
            caret_width += len(piece)
        line += piece
        column += len(piece)

    # Span begins past the last byte: point just after the input.
    if caret_col is None:
        caret_col = column
    if end < len(source):
        line += "..."

    marker = " " * caret_col + "^" * max(1, caret_width)
    return f"error[{error.kind}]: {error}\n  | {line}\n  | {marker}"
