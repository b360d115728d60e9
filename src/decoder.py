from __future__ import annotations

from typing import Optional

from errors import (
    UnexpectedByte,
    UnexpectedEndOfInput,
    UnexpectedType,
    UnexpectedValue,
    UnknownTag,
)
from protocol import (
    CRLF,
    INT64_MAX,
    INT64_MIN,
    MAX_BULK_LENGTH,
    NULL,
    BulkString,
    Null,
    RESPArray,
    RESPError,
    RESPValue,
    SimpleString,
)

MAX_DEPTH = 256


class Cursor:
    """
    Read position over an immutable buffer. Owns nothing; every read is
    bounds-checked and failures are raised against the original buffer.
    """

    __slots__ = ("data", "position")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def has_bytes(self) -> bool:
        return self.position < len(self.data)

    def is_at_crlf(self) -> bool:
        if self.remaining < 2:
            return False
        return self.data[self.position] == 0x0D and self.data[self.position + 1] == 0x0A

    def end_of_input(self, needed: Optional[int] = None) -> UnexpectedEndOfInput:
        return UnexpectedEndOfInput(len(self.data), source=self.data, needed=needed)

    def next_byte(self) -> int:
        if not self.has_bytes():
            raise self.end_of_input()
        byte = self.data[self.position]
        self.position += 1
        return byte

    def consume_crlf(self) -> None:
        if self.is_at_crlf():
            self.position += 2
            return

        # "" or a lone "\r" could still become CRLF with more input.
        if CRLF.startswith(self.data[self.position :]):
            raise self.end_of_input()

        raise UnexpectedByte(self.position, length=min(2, self.remaining), source=self.data)

    def read_line(self) -> tuple[int, bytes]:
        """Return (start offset, bytes up to the next CRLF) and step past the CRLF."""
        start = self.position
        idx = self.data.find(CRLF, start)

        if idx == -1:
            raise self.end_of_input()

        self.position = idx + 2
        return start, self.data[start:idx]

    def take(self, count: int) -> bytes:
        if self.remaining < count:
            # The payload and its CRLF must all arrive before anything changes.
            raise self.end_of_input(needed=self.position + count + 2)

        chunk = self.data[self.position : self.position + count]
        self.position += count
        return chunk


def decode(data: bytes) -> RESPValue:
    """
    Decode exactly one RESP message. The buffer must hold the whole
    message and nothing after it.
    """
    value, consumed = decode_prefix(data)

    if consumed != len(data):
        raise UnexpectedByte(
            consumed,
            length=len(data) - consumed,
            source=bytes(data),
            message="trailing bytes after message",
        )

    return value


def decode_prefix(data: bytes) -> tuple[RESPValue, int]:
    """Decode the message at the start of `data`; return it with the number of bytes it used."""
    cursor = Cursor(bytes(data))
    value = _parse_value(cursor, 0)
    return value, cursor.position


def _parse_value(cursor: Cursor, depth: int) -> RESPValue:
    tag_at = cursor.position
    tag = cursor.next_byte()

    match chr(tag):
        case "+":
            return _parse_simple_string(cursor)
        case "-":
            return _parse_error(cursor)
        case ":":
            return _parse_integer(cursor)
        case "$":
            return _parse_bulk_string(cursor)
        case "*":
            return _parse_array(cursor, depth)
        case _:
            raise UnknownTag(tag, offset=tag_at, source=cursor.data)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def _parse_simple_string(cursor: Cursor) -> SimpleString:
    _, line = cursor.read_line()
    return SimpleString(_text(line))


def _parse_error(cursor: Cursor) -> RESPError:
    _, line = cursor.read_line()
    return RESPError(_text(line))


def _parse_int(cursor: Cursor) -> tuple[int, int]:
    """Read a signed decimal lexeme up to CRLF; return (value, start offset)."""
    start, lexeme = cursor.read_line()
    digits = lexeme[1:] if lexeme.startswith(b"-") else lexeme

    if not digits or not digits.isdigit():
        raise UnexpectedType(
            "int",
            lexeme.decode("utf-8", "backslashreplace"),
            offset=start,
            length=len(lexeme),
            source=cursor.data,
        )

    value = int(lexeme)

    if not INT64_MIN <= value <= INT64_MAX:
        raise UnexpectedType(
            "int",
            lexeme.decode("ascii"),
            offset=start,
            length=len(lexeme),
            source=cursor.data,
        )

    return value, start


def _parse_integer(cursor: Cursor) -> int:
    value, _ = _parse_int(cursor)
    return value


def _check_length(cursor: Cursor, length: int, start: int) -> None:
    if length < -1:
        raise UnexpectedValue(
            "integer >= -1",
            length,
            offset=start,
            length=cursor.position - 2 - start,
            source=cursor.data,
        )


def _parse_bulk_string(cursor: Cursor) -> BulkString | Null:
    length, start = _parse_int(cursor)

    if length == -1:
        return NULL

    _check_length(cursor, length, start)

    if length > MAX_BULK_LENGTH:
        raise UnexpectedValue(
            f"integer <= {MAX_BULK_LENGTH}",
            length,
            offset=start,
            length=cursor.position - 2 - start,
            source=cursor.data,
        )

    content = cursor.take(length)
    cursor.consume_crlf()

    return BulkString(content)


def _parse_array(cursor: Cursor, depth: int) -> RESPArray | Null:
    count, start = _parse_int(cursor)

    if count == -1:
        return NULL

    _check_length(cursor, count, start)

    if depth >= MAX_DEPTH:
        raise UnexpectedValue(
            f"nesting depth <= {MAX_DEPTH}",
            depth + 1,
            offset=start - 1,
            length=1,
            source=cursor.data,
        )

    items = []
    for _ in range(count):
        items.append(_parse_value(cursor, depth + 1))

    return RESPArray(tuple(items))
