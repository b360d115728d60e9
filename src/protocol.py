from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from errors import EncodeError

CRLF = b"\r\n"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Largest bulk string a server will send.
MAX_BULK_LENGTH = 512 * 1024 * 1024


@dataclass(frozen=True)
class SimpleString:
    value: str


@dataclass(frozen=True)
class BulkString:
    value: bytes


@dataclass(frozen=True)
class RESPArray:
    items: tuple[RESPValue, ...]


@dataclass(frozen=True)
class RESPError:
    message: str


@dataclass(frozen=True)
class Null:
    """
    Absence of a value. Both "$-1" and "*-1" decode to this one variant;
    the wire form does not survive decoding.
    """


NULL = Null()

RESPValue = Union[SimpleString, RESPError, int, BulkString, RESPArray, Null]


def _line(tag: str, text: str) -> bytes:
    raw = text.encode("utf-8", "surrogateescape")

    for marker in (b"\r", b"\n"):
        idx = raw.find(marker)
        if idx != -1:
            raise EncodeError(f"{tag} payload cannot contain CR or LF", offset=idx)

    return tag.encode() + raw + CRLF


def serialize(value: RESPValue) -> bytes:
    match value:
        case bool():
            raise EncodeError("Cannot serialize bool")
        case SimpleString(v):
            return _line("+", v)
        case RESPError(msg):
            return _line("-", msg)
        case int(n):
            if not INT64_MIN <= n <= INT64_MAX:
                raise EncodeError(f"Integer out of 64-bit range: {n}")
            return f":{n}\r\n".encode()
        case Null():
            return b"$-1\r\n"
        case BulkString(v):
            return f"${len(v)}\r\n".encode() + v + CRLF
        case RESPArray(items):
            parts = [f"*{len(items)}\r\n".encode()]
            parts += [serialize(i) for i in items]
            return b"".join(parts)
        case _:
            raise EncodeError(f"Cannot serialize {type(value).__name__}")
