from __future__ import annotations

from typing import Union

from errors import EncodeError
from protocol import INT64_MAX, BulkString, RESPArray, RESPValue, serialize

Arg = Union[str, bytes, bytearray, memoryview, int, float]


def _is_integer_token(token: str) -> bool:
    """Only tokens whose text survives the int round trip go out as integers."""
    return token.isascii() and token.isdigit() and str(int(token)) == token and int(token) <= INT64_MAX


def _token_value(token: str) -> RESPValue:
    if _is_integer_token(token):
        return int(token)
    return BulkString(token.encode("utf-8"))


def encode(command: str) -> bytes:
    """
    Encode a space separated command line, e.g. "LLEN mylist".

    Tokens made only of decimal digits, without leading zeros, go out as
    integers, everything else as bulk strings. There is no quoting: quotes
    are sent as-is and a token cannot contain a space. Use encode_args for
    arbitrary payloads.
    """
    for marker in ("\r", "\n"):
        idx = command.find(marker)
        if idx != -1:
            raise EncodeError("command must be a single line", offset=idx)

    tokens = [token for token in command.split(" ") if token]

    if not tokens:
        raise EncodeError("empty command")

    return serialize(RESPArray(tuple(_token_value(t) for t in tokens)))


def _arg_bytes(arg: Arg) -> bytes:
    match arg:
        case bytes():
            return arg
        case bytearray() | memoryview():
            return bytes(arg)
        case str():
            return arg.encode("utf-8")
        case bool():
            raise EncodeError("bool arguments are ambiguous, send an int or str")
        case int():
            return str(arg).encode()
        case float():
            return repr(arg).encode()
        case _:
            raise EncodeError(f"Cannot encode argument of type {type(arg).__name__}")


def encode_args(*args: Arg) -> bytes:
    """Encode a request as an array of bulk strings. Binary safe."""
    if not args:
        raise EncodeError("empty command")

    return serialize(RESPArray(tuple(BulkString(_arg_bytes(a)) for a in args)))
