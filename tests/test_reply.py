import pytest

from decoder import decode
from protocol import NULL, BulkString, RESPArray, RESPError, SimpleString
from reply import Failure, Success, classify


def test_error_reply_is_failure() -> None:
    assert classify(decode(b"-ERR unknown command 'foobar'\r\n")) == Failure("ERR unknown command 'foobar'")


@pytest.mark.parametrize(
    "value",
    [
        SimpleString("OK"),
        0,
        BulkString(b"Hello"),
        NULL,
        RESPArray(()),
        RESPArray((RESPError("nested errors are data"),)),
    ],
)
def test_everything_else_is_success(value) -> None:
    assert classify(value) == Success(value)
