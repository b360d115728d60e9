import asyncio

import pytest

WELL_FORMED = [
    b"+OK\r\n",
    b"-ERR unknown command 'foobar'\r\n",
    b":0\r\n",
    b":-3\r\n",
    b"$0\r\n\r\n",
    b"$6\r\nfoobar\r\n",
    b"$-1\r\n",
    b"*-1\r\n",
    b"*0\r\n",
    b"*3\r\n$3\r\nfoo\r\n$-1\r\n$3\r\nbar\r\n",
    b"*2\r\n*3\r\n:1\r\n:2\r\n:3\r\n*2\r\n+Foo\r\n-Bar\r\n",
]


@pytest.fixture(params=WELL_FORMED, ids=repr)
def well_formed(request) -> bytes:
    return request.param


class FakeReader:
    def __init__(self, chunks: list[bytes]):
        self._chunks = list(chunks)
        self.read_calls = 0

    async def read(self, _: int) -> bytes:
        await asyncio.sleep(0)
        self.read_calls += 1
        if self._chunks:
            return self._chunks.pop(0)
        return b""


class FakeWriter:
    def __init__(self) -> None:
        self.writes: list[bytes] = []
        self.closed = False
        self.drain_calls = 0

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    async def drain(self) -> None:
        self.drain_calls += 1
        await asyncio.sleep(0)

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        await asyncio.sleep(0)
