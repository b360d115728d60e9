from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Optional

from decoder import decode
from encoder import Arg, encode, encode_args
from errors import UnexpectedEndOfInput
from protocol import RESPValue
from reply import Reply, classify

log = logging.getLogger(__name__)

MAX_READ = 4096
CONNECT_TIMEOUT = 5.0


class Redis:
    """
    One connection, one request in flight. Each call writes a whole
    command and returns only after the whole reply has been read.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._lock = asyncio.Lock()
        self._broken = False

    @classmethod
    async def connect(
        cls,
        host: str = "127.0.0.1",
        port: int = 6379,
        timeout: float = CONNECT_TIMEOUT,
    ) -> Redis:
        log.info("Connecting to %s:%d", host, port)
        reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        log.info("Connected to %s:%d", host, port)

        return cls(reader, writer)

    async def send(self, command: str) -> Reply:
        log.info("Sending command %r", command)
        return await self._request(encode(command))

    async def send_args(self, *args: Arg) -> Reply:
        log.info("Sending command %r", args[0] if args else None)
        return await self._request(encode_args(*args))

    async def flushall(self) -> Reply:
        return await self.send("FLUSHALL")

    async def _request(self, payload: bytes) -> Reply:
        async with self._lock:
            if self._broken:
                raise ConnectionError("Connection is unusable after an interrupted request")

            try:
                self._writer.write(payload)
                await self._writer.drain()
                value = await self._read_reply()
            except BaseException:
                # The reply may still be in flight; it must never be read as the next one.
                self._broken = True
                self._writer.close()
                log.warning("Request interrupted, connection closed")
                raise

        return classify(value)

    async def _read_reply(self) -> RESPValue:
        buf = bytearray()
        needed = 1

        while True:
            chunk = await self._reader.read(MAX_READ)
            if not chunk:
                raise ConnectionError(f"Connection closed after {len(buf)} bytes of an incomplete reply")

            buf += chunk
            if len(buf) < needed:
                continue

            try:
                value = decode(buf)
            except UnexpectedEndOfInput as e:
                needed = e.needed
                continue

            log.debug("Reply: %d bytes", len(buf))
            return value

    async def close(self) -> None:
        self._writer.close()
        await self._writer.wait_closed()
        log.info("Connection closed")

    async def __aenter__(self) -> Redis:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()
