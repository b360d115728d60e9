import asyncio
import logging
import os

from client import Redis
from errors import ParseError, render_diagnostic

log = logging.getLogger(__name__)


async def run(host: str, port: int, command: str) -> None:
    async with await Redis.connect(host, port) as redis:
        try:
            reply = await redis.send(command)
        except ParseError as e:
            log.error("Malformed reply\n%s", render_diagnostic(e))
            raise

        log.info("Reply: %s", reply)


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("REDIS_LOG_LEVEL", "INFO").upper())

    host = os.getenv("REDIS_HOST", "127.0.0.1")
    port = int(os.getenv("REDIS_PORT", "6379"))

    asyncio.run(run(host, port, "LLEN mylist"))
