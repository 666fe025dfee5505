"""Stdio transport: newline-delimited JSON-RPC on stdin/stdout.

Each line is handled as its own task so a slow tool call does not hold up
``notifications/cancelled`` or other requests behind it. Replies are written
one whole line at a time under a lock.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Protocol

from mcpserve.protocol.dispatcher import error_envelope
from mcpserve.protocol.errors import ParseError
from mcpserve.server.engine import MCPEngine, encode

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 2 * 1024 * 1024


class LineWriter(Protocol):
    """The subset of :class:`asyncio.StreamWriter` the server needs."""

    def write(self, data: bytes) -> None: ...
    async def drain(self) -> None: ...


class StdioServer:
    """Serves an :class:`MCPEngine` over a pair of byte streams.

    By default the streams are the process's stdin and stdout; tests pass
    their own reader and writer.
    """

    def __init__(
        self,
        engine: MCPEngine,
        *,
        reader: asyncio.StreamReader | None = None,
        writer: LineWriter | None = None,
    ) -> None:
        self._engine = engine
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def serve(self) -> None:
        """Read lines until EOF, then wait for in-flight requests to finish."""
        if self._reader is None or self._writer is None:
            self._reader, self._writer = await connect_stdio()
        reader, writer = self._reader, self._writer

        await self._engine.start()
        logger.info("Serving MCP over stdio")
        try:
            while True:
                line = await _read_line(reader)
                if line is None:
                    await self._write(writer, error_envelope(None, ParseError(data="Request too large")))
                    continue
                if not line:
                    break
                if not line.strip():
                    continue
                task = asyncio.create_task(self._handle_line(line, writer))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            await self._engine.aclose()
            logger.info("Stdio transport closed")

    async def _handle_line(self, line: bytes, writer: LineWriter) -> None:
        reply = await self._engine.handle(line)
        if reply is None:
            return
        async with self._write_lock:
            writer.write(reply + b"\n")
            await writer.drain()

    async def _write(self, writer: LineWriter, payload: object) -> None:
        async with self._write_lock:
            writer.write(encode(payload) + b"\n")
            await writer.drain()


async def _read_line(reader: asyncio.StreamReader) -> bytes | None:
    """Return the next line, b"" at EOF, or None after skipping an oversized line.

    An oversized line may arrive in several chunks; all of it is consumed so
    it yields exactly one ``None``.
    """
    try:
        return await reader.readuntil(b"\n")
    except asyncio.IncompleteReadError as exc:
        return exc.partial
    except asyncio.LimitOverrunError as exc:
        skipped = await _skip_line(reader, exc.consumed)
        logger.warning("Discarded request line of %d+ bytes over the reader limit", skipped)
        return None


async def _skip_line(reader: asyncio.StreamReader, pending: int) -> int:
    skipped = 0
    while True:
        await reader.readexactly(pending)
        skipped += pending
        try:
            skipped += len(await reader.readuntil(b"\n"))
            return skipped
        except asyncio.IncompleteReadError as exc:
            return skipped + len(exc.partial)
        except asyncio.LimitOverrunError as exc:
            pending = exc.consumed


async def connect_stdio() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process's stdin and stdout in asyncio streams."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer
