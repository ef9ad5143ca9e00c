#!/usr/bin/env python3
"""
Asyncio echo server under the shutdown coordinator.

The server stops accepting once shutdown is requested and closes every
open connection; a handler finishes the line it is echoing, sees EOF and
returns. Each connection counts as in-flight work until then. A second
Ctrl-C terminates immediately.

Usage:
    python tcp_server.py
    nc localhost 9001
"""

import asyncio
import pathlib
import sys

# Add the project root to the path
project_root = str(pathlib.Path(__file__).resolve().parents[2])
sys.path.append(project_root) if project_root not in sys.path else None

from procexit import Coordinator, LogConfig, LoggerFactory


class EchoServer:
    def __init__(self, lg, coordinator, port):
        self._lg = lg
        self._coordinator = coordinator
        self._port = port
        self._writers = set()

    async def _handle(self, reader, writer):
        peer = writer.get_extra_info("peername")
        self._lg.info("client connected", extra={"peer": peer})
        self._writers.add(writer)
        with self._coordinator.work():
            try:
                while True:
                    line = await reader.readline()
                    if not line:
                        break
                    writer.write(line)
                    await writer.drain()
            except ConnectionError as e:
                self._lg.debug("connection lost", extra={"peer": peer, "exception": e})
            finally:
                self._writers.discard(writer)
                writer.close()
        self._lg.info("client disconnected", extra={"peer": peer})

    async def run(self):
        server = await asyncio.start_server(self._handle, "127.0.0.1", self._port)
        self._lg.info("listening", extra={"port": self._port})
        async with server:
            await self._coordinator.done_handle().wait_async()
            server.close()
            self._lg.info("stopped accepting", extra={"open": len(self._writers)})
            # Closing the transport feeds EOF to handlers blocked in readline()
            for writer in list(self._writers):
                writer.close()


def main():
    lg = LoggerFactory.create_root(LogConfig.from_params("info"))
    coordinator = Coordinator(lg).start()

    with coordinator.supervise():
        asyncio.run(EchoServer(lg, coordinator, 9001).run())


if __name__ == "__main__":
    main()
