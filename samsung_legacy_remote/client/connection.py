# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV TCP/IP connection.

Owns the single TCP socket to one TV. Writes complete frames, and runs a
single reader task that decodes inbound envelopes and hands their payloads
to a listener. Has no knowledge of the handshake; see session.py.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from ..internal_types import *
from ..exceptions import ConnectError, WriteError, MalformedFrameError
from ..constants import DEFAULT_PORT, DEFAULT_CONNECT_TIMEOUT
from ..pkg_logging import logger
from ..protocol import validate_ip_address, decode_envelope
from ..protocol.fields import unpack_length

FrameListener = Callable[[bytes], None]
"""Called from the reader task with the payload of each inbound envelope."""

ClosedListener = Callable[[Optional[BaseException]], None]
"""Called once when an established connection closes, with the reason, if any."""

class TcpTvConnection:
    """A TCP/IP connection to a legacy Samsung TV."""

    reader: Optional[asyncio.StreamReader] = None
    writer: Optional[asyncio.StreamWriter] = None
    host: str
    port: int
    connect_timeout_secs: Optional[float]
    final_status: Future[None]
    on_frame: Optional[FrameListener] = None
    on_closed: Optional[ClosedListener] = None
    reader_closed: bool = False
    writer_closed: bool = False

    _connected: bool = False
    _reader_task: Optional[asyncio.Task[None]] = None

    _write_lock: asyncio.Lock
    """Ensures that frames from concurrent callers are never interleaved on the wire."""

    def __init__(
            self,
            host: str,
            port: int=DEFAULT_PORT,
            connect_timeout_secs: Optional[float]=DEFAULT_CONNECT_TIMEOUT,
            on_frame: Optional[FrameListener]=None,
            on_closed: Optional[ClosedListener]=None,
          ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout_secs = connect_timeout_secs
        self.on_frame = on_frame
        self.on_closed = on_closed
        self.final_status = asyncio.get_event_loop().create_future()
        self._write_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected and not self.final_status.done()

    @property
    def local_address(self) -> Optional[str]:
        """The local IP address of the socket, or None if not connected."""
        if self.writer is None:
            return None
        sockname = self.writer.get_extra_info('sockname')
        if sockname is None:
            return None
        return sockname[0]

    async def connect(self) -> None:
        """Opens the TCP connection and starts the reader task.

        Raises InvalidAddressError, before any socket is created, if host is not
        an IP literal. Raises ConnectError if the connection cannot be
        established. There is exactly one attempt.
        """
        validate_ip_address(self.host)
        assert self.reader is None and self.writer is None
        logger.debug(f"Connecting to TV at {self.host}:{self.port}")
        try:
            if self.connect_timeout_secs is None:
                self.reader, self.writer = await asyncio.open_connection(self.host, self.port)
            else:
                self.reader, self.writer = await asyncio.wait_for(
                    asyncio.open_connection(self.host, self.port),
                    self.connect_timeout_secs)
        except (OSError, asyncio.TimeoutError) as e:
            # The connection never existed; the error goes to the caller only
            await self.shutdown()
            raise ConnectError(f"Unable to connect to TV at {self.host}:{self.port}: {e}") from e
        except BaseException:
            await self.shutdown()
            raise
        self._connected = True
        self._reader_task = asyncio.create_task(self._read_loop())
        logger.info(f"{self}: Connected")

    async def _read_exactly(self, length: int, at_frame_start: bool=False) -> Optional[bytes]:
        """Reads exactly length bytes.

        Returns None on a clean EOF at the start of a frame. Raises
        MalformedFrameError if the stream ends part way through a frame.
        """
        assert self.reader is not None
        try:
            return await self.reader.readexactly(length)
        except asyncio.IncompleteReadError as e:
            if at_frame_start and len(e.partial) == 0:
                return None
            raise MalformedFrameError(
                f"Connection closed by TV with partial frame: [{e.partial.hex(' ')}]") from e

    async def read_frame(self) -> Optional[bytes]:
        """Reads a single envelope and returns its payload, or None on EOF."""
        header = await self._read_exactly(3, at_frame_start=True)
        if header is None:
            return None
        app_name_length = unpack_length(header, 1)
        app_name = await self._read_exactly(app_name_length)
        payload_length_data = await self._read_exactly(2)
        assert app_name is not None and payload_length_data is not None
        payload_length = unpack_length(payload_length_data, 0)
        payload = await self._read_exactly(payload_length)
        assert payload is not None
        raw_data = header + app_name + payload_length_data + payload
        logger.debug(f"{self}: Read frame: [{raw_data.hex(' ')}]")
        return decode_envelope(raw_data)

    async def _read_loop(self) -> None:
        exc: Optional[BaseException] = None
        try:
            while True:
                payload = await self.read_frame()
                if payload is None:
                    logger.debug(f"{self}: Connection closed by TV")
                    break
                if self.on_frame is not None:
                    self.on_frame(payload)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"{self}: Reader failed: {e}")
            exc = e
        await self.shutdown(exc)

    async def write_frame(self, data: bytes) -> None:
        """Writes a complete frame to the TV.

        Waits until the whole buffer has been handed to the OS. On error, raises
        WriteError and shuts the connection down; no further interaction is possible.
        """
        async with self._write_lock:
            if not self.is_connected or self.writer is None or self.writer_closed:
                raise WriteError(f"{self}: Connection is not open")
            try:
                logger.debug(f"{self}: Writing frame: [{data.hex(' ')}]")
                self.writer.write(data)
                await self.writer.drain()
            except Exception as e:
                error = WriteError(f"{self}: Write failed: {e}")
                error.__cause__ = e
                await self.shutdown(error)
                raise error from e

    async def shutdown(self, exc: Optional[BaseException] = None) -> None:
        """Shuts the connection down. Does not wait for the connection to finish
           closing. Safe to call from a listener.

        If exc is not None, sets the final status of the connection.

        Has no effect if the connection is already shutting down or closed.
        """
        if self.final_status.done():
            return
        if exc is not None:
            self.final_status.set_exception(exc)
        else:
            self.final_status.set_result(None)
        try:
            if not self.reader_closed:
                self.reader_closed = True
                if self.reader is not None:
                    self.reader.feed_eof()
        except Exception:
            logger.debug("Exception while closing reader", exc_info=True)
        finally:
            try:
                if not self.writer_closed:
                    self.writer_closed = True
                    if self.writer is not None:
                        self.writer.close()
            except Exception:
                logger.debug("Exception while closing writer", exc_info=True)
        reader_task = self._reader_task
        if reader_task is not None and reader_task is not asyncio.current_task():
            reader_task.cancel()
        if self._connected and self.on_closed is not None:
            on_closed = self.on_closed
            self.on_closed = None
            on_closed(exc)

    async def wait(self) -> None:
        """Waits for complete shutdown/cleanup. Does not initiate shutdown.

        Raises an exception if the final status of the connection is an exception.
        """
        try:
            if self.writer is not None:
                await self.writer.wait_closed()
        except Exception as e:
            logger.debug("Exception while waiting for writer to close", exc_info=True)
        finally:
            reader_task = self._reader_task
            if reader_task is not None and reader_task is not asyncio.current_task():
                await asyncio.wait([reader_task])
        await self.final_status

    async def aclose(self, exc: Optional[BaseException] = None) -> None:
        """Closes the connection and waits for complete shutdown/cleanup.

        Raises an exception if the final status of the connection is an exception.
        """
        await self.shutdown(exc)
        await self.wait()

    async def __aenter__(self) -> TcpTvConnection:
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
          ) -> None:
        closer: asyncio.Task[None] = asyncio.ensure_future(self.aclose(exc))
        done, pending = await asyncio.wait([closer])
        assert len(done) == 1 and len(pending) == 0
        if exc is None:
            closer.result()

    def __str__(self) -> str:
        return f"TcpTvConnection({self.host}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
