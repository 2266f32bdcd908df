# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import asyncio
import socket

import pytest

from samsung_legacy_remote.internal_types import *
from samsung_legacy_remote.exceptions import (
    ConnectError,
    InvalidAddressError,
    MalformedFrameError,
    WriteError,
  )
from samsung_legacy_remote.protocol import Envelope, TV_APP_NAME, ACCESS_AWAIT, ACCESS_GRANTED
from samsung_legacy_remote.client import TcpTvConnection

async def serve_bytes(data: bytes) -> asyncio.Server:
    """Starts a server that sends data to each connection, then closes it."""
    async def handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writer.write(data)
        await writer.drain()
        writer.close()
    return await asyncio.start_server(handler, '127.0.0.1', 0)

def server_port(server: asyncio.Server) -> int:
    return server.sockets[0].getsockname()[1]

def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]

async def test_invalid_address_fails_before_socket(monkeypatch: pytest.MonkeyPatch) -> None:
    async def no_open_connection(*args: Any, **kwargs: Any) -> Any:
        raise AssertionError("socket operation attempted")
    monkeypatch.setattr(asyncio, "open_connection", no_open_connection)
    connection = TcpTvConnection("999.999.999.999")
    with pytest.raises(InvalidAddressError):
        await connection.connect()
    assert not connection.is_connected

async def test_connection_refused() -> None:
    closed: List[Optional[BaseException]] = []
    connection = TcpTvConnection("127.0.0.1", port=unused_port(), on_closed=closed.append)
    with pytest.raises(ConnectError) as exc_info:
        await connection.connect()
    assert isinstance(exc_info.value.__cause__, OSError)
    assert not connection.is_connected
    # the listener only hears about connections that were established
    assert closed == []

async def test_reads_consecutive_frames() -> None:
    frames = Envelope(ACCESS_AWAIT, app_name=TV_APP_NAME).raw_data + Envelope(ACCESS_GRANTED).raw_data
    server = await serve_bytes(frames)
    payloads: List[bytes] = []
    closed: List[Optional[BaseException]] = []
    try:
        connection = TcpTvConnection(
            "127.0.0.1",
            port=server_port(server),
            on_frame=payloads.append,
            on_closed=closed.append,
          )
        await connection.connect()
        assert connection.local_address == "127.0.0.1"
        await connection.wait()
    finally:
        server.close()
        await server.wait_closed()
    assert payloads == [ACCESS_AWAIT, ACCESS_GRANTED]
    assert closed == [None]

async def test_partial_frame_is_malformed() -> None:
    server = await serve_bytes(Envelope(ACCESS_GRANTED).raw_data[:-2])
    payloads: List[bytes] = []
    closed: List[Optional[BaseException]] = []
    try:
        connection = TcpTvConnection(
            "127.0.0.1",
            port=server_port(server),
            on_frame=payloads.append,
            on_closed=closed.append,
          )
        await connection.connect()
        with pytest.raises(MalformedFrameError):
            await connection.wait()
    finally:
        server.close()
        await server.wait_closed()
    assert payloads == []
    assert len(closed) == 1 and isinstance(closed[0], MalformedFrameError)

async def test_write_after_close_fails() -> None:
    received = bytearray()
    got_data = asyncio.Event()

    async def handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        data = await reader.read(1024)
        received.extend(data)
        got_data.set()
        await reader.read()
        writer.close()

    server = await asyncio.start_server(handler, '127.0.0.1', 0)
    try:
        connection = TcpTvConnection("127.0.0.1", port=server_port(server))
        await connection.connect()
        await connection.write_frame(b"\x00\x01\x02")
        await asyncio.wait_for(got_data.wait(), 2.0)
        await connection.aclose()
        with pytest.raises(WriteError):
            await connection.write_frame(b"\x03")
    finally:
        server.close()
        await server.wait_closed()
    assert bytes(received) == b"\x00\x01\x02"
