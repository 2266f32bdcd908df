# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV emulator session.

One asyncio Protocol instance per accepted remote controller connection.
Reassembles envelopes from the byte stream and passes their payloads to the
emulator.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..pkg_logging import logger
from ..exceptions import SamsungTvError
from ..protocol import Envelope, TV_APP_NAME

if TYPE_CHECKING:
    from .emulator_impl import SamsungTvEmulator

class EmulatorSessionState(Enum):
    UNCONNECTED = 0
    READING_REQUEST = 1
    SHUTTING_DOWN = 2
    CLOSED = 3

class SamsungTvEmulatorSession(asyncio.Protocol):
    session_id: int = -1
    emulator: SamsungTvEmulator
    transport: Optional[asyncio.Transport] = None
    peer_name: str = "<unconnected>"
    description: str = "EmulatorSession(<unconnected>)"
    state: EmulatorSessionState = EmulatorSessionState.UNCONNECTED
    partial_data: bytes = b""
    transport_closed: bool = True
    client_id: Optional[str] = None
    authorized: bool = False

    def __init__(self, emulator: SamsungTvEmulator):
        self.emulator = emulator
        self.session_id = emulator.alloc_session_id(self)
        self.description = f"EmulatorSession(id={self.session_id}, from=<unconnected>)"

    @property
    def is_closed(self) -> bool:
        return self.state in (EmulatorSessionState.SHUTTING_DOWN, EmulatorSessionState.CLOSED)

    def write(self, data: Union[bytes, bytearray, memoryview]) -> None:
        if self.transport is None or self.transport_closed:
            logger.debug(f"EmulatorSession: Attempt to write to closed session {self.description}; ignored")
            return
        self.transport.write(data)

    def send_payload(self, payload: bytes) -> None:
        """Wraps a payload in a TV envelope and sends it to the remote controller."""
        envelope = Envelope(payload, app_name=TV_APP_NAME)
        logger.debug(f"{self}: Sending {envelope}")
        self.write(envelope.raw_data)

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        assert self.state == EmulatorSessionState.UNCONNECTED
        self.transport = transport
        self.transport_closed = False
        self.peer_name = str(transport.get_extra_info('peername'))
        self.description = f"EmulatorSession(id={self.session_id}, from='{self.peer_name}')"
        logger.debug(f"EmulatorSession: Connection from {self.peer_name}")
        self.state = EmulatorSessionState.READING_REQUEST

    def close(self) -> None:
        if not self.is_closed:
            self.state = EmulatorSessionState.SHUTTING_DOWN
            if not self.transport_closed and not self.transport is None:
                self.transport_closed = True
                self.transport.close()
            self.state = EmulatorSessionState.CLOSED
            self.emulator.free_session_id(self.session_id)

    def data_received(self, data: bytes) -> None:
        if self.state != EmulatorSessionState.READING_REQUEST:
            return
        try:
            self.partial_data += data
            while True:
                parsed = Envelope.parse_prefix(self.partial_data)
                if parsed is None:
                    break
                envelope, consumed = parsed
                self.partial_data = self.partial_data[consumed:]
                logger.debug(f"{self}: Received {envelope}")
                self.emulator.on_payload_received(self, envelope.payload)
        except SamsungTvError as e:
            logger.exception(f"{self}: Exception while processing data: {e}")
            self.close()

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        logger.debug(f"{self}: Connection lost, exception={exc}; closing connection")
        self.transport_closed = True
        self.close()

    def eof_received(self) -> bool:
        logger.debug(f"{self}: EOF received; closing connection")
        self.close()
        return True

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return str(self)
