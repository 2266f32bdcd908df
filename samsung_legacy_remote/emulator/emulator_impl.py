# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV emulator.

Provides a simple emulation of a legacy Samsung TV's remote control port on
TCP/IP. The user's answer to each access request is simulated by an
AuthPolicy.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    AuthRequest,
    ACCESS_GRANTED,
    ACCESS_DENIED,
    ACCESS_AWAIT,
    ACCESS_TIMEOUT,
    decode_auth_payload,
    decode_key_payload,
    is_auth_payload,
    is_key_payload,
  )
from ..constants import DEFAULT_PORT
from ..exceptions import SamsungTvError

from .session import SamsungTvEmulatorSession

GARBLED_RESPONSE = b"\x99\x00\x07"
"""Sent in answer to access requests under AuthPolicy.GARBLED. Matches no known response."""

class AuthPolicy(Enum):
    """How the emulated TV user answers access requests."""
    GRANT = 'grant'
    DENY = 'deny'
    TIMEOUT = 'timeout'
    SILENT = 'silent'
    """Never answer beyond the await responses."""
    GARBLED = 'garbled'
    """Answer with a payload that is not a known response."""
    HANGUP = 'hangup'
    """Close the connection instead of answering."""

_final_responses: Dict[AuthPolicy, bytes] = {
    AuthPolicy.GRANT: ACCESS_GRANTED,
    AuthPolicy.DENY: ACCESS_DENIED,
    AuthPolicy.TIMEOUT: ACCESS_TIMEOUT,
    AuthPolicy.GARBLED: GARBLED_RESPONSE,
  }

class SamsungTvEmulator(AsyncContextManager['SamsungTvEmulator']):
    auth_policy: AuthPolicy
    await_count: int
    bind_addr: str
    port: int
    sessions: Dict[int, SamsungTvEmulatorSession]
    next_session_id: int = 0
    requests: asyncio.Queue[Optional[Tuple[SamsungTvEmulatorSession, bytes]]]
    server: Optional[asyncio.Server] = None
    handler_task: Optional[asyncio.Task[None]] = None
    final_result: asyncio.Future[None]

    auth_requests: List[AuthRequest]
    """Every access request received, in order."""

    received_keys: List[Tuple[str, str]]
    """(client_id, key) for every key accepted from an authorized controller, in order."""

    received_payloads: List[bytes]
    """Every payload received from any controller, in order."""

    def __init__(
            self,
            auth_policy: Union[AuthPolicy, str]=AuthPolicy.GRANT,
            await_count: int=1,
            bind_addr: Optional[str]=None,
            port: int=DEFAULT_PORT,
          ):
        """Creates an emulator.

        Args:
            auth_policy: How access requests are answered.
            await_count: The number of ACCESS_AWAIT responses sent before the
                         final answer.
            bind_addr:   The local address to listen on. Default: 0.0.0.0.
            port:        The port to listen on. 0 selects a free port, available
                         as self.port once started.
        """
        if isinstance(auth_policy, str):
            try:
                auth_policy = AuthPolicy(auth_policy)
            except ValueError as e:
                raise SamsungTvError(f"Unknown auth policy '{auth_policy}'") from e
        self.auth_policy = auth_policy
        self.await_count = await_count
        self.bind_addr = '0.0.0.0' if bind_addr is None else bind_addr
        self.port = port
        self.sessions = {}
        self.requests = asyncio.Queue()
        self.final_result = asyncio.get_event_loop().create_future()
        self.auth_requests = []
        self.received_keys = []
        self.received_payloads = []

    def alloc_session_id(self, session: SamsungTvEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.sessions[result] = session
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def on_payload_received(self, session: SamsungTvEmulatorSession, payload: bytes) -> None:
        """Called when a payload is received from a session."""
        self.received_payloads.append(payload)
        self.requests.put_nowait((session, payload))

    async def handle_auth_request(
            self,
            session: SamsungTvEmulatorSession,
            request: AuthRequest
          ) -> None:
        """Answers an access request according to the auth policy."""
        logger.debug(f"{session}: Access request from {request}; policy={self.auth_policy.name}")
        self.auth_requests.append(request)
        session.client_id = request.client_id
        for _ in range(self.await_count):
            session.send_payload(ACCESS_AWAIT)
            # let the controller see each await response separately
            await asyncio.sleep(0)
        if self.auth_policy == AuthPolicy.HANGUP:
            session.close()
            return
        final_response = _final_responses.get(self.auth_policy)
        if final_response is None:
            return
        session.authorized = self.auth_policy == AuthPolicy.GRANT
        session.send_payload(final_response)

    async def handle_key(self, session: SamsungTvEmulatorSession, key: str) -> None:
        if not session.authorized:
            logger.warning(f"{session}: Ignoring key {key} from unauthorized controller")
            return
        logger.debug(f"{session}: Key pressed: {key}")
        assert session.client_id is not None
        self.received_keys.append((session.client_id, key))

    async def handle_payload(
            self,
            session: SamsungTvEmulatorSession,
            payload: bytes
          ) -> None:
        """Handle a single request payload. If an exception is raised, the session is closed."""
        if is_auth_payload(payload):
            await self.handle_auth_request(session, decode_auth_payload(payload))
        elif is_key_payload(payload):
            await self.handle_key(session, decode_key_payload(payload))
        else:
            raise SamsungTvError(f"Unrecognized request payload: [{payload.hex(' ')}]")

    async def handle_requests(self) -> None:
        """Handle requests from sessions."""
        while True:
            session_and_payload = await self.requests.get()
            try:
                if session_and_payload is None:
                    logger.debug("Emulator handler: Received EOF; exiting")
                    break
                # payloads that arrived before a session closed are still handled
                session, payload = session_and_payload
                try:
                    await self.handle_payload(session, payload)
                except SamsungTvError as e:
                    logger.warning(f"{session}: Exception while handling request; killing session: {e}")
                    session.close()
            finally:
                self.requests.task_done()

    async def finish_start(self) -> None:
        """Called after the socket is up and running.  Subclasses can override to do additional
           initialization."""
        pass

    async def run(self) -> None:
        """Runs the Emulator until it is closed."""
        async with self:
            await self.wait_closed()

    async def start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
            self.handler_task = asyncio.create_task(self.handle_requests())
            self.server = await loop.create_server(
                lambda: SamsungTvEmulatorSession(self),
                host=self.bind_addr,
                port=self.port)
            if self.port == 0:
                self.port = self.server.sockets[0].getsockname()[1]
            logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.port}")
            await self.server.start_serving()
            await self.finish_start()
        except BaseException as e:
            self.set_final_result(e)
            try:
                await self.wait_closed()
            except BaseException:
                pass
            raise

    def close(self, exc: Optional[BaseException]=None) -> None:
        """Stops the Emulator."""
        self.set_final_result(exc)

    async def wait_closed(self) -> None:
        """Waits for the emulator to be fully closed. Does not initiate shutdown.
           Raises the final exception, if any."""
        try:
            await self.final_result
        finally:
            try:
                for session in list(self.sessions.values()):
                    session.close()
                if self.server is not None:
                    try:
                        self.server.close()
                    finally:
                        await self.server.wait_closed()
            finally:
                self.server = None
                if self.handler_task is not None:
                    try:
                        await self.handler_task
                    finally:
                        self.handler_task = None

    async def close_and_wait(self, exc: Optional[BaseException]=None) -> None:
        self.close(exc)
        await self.wait_closed()

    def set_final_result(self, exc: Optional[BaseException]=None) -> None:
        if not self.final_result.done():
            if exc is None:
                logger.debug(f"Emulator: Setting final result to success")
                self.final_result.set_result(None)
            else:
                logger.debug(f"Emulator: Setting final exception: {exc}")
                self.final_result.set_exception(exc)
            self.requests.put_nowait(None)
            if self.server is not None:
                self.server.close()

    async def __aenter__(self) -> SamsungTvEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        self.set_final_result(exc)
        try:
            # ensure that final_result has been awaited
            await self.wait_closed()
        except Exception as e:
            logger.debug(f"Emulator: Final status on exit: {e}")

    def __str__(self) -> str:
        return f"SamsungTvEmulator({self.bind_addr}:{self.port}, policy={self.auth_policy.name})"

    def __repr__(self) -> str:
        return str(self)
