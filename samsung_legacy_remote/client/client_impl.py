# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV remote control client.

Composes a TcpTvConnection, the payload codec and the TvSession state machine
into the operations a caller needs: connect, authenticate, and send keys.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import InvalidAddressError, InvalidStateError
from ..pkg_logging import logger
from ..protocol import (
    encode_envelope,
    encode_auth_payload,
    encode_key_payload,
  )

from .client_config import SamsungTvClientConfig
from .connection import TcpTvConnection
from .session import TvSession, SessionState

class SamsungTvClient:
    """Legacy Samsung TV remote control client.

    Calls must be made in order: connect(), then authenticate(), then any
    number of key sends. Out-of-order calls raise InvalidStateError without
    touching the socket.
    """

    config: SamsungTvClientConfig
    session: TvSession
    connection: Optional[TcpTvConnection] = None

    def __init__(
            self,
            config: Optional[SamsungTvClientConfig]=None,
            key_delay_secs: Optional[float]=None,
          ) -> None:
        self.config = SamsungTvClientConfig(key_delay_secs=key_delay_secs, base_config=config)
        self.session = TvSession(description=f"TvSession({self.config.default_host})")

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def key_delay_secs(self) -> float:
        return self.config.key_delay_secs

    async def connect(self, host: Optional[str]=None) -> None:
        """Opens the TCP connection to the TV.

        Args:
            host: The IP address of the TV. If None, the configured default
                  host is used.

        Raises InvalidAddressError if host is not an IP literal, ConnectError if
        the connection fails (the client may then connect again), and
        InvalidStateError if already connected.
        """
        if host is None:
            host = self.config.default_host
        if host is None:
            raise InvalidAddressError("No TV address provided, and SAMSUNG_TV_HOST is not set")
        self.session.begin_connect()
        try:
            connection = TcpTvConnection(
                host,
                port=self.config.default_port,
                connect_timeout_secs=self.config.connect_timeout_secs,
                on_frame=self.session.on_frame,
                on_closed=self.session.on_connection_lost,
              )
            await connection.connect()
        except BaseException:
            self.session.on_connect_failed()
            raise
        if self.session.state != SessionState.CONNECTING:
            # closed while the connection was being opened
            await connection.aclose()
            raise InvalidStateError(f"{self}: Client was closed while connecting")
        self.connection = connection
        self.session.description = f"TvSession({host}:{self.config.default_port})"
        self.session.on_connected()

    async def authenticate(
            self,
            client_ip: Optional[str]=None,
            client_id: Optional[str]=None,
            client_name: Optional[str]=None,
          ) -> None:
        """Asks the TV for access, and waits for the user to answer on the TV.

        Args:
            client_ip:   The controller IP address shown to the TV. If None, the
                         configured client IP or else the local address of the
                         connection is used.
            client_id:   The unique controller identifier. If None, the
                         configured client ID is used.
            client_name: The controller name displayed by the TV. If None, the
                         configured client name is used.

        Returns once access is granted. Raises AccessDeniedError,
        AuthTimeoutError or UnrecognizedResponseError if the TV answers
        otherwise, AuthAbortedError if the connection is lost first,
        InvalidAddressError if client_ip is not an IP literal, and
        InvalidStateError if not connected or already authenticating.
        There is no local timeout; wrap the call in asyncio.wait_for() if one
        is needed.
        """
        if self.connection is None:
            raise InvalidStateError(f"{self}: authenticate not allowed in state {self.state.name}")
        if client_ip is None:
            client_ip = self.config.client_ip
        if client_ip is None:
            client_ip = self.connection.local_address
        if client_ip is None:
            raise InvalidAddressError(f"{self}: Unable to determine the local IP address")
        frame = encode_envelope(encode_auth_payload(
            client_ip,
            self.config.client_id if client_id is None else client_id,
            self.config.client_name if client_name is None else client_name,
          ))
        pending = self.session.begin_authentication()
        logger.debug(f"{self}: Requesting access as {client_ip}")
        try:
            await self.connection.write_frame(frame)
        except BaseException:
            if pending.done() and not pending.cancelled():
                # Already failed by the connection teardown; the write error is what the caller sees
                pending.exception()
            self.session.abort_authentication()
            raise
        try:
            await pending
        except asyncio.CancelledError:
            self.session.abort_authentication()
            raise
        logger.info(f"{self}: Authenticated")

    async def send_message(self, frame: bytes, delay_secs: Optional[float]=None) -> None:
        """Sends an already framed message to the TV, then waits for the key delay.

        The TV does not acknowledge messages. Raises InvalidStateError unless
        authenticated, and WriteError if the write fails, after which the
        connection is closed.
        """
        self.session.require_authenticated()
        assert self.connection is not None
        await self.connection.write_frame(frame)
        if delay_secs is None:
            delay_secs = self.key_delay_secs
        if delay_secs > 0:
            await asyncio.sleep(delay_secs)

    async def send_payload(self, payload: bytes, delay_secs: Optional[float]=None) -> None:
        """Wraps a payload in an envelope and sends it to the TV."""
        self.session.require_authenticated()
        await self.send_message(encode_envelope(payload), delay_secs=delay_secs)

    async def send_key_by_identifier(self, key: str, delay_secs: Optional[float]=None) -> None:
        """Sends a single key press, e.g. "KEY_VOLUP".

        The key identifier is passed to the TV unchanged.
        """
        self.session.require_authenticated()
        logger.debug(f"{self}: Sending key {key}")
        await self.send_payload(encode_key_payload(key), delay_secs=delay_secs)

    async def send_keys(self, keys: Iterable[str], delay_secs: Optional[float]=None) -> None:
        """Sends a sequence of key presses, in order."""
        for key in keys:
            await self.send_key_by_identifier(key, delay_secs=delay_secs)

    async def _async_dispose(self) -> None:
        if self.connection is not None:
            await self.connection.aclose()
        else:
            self.session.on_connection_lost(None)

    async def aclose(self) -> None:
        """Closes the connection. An outstanding authenticate call fails with AuthAbortedError."""
        await self._async_dispose()

    async def __aenter__(self) -> SamsungTvClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType]
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        if exc_val is None:
            await self._async_dispose()
        else:
            # don't mask the exception that is already propagating
            await self.aclose_quietly()

    @classmethod
    async def create(
            cls,
            host: Optional[str]=None,
            config: Optional[SamsungTvClientConfig]=None,
            authenticate: bool=True,
          ) -> Self:
        """Creates a client, connects it, and optionally authenticates it.
           On failure the connection is closed."""
        self = cls(SamsungTvClientConfig(default_host=host, base_config=config))
        try:
            await self.connect()
            if authenticate:
                await self.authenticate()
        except BaseException:
            await self.aclose_quietly()
            raise
        return self

    async def aclose_quietly(self) -> None:
        """Closes the connection, logging rather than raising the final status.
           Used when another error is already being reported."""
        try:
            await self._async_dispose()
        except Exception as e:
            logger.debug(f"{self}: Exception while closing: {e}")

    def __str__(self) -> str:
        return f"SamsungTvClient(connection={self.connection}, state={self.state.name})"

    def __repr__(self) -> str:
        return str(self)
