# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV remote session state machine.

Tracks the connect/authenticate/operate lifecycle of a single connection and
interprets inbound response payloads while an authentication request is
outstanding. Performs no I/O; the client feeds it events from the connection.

    DISCONNECTED -> CONNECTING -> CONNECTED -> AUTH_PENDING -> AUTHENTICATED
                                                    |
                                                    +-> AUTH_FAILED   (denied, timeout, unrecognized)
                                                    +-> AUTH_ABORTED  (connection lost, cancelled)

Any live state becomes CLOSED when the connection goes away.
"""

from __future__ import annotations

import asyncio
from asyncio import Future
from enum import Enum

from ..internal_types import *
from ..exceptions import (
    InvalidStateError,
    AccessDeniedError,
    AuthTimeoutError,
    UnrecognizedResponseError,
    AuthAbortedError,
  )
from ..pkg_logging import logger
from ..protocol import AccessResponse, classify_response

class SessionState(Enum):
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    AUTH_PENDING = 3
    AUTHENTICATED = 4
    AUTH_FAILED = 5
    AUTH_ABORTED = 6
    CLOSED = 7

TERMINAL_STATES = (
    SessionState.AUTH_FAILED,
    SessionState.AUTH_ABORTED,
    SessionState.CLOSED,
  )

class TvSession:
    state: SessionState = SessionState.DISCONNECTED

    _pending_auth: Optional[Future[None]] = None
    """The waiting continuation of the outstanding authenticate call, if any.
    Cleared as soon as it is resolved, so at most one frame can resolve it."""

    description: str

    def __init__(self, description: str="TvSession") -> None:
        self.description = description

    def _set_state(self, state: SessionState) -> None:
        if state != self.state:
            logger.debug(f"{self}: {self.state.name} -> {state.name}")
            self.state = state

    def require_state(self, *states: SessionState, operation: str="operation") -> None:
        if self.state not in states:
            raise InvalidStateError(
                f"{self}: {operation} not allowed in state {self.state.name}")

    def require_authenticated(self, operation: str="Sending keys") -> None:
        self.require_state(SessionState.AUTHENTICATED, operation=operation)

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def is_auth_pending(self) -> bool:
        return self._pending_auth is not None

    def begin_connect(self) -> None:
        self.require_state(SessionState.DISCONNECTED, operation="connect")
        self._set_state(SessionState.CONNECTING)

    def on_connected(self) -> None:
        self.require_state(SessionState.CONNECTING, operation="connect completion")
        self._set_state(SessionState.CONNECTED)

    def on_connect_failed(self) -> None:
        """Returns to DISCONNECTED so the caller may try again."""
        if self.state == SessionState.CONNECTING:
            self._set_state(SessionState.DISCONNECTED)

    def begin_authentication(self) -> Future[None]:
        """Enters AUTH_PENDING and returns the future that the TV's answer resolves.

        Raises InvalidStateError if not CONNECTED, including while another
        authentication is outstanding.
        """
        if self.state == SessionState.AUTH_PENDING:
            raise InvalidStateError(f"{self}: An authentication request is already outstanding")
        self.require_state(SessionState.CONNECTED, operation="authenticate")
        pending: Future[None] = asyncio.get_running_loop().create_future()
        self._pending_auth = pending
        self._set_state(SessionState.AUTH_PENDING)
        return pending

    def _resolve(self, state: SessionState, exc: Optional[BaseException]=None) -> None:
        pending = self._pending_auth
        self._pending_auth = None
        self._set_state(state)
        if pending is not None and not pending.done():
            if exc is None:
                pending.set_result(None)
            else:
                pending.set_exception(exc)

    def on_frame(self, payload: bytes) -> None:
        """Handles the payload of one inbound envelope."""
        if self.state != SessionState.AUTH_PENDING:
            logger.debug(f"{self}: Ignoring payload in state {self.state.name}: [{payload.hex(' ')}]")
            return
        response = classify_response(payload)
        logger.debug(f"{self}: Authentication response {response}: [{payload.hex(' ')}]")
        if response == AccessResponse.AWAIT:
            # The user has not answered yet
            return
        if response == AccessResponse.GRANTED:
            logger.info(f"{self}: Access granted")
            self._resolve(SessionState.AUTHENTICATED)
        elif response == AccessResponse.DENIED:
            self._resolve(SessionState.AUTH_FAILED, AccessDeniedError("Access denied by the TV user"))
        elif response == AccessResponse.TIMEOUT:
            self._resolve(SessionState.AUTH_FAILED, AuthTimeoutError("Access request timed out or was cancelled on the TV"))
        else:
            self._resolve(SessionState.AUTH_FAILED, UnrecognizedResponseError(bytes(payload)))

    def abort_authentication(self, exc: Optional[BaseException]=None) -> None:
        """Abandons an outstanding authentication (e.g., the caller was cancelled or
           the request could not be written). The waiting continuation, if still
           unresolved, is cancelled rather than failed."""
        pending = self._pending_auth
        self._pending_auth = None
        if self.state == SessionState.AUTH_PENDING:
            self._set_state(SessionState.AUTH_ABORTED)
        if pending is not None and not pending.done():
            pending.cancel()

    def on_connection_lost(self, exc: Optional[BaseException]=None) -> None:
        """Called exactly once when the connection closes, for any reason."""
        if self.state == SessionState.AUTH_PENDING:
            aborted = AuthAbortedError("Connection closed before the TV answered the access request")
            aborted.__cause__ = exc
            self._resolve(SessionState.AUTH_ABORTED, aborted)
        elif self.state not in TERMINAL_STATES:
            self._set_state(SessionState.CLOSED)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return str(self)
