# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import pytest

from samsung_legacy_remote.exceptions import (
    InvalidStateError,
    AccessDeniedError,
    AuthTimeoutError,
    UnrecognizedResponseError,
    AuthAbortedError,
  )
from samsung_legacy_remote.protocol import (
    ACCESS_GRANTED,
    ACCESS_DENIED,
    ACCESS_AWAIT,
    ACCESS_TIMEOUT,
  )
from samsung_legacy_remote.client import TvSession, SessionState
from samsung_legacy_remote.client.session import TERMINAL_STATES

def connected_session() -> TvSession:
    session = TvSession()
    session.begin_connect()
    session.on_connected()
    assert session.state == SessionState.CONNECTED
    return session

async def test_granted_resolves_after_await_responses() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    assert session.state == SessionState.AUTH_PENDING
    session.on_frame(ACCESS_AWAIT)
    session.on_frame(ACCESS_AWAIT)
    assert not pending.done()
    assert session.state == SessionState.AUTH_PENDING
    session.on_frame(ACCESS_GRANTED)
    await pending
    assert session.state == SessionState.AUTHENTICATED
    assert session.is_authenticated
    session.require_authenticated()

async def test_denied() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_DENIED)
    with pytest.raises(AccessDeniedError):
        await pending
    assert session.state == SessionState.AUTH_FAILED

async def test_timeout() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_TIMEOUT)
    with pytest.raises(AuthTimeoutError):
        await pending
    assert session.state == SessionState.AUTH_FAILED

async def test_unrecognized_response_fails_fast() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(b"\x01\x02")
    with pytest.raises(UnrecognizedResponseError) as exc_info:
        await pending
    assert exc_info.value.payload == b"\x01\x02"
    assert session.state == SessionState.AUTH_FAILED

async def test_duplicate_frames_do_not_resolve_twice() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_GRANTED)
    session.on_frame(ACCESS_DENIED)
    session.on_frame(ACCESS_GRANTED)
    assert pending.result() is None
    assert session.state == SessionState.AUTHENTICATED

async def test_frames_outside_handshake_are_ignored() -> None:
    session = connected_session()
    session.on_frame(ACCESS_GRANTED)
    assert session.state == SessionState.CONNECTED
    with pytest.raises(InvalidStateError):
        session.require_authenticated()

async def test_only_one_authentication_outstanding() -> None:
    session = connected_session()
    session.begin_authentication()
    with pytest.raises(InvalidStateError):
        session.begin_authentication()
    assert session.is_auth_pending

async def test_authenticate_requires_connection() -> None:
    session = TvSession()
    with pytest.raises(InvalidStateError):
        session.begin_authentication()

async def test_cannot_authenticate_twice() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_GRANTED)
    await pending
    with pytest.raises(InvalidStateError):
        session.begin_authentication()

async def test_connection_lost_while_pending_aborts() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    cause = ConnectionResetError("reset by peer")
    session.on_connection_lost(cause)
    with pytest.raises(AuthAbortedError) as exc_info:
        await pending
    assert exc_info.value.__cause__ is cause
    assert session.state == SessionState.AUTH_ABORTED
    assert not session.is_auth_pending

async def test_abort_authentication_cancels_continuation() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.abort_authentication()
    assert pending.cancelled()
    assert session.state == SessionState.AUTH_ABORTED
    session.on_frame(ACCESS_GRANTED)
    assert session.state == SessionState.AUTH_ABORTED

async def test_connection_lost_after_authentication_closes() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_GRANTED)
    await pending
    session.on_connection_lost(None)
    assert session.state == SessionState.CLOSED
    with pytest.raises(InvalidStateError):
        session.require_authenticated()

def test_failed_connect_allows_retry() -> None:
    session = TvSession()
    session.begin_connect()
    with pytest.raises(InvalidStateError):
        session.begin_connect()
    session.on_connect_failed()
    assert session.state == SessionState.DISCONNECTED
    session.begin_connect()
    assert session.state == SessionState.CONNECTING

async def test_terminal_failure_state_survives_close() -> None:
    session = connected_session()
    pending = session.begin_authentication()
    session.on_frame(ACCESS_DENIED)
    with pytest.raises(AccessDeniedError):
        await pending
    session.on_connection_lost(None)
    assert session.state == SessionState.AUTH_FAILED

async def test_connection_lost_leaves_terminal_states_unchanged() -> None:
    for final_state in TERMINAL_STATES:
        session = connected_session()
        pending = session.begin_authentication()
        if final_state == SessionState.AUTH_FAILED:
            session.on_frame(ACCESS_TIMEOUT)
            with pytest.raises(AuthTimeoutError):
                await pending
        elif final_state == SessionState.AUTH_ABORTED:
            session.abort_authentication()
        else:
            session.on_frame(ACCESS_GRANTED)
            await pending
            session.on_connection_lost(None)
        assert session.state == final_state
        session.on_connection_lost(ConnectionResetError("reset by peer"))
        assert session.state == final_state
