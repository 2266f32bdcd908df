# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import pytest

from samsung_legacy_remote.exceptions import MalformedFrameError, PayloadTooLargeError
from samsung_legacy_remote.protocol import Envelope, APP_NAME, TV_APP_NAME, pack_field, unpack_field
from samsung_legacy_remote.protocol.handshake import ACCESS_AWAIT, ACCESS_GRANTED

def test_pack_field_is_little_endian() -> None:
    assert pack_field(b"a" * 0x0102)[:2] == b"\x02\x01"

def test_pack_field_limit() -> None:
    assert len(pack_field(b"a" * 0xFFFF)) == 0xFFFF + 2
    with pytest.raises(PayloadTooLargeError):
        pack_field(b"a" * 0x10000)

def test_unpack_field_returns_next_offset() -> None:
    data = b"\xaa" + pack_field(b"xyz") + pack_field(b"")
    value, offset = unpack_field(data, 1)
    assert (value, offset) == (b"xyz", 6)
    value, offset = unpack_field(data, offset)
    assert (value, offset) == (b"", len(data))

def test_unpack_field_out_of_bounds() -> None:
    with pytest.raises(MalformedFrameError):
        unpack_field(b"\x05\x00abcd", 0)
    with pytest.raises(MalformedFrameError):
        unpack_field(b"\x05", 0)

def test_envelope_defaults_to_client_app_name() -> None:
    envelope = Envelope(ACCESS_GRANTED)
    assert envelope.app_name == APP_NAME
    assert Envelope.from_raw_data(envelope.raw_data) == envelope

def test_envelope_keeps_foreign_app_name() -> None:
    raw_data = Envelope(ACCESS_AWAIT, app_name=TV_APP_NAME).raw_data
    envelope = Envelope.from_raw_data(raw_data)
    assert envelope.app_name == TV_APP_NAME
    assert envelope.payload == ACCESS_AWAIT

def test_parse_prefix_waits_for_complete_envelope() -> None:
    first = Envelope(ACCESS_AWAIT).raw_data
    second = Envelope(ACCESS_GRANTED).raw_data
    stream = first + second
    for i in range(len(first)):
        assert Envelope.parse_prefix(stream[:i]) is None
    parsed = Envelope.parse_prefix(stream)
    assert parsed is not None
    envelope, consumed = parsed
    assert envelope.payload == ACCESS_AWAIT
    assert consumed == len(first)
    parsed = Envelope.parse_prefix(stream[consumed:])
    assert parsed is not None
    assert parsed[0].payload == ACCESS_GRANTED
