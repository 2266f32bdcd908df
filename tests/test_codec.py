# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import base64
import struct

import pytest

from samsung_legacy_remote.exceptions import (
    InvalidAddressError,
    MalformedFrameError,
    PayloadTooLargeError,
  )
from samsung_legacy_remote.protocol import (
    APP_NAME,
    AuthRequest,
    validate_ip_address,
    encode_envelope,
    encode_message,
    decode_envelope,
    encode_auth_payload,
    decode_auth_payload,
    encode_key_payload,
    decode_key_payload,
  )

def test_envelope_layout() -> None:
    frame = encode_envelope(b"\x01\x02\x03")
    assert frame == (
        b"\x00" +
        b"\x13\x00" + b"iphone.iapp.samsung" +
        b"\x03\x00" + b"\x01\x02\x03"
      )

@pytest.mark.parametrize("payload", [b"", b"\x64\x00\x01\x00", bytes(range(256)) * 3, b"x" * 65535])
def test_envelope_round_trip(payload: bytes) -> None:
    assert decode_envelope(encode_envelope(payload)) == payload

def test_envelope_payload_too_large() -> None:
    with pytest.raises(PayloadTooLargeError):
        encode_envelope(b"x" * 65536)

def test_decode_envelope_ignores_app_name_and_trailing_bytes() -> None:
    frame = b"\x07" + b"\x03\x00abc" + b"\x02\x00\x65\x00" + b"\xff\xff"
    assert decode_envelope(frame) == b"\x65\x00"

@pytest.mark.parametrize("frame", [
    b"",
    b"\x00",
    b"\x00\x13",
    b"\x00\x13\x00iphone",
    b"\x00\x13\x00iphone.iapp.samsung",
    b"\x00\x13\x00iphone.iapp.samsung\x04",
    b"\x00\x13\x00iphone.iapp.samsung\x04\x00\x64\x00\x01",
    b"\x00\xff\xff\x00",
  ])
def test_decode_truncated_envelope(frame: bytes) -> None:
    with pytest.raises(MalformedFrameError):
        decode_envelope(frame)

def test_encode_message_is_envelope() -> None:
    assert encode_message(b"\x00\x00\x00") == encode_envelope(b"\x00\x00\x00")

@pytest.mark.parametrize("ip", ["192.168.1.10", "10.0.0.1", "::1", "fe80::1ff:fe23:4567:890a"])
def test_validate_ip_address_accepts_literals(ip: str) -> None:
    assert validate_ip_address(ip) == ip

@pytest.mark.parametrize("ip", ["999.999.999.999", "192.168.1", "tv.local", "", "1.2.3.4:55000", None, 3232235786])
def test_validate_ip_address_rejects(ip: object) -> None:
    with pytest.raises(InvalidAddressError):
        validate_ip_address(ip)  # type: ignore[arg-type]

def test_auth_payload_layout() -> None:
    payload = encode_auth_payload("192.168.1.10", "my-id", "My Remote")
    ip_b64 = base64.b64encode(b"192.168.1.10")
    id_b64 = base64.b64encode(b"my-id")
    name_b64 = base64.b64encode(b"My Remote")
    assert payload == (
        b"\x64\x00" +
        struct.pack('<H', len(ip_b64)) + ip_b64 +
        struct.pack('<H', len(id_b64)) + id_b64 +
        struct.pack('<H', len(name_b64)) + name_b64
      )

def test_auth_payload_lengths_count_base64_bytes() -> None:
    ip = "192.168.100.200"
    payload = encode_auth_payload(ip, "id", "name")
    ip_length = struct.unpack_from('<H', payload, 2)[0]
    assert ip_length == len(base64.b64encode(ip.encode()))
    assert ip_length != len(ip)
    assert base64.b64decode(payload[4:4 + ip_length]).decode() == ip

def test_auth_payload_rejects_invalid_ip() -> None:
    with pytest.raises(InvalidAddressError):
        encode_auth_payload("999.999.999.999", "id", "name")

def test_auth_payload_decodes() -> None:
    payload = encode_auth_payload("::1", "remote-é", "Télécommande")
    assert decode_auth_payload(payload) == AuthRequest("::1", "remote-é", "Télécommande")

def test_key_payload_layout() -> None:
    assert encode_key_payload("KEY_VOLUP") == b"\x00\x00\x00\x0c\x00S0VZX1ZPTFVQ"

def test_key_frame_carries_key() -> None:
    frame = encode_message(encode_key_payload("KEY_VOLDOWN"))
    payload = decode_envelope(frame)
    key_length = struct.unpack_from('<H', payload, 3)[0]
    assert base64.b64decode(payload[5:5 + key_length]) == b"KEY_VOLDOWN"
    assert decode_key_payload(payload) == "KEY_VOLDOWN"

def test_key_payload_too_large() -> None:
    with pytest.raises(PayloadTooLargeError):
        encode_key_payload("K" * 60000)

@pytest.mark.parametrize("payload", [
    b"\x00\x00\x00\x10\x00S0VZ",
    b"\x00\x00\x00\x04\x00!!!!",
    b"\x64\x00\x01\x00",
  ])
def test_decode_bad_key_payload(payload: bytes) -> None:
    with pytest.raises(MalformedFrameError):
        decode_key_payload(payload)

def test_decode_truncated_auth_payload() -> None:
    payload = encode_auth_payload("10.0.0.1", "id", "name")
    with pytest.raises(MalformedFrameError):
        decode_auth_payload(payload[:-1])
