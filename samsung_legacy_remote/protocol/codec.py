# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Encoding and decoding of envelopes and of the payloads they carry.

Everything here is pure; there is no I/O.

Auth request payload:

    64 00 | <len> <base64(ip)> | <len> <base64(client_id)> | <len> <base64(client_name)>

Key request payload:

    00 00 00 | <len> <base64(key)>

Each <len> is u16-LE and counts the base64-encoded bytes, not the original string.
"""

from __future__ import annotations

import ipaddress

from ..internal_types import *
from ..exceptions import InvalidAddressError, MalformedFrameError
from .constants import AUTH_PAYLOAD_PREFIX, KEY_PAYLOAD_PREFIX
from .envelope import Envelope
from .fields import pack_field, unpack_field, to_base64, from_base64

class AuthRequest(NamedTuple):
    """The decoded content of an authentication request payload."""
    ip: str
    client_id: str
    client_name: str

def validate_ip_address(ip: str) -> str:
    """Returns ip unchanged if it is a valid IPv4 or IPv6 literal.

    Raises InvalidAddressError otherwise. Host names are not accepted.
    """
    if not isinstance(ip, str):
        raise InvalidAddressError(f"Not a valid IP address: {ip!r}")
    try:
        ipaddress.ip_address(ip)
    except ValueError as e:
        raise InvalidAddressError(f"Not a valid IP address: {ip!r}") from e
    return ip

def encode_envelope(payload: bytes) -> bytes:
    """Wraps a payload in an envelope carrying this client's app name.

    Raises PayloadTooLargeError if the payload exceeds 65535 bytes.
    """
    return Envelope(payload).raw_data

encode_message = encode_envelope

def decode_envelope(data: bytes) -> bytes:
    """Returns exactly the payload declared by the envelope at the start of data.

    Raises MalformedFrameError if data is shorter than the declared lengths.
    """
    return Envelope.from_raw_data(data).payload

def encode_auth_payload(ip: str, client_id: str, client_name: str) -> bytes:
    """Builds the payload that asks the TV for access.

    Args:
        ip:          The controller's own IP address, as shown to the TV.
        client_id:   A unique identifier for the controller. The TV remembers
                     granted identifiers.
        client_name: The controller name the TV displays to the user.

    Raises InvalidAddressError if ip is not a valid IP literal.
    """
    validate_ip_address(ip)
    return (
        AUTH_PAYLOAD_PREFIX +
        pack_field(to_base64(ip)) +
        pack_field(to_base64(client_id)) +
        pack_field(to_base64(client_name))
      )

def decode_auth_payload(payload: bytes) -> AuthRequest:
    if not payload.startswith(AUTH_PAYLOAD_PREFIX):
        raise MalformedFrameError(f"Not an authentication request payload: [{payload.hex(' ')}]")
    offset = len(AUTH_PAYLOAD_PREFIX)
    ip_data, offset = unpack_field(payload, offset)
    id_data, offset = unpack_field(payload, offset)
    name_data, offset = unpack_field(payload, offset)
    return AuthRequest(from_base64(ip_data), from_base64(id_data), from_base64(name_data))

def encode_key_payload(key: str) -> bytes:
    """Builds the payload for a single key press. The key identifier is opaque
       (e.g., "KEY_VOLUP") and is not validated."""
    return KEY_PAYLOAD_PREFIX + pack_field(to_base64(key))

def decode_key_payload(payload: bytes) -> str:
    if not payload.startswith(KEY_PAYLOAD_PREFIX):
        raise MalformedFrameError(f"Not a key request payload: [{payload.hex(' ')}]")
    key_data, _ = unpack_field(payload, len(KEY_PAYLOAD_PREFIX))
    return from_base64(key_data)

def is_auth_payload(payload: bytes) -> bool:
    return payload.startswith(AUTH_PAYLOAD_PREFIX)

def is_key_payload(payload: bytes) -> bool:
    return payload.startswith(KEY_PAYLOAD_PREFIX)
