# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Encapsulation of a single envelope sent over the TCP/IP socket in either direction.

The wire layout is:

    00 | <app_name_len: u16-LE> | <app_name> | <payload_len: u16-LE> | <payload>

The app name identifies the sending application; the payload is an
authentication request, a key request, or a TV response.
"""

from __future__ import annotations

from ..internal_types import *
from ..exceptions import MalformedFrameError
from .constants import APP_NAME, ENVELOPE_RESERVED_BYTE, LENGTH_PREFIX_SIZE
from .fields import pack_field, unpack_field, unpack_length

MIN_ENVELOPE_LENGTH = 1 + 2 * LENGTH_PREFIX_SIZE

class Envelope:
    """A single framed message, in either direction."""

    payload: bytes
    app_name: bytes
    reserved: int

    def __init__(self, payload: bytes, app_name: bytes=APP_NAME, reserved: int=ENVELOPE_RESERVED_BYTE):
        self.payload = bytes(payload)
        self.app_name = bytes(app_name)
        self.reserved = reserved

    @property
    def raw_data(self) -> bytes:
        """The serialized envelope.

        Raises PayloadTooLargeError if the app name or payload exceed 65535 bytes.
        """
        return bytes([self.reserved]) + pack_field(self.app_name) + pack_field(self.payload)

    @classmethod
    def from_raw_data(cls, raw_data: bytes) -> Envelope:
        """Decodes an envelope from the beginning of raw_data.

        The reserved byte and the app name are not validated. Bytes following
        the declared payload are ignored.

        Raises MalformedFrameError if raw_data is shorter than the declared lengths.
        """
        if len(raw_data) < 1:
            raise MalformedFrameError("Empty envelope")
        app_name, offset = unpack_field(raw_data, 1)
        payload, _ = unpack_field(raw_data, offset)
        return cls(payload, app_name=app_name, reserved=raw_data[0])

    @classmethod
    def parse_prefix(cls, buffer: bytes) -> Optional[Tuple[Envelope, int]]:
        """Decodes an envelope from the beginning of a stream buffer.

        Returns:
            None if buffer does not yet contain a complete envelope, otherwise
            a tuple of (envelope, number of bytes consumed).
        """
        if len(buffer) < MIN_ENVELOPE_LENGTH:
            return None
        app_name_length = unpack_length(buffer, 1)
        payload_length_offset = 1 + LENGTH_PREFIX_SIZE + app_name_length
        if payload_length_offset + LENGTH_PREFIX_SIZE > len(buffer):
            return None
        payload_length = unpack_length(buffer, payload_length_offset)
        end = payload_length_offset + LENGTH_PREFIX_SIZE + payload_length
        if end > len(buffer):
            return None
        return cls.from_raw_data(buffer[:end]), end

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return self.raw_data == other.raw_data

    def __str__(self) -> str:
        return f"Envelope({self.app_name!r}: [{self.payload.hex(' ')}])"

    def __repr__(self) -> str:
        return str(self)
