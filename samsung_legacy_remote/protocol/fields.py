# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Length-prefixed field encoding shared by the envelope and the payload layers.

Every variable-length field on the wire is preceded by its length as an
unsigned 16-bit little-endian integer. String values inside payloads are
base64 encoded first, and the prefix counts the encoded bytes.
"""

from __future__ import annotations

import base64
import binascii
import struct

from ..internal_types import *
from ..exceptions import MalformedFrameError, PayloadTooLargeError
from .constants import LENGTH_PREFIX_SIZE, MAX_FIELD_LENGTH

_LENGTH_STRUCT = struct.Struct('<H')

def pack_length(length: int) -> bytes:
    if length < 0 or length > MAX_FIELD_LENGTH:
        raise PayloadTooLargeError(
            f"Field length {length} does not fit in a 16-bit length prefix (max {MAX_FIELD_LENGTH})")
    return _LENGTH_STRUCT.pack(length)

def pack_field(data: bytes) -> bytes:
    """Returns data preceded by its u16-LE length."""
    return pack_length(len(data)) + data

def unpack_length(data: bytes, offset: int) -> int:
    """Reads a u16-LE length at offset. Raises MalformedFrameError if the buffer is too short."""
    if offset + LENGTH_PREFIX_SIZE > len(data):
        raise MalformedFrameError(
            f"Buffer of {len(data)} bytes truncated in length field at offset {offset}")
    return _LENGTH_STRUCT.unpack_from(data, offset)[0]

def unpack_field(data: bytes, offset: int) -> Tuple[bytes, int]:
    """Reads a length-prefixed field at offset.

    Returns:
        A tuple of (field_data, next_offset).

    Raises MalformedFrameError if the declared length runs past the end of data.
    """
    length = unpack_length(data, offset)
    start = offset + LENGTH_PREFIX_SIZE
    end = start + length
    if end > len(data):
        raise MalformedFrameError(
            f"Field at offset {offset} declares {length} bytes but only {len(data) - start} remain")
    return bytes(data[start:end]), end

def to_base64(value: str) -> bytes:
    """UTF-8 encodes a string and returns its base64 form."""
    return base64.b64encode(value.encode('utf-8'))

def from_base64(data: bytes) -> str:
    """Inverse of to_base64."""
    try:
        return base64.b64decode(data, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedFrameError(f"Invalid base64 field: {data!r}") from e
