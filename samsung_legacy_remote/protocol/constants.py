# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Protocol-specific constants
"""

from __future__ import annotations

APP_NAME = b"iphone.iapp.samsung"
"""The application name carried in every envelope sent by a remote controller.
   The TV does not answer envelopes carrying any other name."""

TV_APP_NAME = b"iapp.samsung"
"""The application name the TV puts in its own envelopes. Clients do not validate it."""

ENVELOPE_RESERVED_BYTE = 0x00
"""The first byte of every envelope."""

AUTH_PAYLOAD_MARKER = 0x64
"""The first byte of an authentication request payload. It is followed by a single 0x00."""

AUTH_PAYLOAD_PREFIX = bytes([AUTH_PAYLOAD_MARKER, 0x00])

KEY_PAYLOAD_PREFIX = b"\x00\x00\x00"
"""The three reserved bytes that begin a key payload."""

LENGTH_PREFIX_SIZE = 2
"""All length fields are unsigned 16-bit little-endian."""

MAX_FIELD_LENGTH = 0xFFFF
"""The maximum length of any length-prefixed field, including the envelope payload."""
