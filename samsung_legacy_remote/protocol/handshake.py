# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

from enum import Enum

from ..internal_types import *

# Authentication handshake:
#   Client: envelope(auth request payload)
#   TV:     envelope(ACCESS_AWAIT), zero or more times, while the user decides
#   TV:     envelope(ACCESS_GRANTED | ACCESS_DENIED | ACCESS_TIMEOUT)
#   <Client may now send key request payloads; the TV does not acknowledge them>

ACCESS_GRANTED = b"\x64\x00\x01\x00"
"""Sent by the TV when the user grants access. Key events will now be executed."""

ACCESS_DENIED = b"\x64\x00\x00\x00"
"""Sent by the TV when the user rejects the remote controller."""

ACCESS_AWAIT = b"\x0a\x00\x02\x00\x00\x00"
"""Sent by the TV while it waits for the user to grant or deny access."""

ACCESS_TIMEOUT = b"\x65\x00"
"""Sent by the TV when the access request times out or is cancelled by the user."""

class AccessResponse(Enum):
    GRANTED = ACCESS_GRANTED
    DENIED = ACCESS_DENIED
    AWAIT = ACCESS_AWAIT
    TIMEOUT = ACCESS_TIMEOUT

def classify_response(payload: bytes) -> Optional[AccessResponse]:
    """Returns the AccessResponse whose signature equals the whole payload, or
       None if the payload matches none of them."""
    try:
        return AccessResponse(bytes(payload))
    except ValueError:
        return None
