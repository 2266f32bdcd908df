# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for legacy Samsung TVs (remote control on port 55000).

This module defines the wire formats and the handshake response signatures.
It does not contain protocol implementations or I/O.
"""

from .constants import (
    APP_NAME,
    TV_APP_NAME,
    AUTH_PAYLOAD_MARKER,
    KEY_PAYLOAD_PREFIX,
    MAX_FIELD_LENGTH,
  )

from .fields import (
    pack_field,
    unpack_field,
    to_base64,
    from_base64,
  )

from .envelope import Envelope

from .codec import (
    AuthRequest,
    validate_ip_address,
    encode_envelope,
    encode_message,
    decode_envelope,
    encode_auth_payload,
    decode_auth_payload,
    encode_key_payload,
    decode_key_payload,
    is_auth_payload,
    is_key_payload,
  )

from .handshake import (
    ACCESS_GRANTED,
    ACCESS_DENIED,
    ACCESS_AWAIT,
    ACCESS_TIMEOUT,
    AccessResponse,
    classify_response,
  )
