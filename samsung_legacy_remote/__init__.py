# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package samsung_legacy_remote provides a command-line tool and API for
remote control of legacy (2010-2013) Samsung TVs via their proprietary
TCP/IP protocol on port 55000.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    SamsungTvError,
    InvalidAddressError,
    ConnectError,
    WriteError,
    PayloadTooLargeError,
    MalformedFrameError,
    InvalidStateError,
    AuthenticationError,
    AccessDeniedError,
    AuthTimeoutError,
    UnrecognizedResponseError,
    AuthAbortedError,
  )

from .constants import DEFAULT_PORT, DEFAULT_KEY_DELAY, DEFAULT_CLIENT_NAME

from .client import (
    SamsungTvClient,
    SamsungTvClientConfig,
    TcpTvConnection,
    default_client_id,
    TvSession,
    SessionState,
    samsung_tv_connect,
  )

from .protocol import (
    Envelope,
    AuthRequest,
    AccessResponse,
    encode_envelope,
    encode_message,
    decode_envelope,
    encode_auth_payload,
    decode_auth_payload,
    encode_key_payload,
    decode_key_payload,
    classify_response,
  )

from .util import (
    full_class_name,
    full_name_of_class,
    error_info,
)
