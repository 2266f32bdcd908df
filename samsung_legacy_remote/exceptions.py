#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

class SamsungTvError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class InvalidAddressError(SamsungTvError, ValueError):
  """An IP address supplied to connect or authenticate is not a valid IPv4/IPv6 literal."""
  pass

class ConnectError(SamsungTvError):
  """The TCP connection to the TV could not be established. The OS error is
     available as __cause__."""
  pass

class WriteError(SamsungTvError):
  """A frame could not be completely written to an established connection.
     The connection is no longer usable."""
  pass

class PayloadTooLargeError(SamsungTvError, ValueError):
  """A field or payload does not fit in a 16-bit length prefix."""
  pass

class MalformedFrameError(SamsungTvError):
  """Received bytes do not match the declared envelope or payload layout."""
  pass

class InvalidStateError(SamsungTvError):
  """An operation was attempted in a session state that does not allow it."""
  pass

class AuthenticationError(SamsungTvError):
  """Base class for failures of the authentication handshake."""
  pass

class AccessDeniedError(AuthenticationError):
  """The user rejected the remote controller on the TV."""
  pass

class AuthTimeoutError(AuthenticationError):
  """The TV reported that the access request timed out or was cancelled."""
  pass

class UnrecognizedResponseError(AuthenticationError):
  """The TV answered the access request with an unknown payload."""
  payload: bytes

  def __init__(self, payload: bytes, msg: Optional[str]=None):
    if msg is None:
      msg = f"Unrecognized authentication response payload: [{payload.hex(' ')}]"
    super().__init__(msg)
    self.payload = payload

class AuthAbortedError(AuthenticationError):
  """The connection was lost or closed before the TV answered the access request."""
  pass
