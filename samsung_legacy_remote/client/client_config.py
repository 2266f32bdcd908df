# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV client configuration.

Settings are layered: built-in defaults, then SAMSUNG_TV_* environment
variables, then an optional base configuration, then explicit arguments.
"""

from __future__ import annotations

import os
import uuid

from ..internal_types import *
from ..exceptions import SamsungTvError
from ..constants import (
    DEFAULT_PORT,
    DEFAULT_KEY_DELAY,
    DEFAULT_CLIENT_NAME,
    DEFAULT_CONNECT_TIMEOUT,
  )

def default_client_id() -> str:
    """A client ID that is stable for this machine, so a TV that has granted
       access once does not need to ask again."""
    return f"python-remote-{uuid.getnode():012x}"

def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value == '':
        return None
    try:
        return float(value)
    except ValueError as e:
        raise SamsungTvError(f"Invalid value for environment variable {name}: '{value}'") from e

class SamsungTvClientConfig:
    """Samsung TV client configuration."""
    default_host: Optional[str]
    default_port: int
    client_ip: Optional[str]
    client_id: str
    client_name: str
    key_delay_secs: float
    connect_timeout_secs: Optional[float]

    def __init__(
            self,
            default_host: Optional[str]=None,
            *,
            default_port: Optional[int]=None,
            client_ip: Optional[str]=None,
            client_id: Optional[str]=None,
            client_name: Optional[str]=None,
            key_delay_secs: Optional[float]=None,
            connect_timeout_secs: Optional[float]=None,
            base_config: Optional[SamsungTvClientConfig]=None
          ) -> None:
        """Creates a configuration for a Samsung TV client.

           Args:
             default_host: The IP address of the TV. If None, taken from the
                   SAMSUNG_TV_HOST environment variable.
             default_port: The TCP/IP port of the TV. If None, taken from
                   SAMSUNG_TV_PORT, or 55000 if that is not set.
             client_ip:
                   The controller IP address sent to the TV when
                   authenticating. If None, taken from SAMSUNG_TV_CLIENT_IP; if
                   that is not set, the local address of the connection is used.
             client_id:
                   The unique controller identifier sent to the TV. If None,
                   taken from SAMSUNG_TV_CLIENT_ID, or derived from this
                   machine's hardware address.
             client_name:
                   The controller name the TV displays when asking the user
                   for access. If None, taken from SAMSUNG_TV_CLIENT_NAME.
             key_delay_secs:
                   The delay after each key send, in seconds. If None, taken
                   from SAMSUNG_TV_KEY_DELAY, or 0.
             connect_timeout_secs:
                   Timeout for establishing the TCP connection. If None, the
                   base config is used; by default there is no timeout.
             base_config:
                   An optional base configuration to use.
        """
        if base_config is None:
            self.init_from_defaults()
        else:
            self.init_from_base_config(base_config)

        if default_host is not None and default_host != '':
            self.default_host = default_host

        if default_port is not None and default_port > 0:
            self.default_port = default_port

        if client_ip is not None and client_ip != '':
            self.client_ip = client_ip

        if client_id is not None and client_id != '':
            self.client_id = client_id

        if client_name is not None and client_name != '':
            self.client_name = client_name

        if key_delay_secs is not None:
            if key_delay_secs < 0:
                raise SamsungTvError(f"Key delay must not be negative: {key_delay_secs}")
            self.key_delay_secs = key_delay_secs

        if connect_timeout_secs is not None:
            self.connect_timeout_secs = connect_timeout_secs

    def init_from_defaults(self) -> None:
        """Initializes the configuration from defaults and the environment."""
        default_host: Optional[str] = os.environ.get('SAMSUNG_TV_HOST')
        if default_host == '':
            default_host = None
        self.default_host = default_host
        default_port_str = os.environ.get('SAMSUNG_TV_PORT')
        if default_port_str is None or default_port_str == '':
            self.default_port = DEFAULT_PORT
        else:
            try:
                self.default_port = int(default_port_str)
            except ValueError as e:
                raise SamsungTvError(f"Invalid value for environment variable SAMSUNG_TV_PORT: '{default_port_str}'") from e
        client_ip = os.environ.get('SAMSUNG_TV_CLIENT_IP')
        self.client_ip = None if client_ip == '' else client_ip
        self.client_id = os.environ.get('SAMSUNG_TV_CLIENT_ID') or default_client_id()
        self.client_name = os.environ.get('SAMSUNG_TV_CLIENT_NAME') or DEFAULT_CLIENT_NAME
        key_delay_secs = _env_float('SAMSUNG_TV_KEY_DELAY')
        self.key_delay_secs = DEFAULT_KEY_DELAY if key_delay_secs is None else key_delay_secs
        self.connect_timeout_secs = DEFAULT_CONNECT_TIMEOUT

    def init_from_base_config(self, base_config: SamsungTvClientConfig) -> None:
        """Initializes the configuration from a base configuration."""
        self.default_host = base_config.default_host
        self.default_port = base_config.default_port
        self.client_ip = base_config.client_ip
        self.client_id = base_config.client_id
        self.client_name = base_config.client_name
        self.key_delay_secs = base_config.key_delay_secs
        self.connect_timeout_secs = base_config.connect_timeout_secs

    def to_jsonable(self) -> JsonableDict:
        return dict(
            default_host=self.default_host,
            default_port=self.default_port,
            client_ip=self.client_ip,
            client_id=self.client_id,
            client_name=self.client_name,
            key_delay_secs=self.key_delay_secs,
            connect_timeout_secs=self.connect_timeout_secs,
          )

    @classmethod
    def from_jsonable(
            cls,
            data: JsonableDict,
            base_config: Optional[SamsungTvClientConfig]=None
          ) -> SamsungTvClientConfig:
        """Creates a configuration from a JSON object such as the one returned by
           to_jsonable(). Missing properties fall back to the environment and
           defaults."""
        known = ('default_host', 'default_port', 'client_ip', 'client_id',
                 'client_name', 'key_delay_secs', 'connect_timeout_secs')
        unknown = sorted(k for k in data.keys() if k not in known)
        if len(unknown) > 0:
            raise SamsungTvError(f"Unknown client configuration properties: {unknown}")
        return cls(base_config=base_config, **cast(Dict[str, Any], data))

    def __str__(self) -> str:
        return (
            f"SamsungTvClientConfig("
            f"default_host={self.default_host}, "
            f"default_port={self.default_port}, "
            f"client_id={self.client_id!r}, "
            f"key_delay_secs={self.key_delay_secs!r})"
          )

    def __repr__(self) -> str:
        return str(self)
