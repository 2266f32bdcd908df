# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV remote control client.

Provides the TCP/IP connection, the authentication session state machine, and
the client API built on them.
"""

from .client_config import SamsungTvClientConfig, default_client_id
from .connection import TcpTvConnection
from .session import TvSession, SessionState
from .client_impl import SamsungTvClient
from .simple import samsung_tv_connect
