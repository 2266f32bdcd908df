# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV simple client connection API.

Provides a one-call API to connect to and authenticate with a TV.
"""

from __future__ import annotations

from ..internal_types import *
from .client_config import SamsungTvClientConfig
from .client_impl import SamsungTvClient

async def samsung_tv_connect(
        host: Optional[str]=None,
        config: Optional[SamsungTvClientConfig]=None,
        authenticate: bool=True,
      ) -> SamsungTvClient:
    """Create and initialize (including the access handshake) a Samsung TV
       client from a configuration.

    Args:
        host: The IP address of the TV. If None, the host will be taken
                from the config or the SAMSUNG_TV_HOST environment variable.
        config: A SamsungTvClientConfig object that specifies the default
                host, port, client identity, etc. to use. If None, a default
                config will be created.
        authenticate:
                If True (the default), waits for the user to grant access on
                the TV before returning.

    On failure, the connection is closed and the error is raised.
    """
    return await SamsungTvClient.create(host=host, config=config, authenticate=authenticate)
