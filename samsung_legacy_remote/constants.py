# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by samsung_legacy_remote"""

DEFAULT_PORT = 55000
"""The listen port number used by the TV for remote control over TCP/IP."""

DEFAULT_KEY_DELAY = 0.0
"""The default delay after each key send, in seconds. Some TVs drop
   key events that arrive in rapid succession."""

DEFAULT_CLIENT_NAME = "Python Remote"
"""The default controller name displayed by the TV when asking the user for access."""

DEFAULT_CONNECT_TIMEOUT = None
"""The default timeout for establishing the TCP connection, in seconds. None
   waits for the OS to report success or failure."""
