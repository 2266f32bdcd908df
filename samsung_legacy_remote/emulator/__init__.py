# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Samsung TV emulator.

Provides a simple emulation of a legacy Samsung TV remote control port on TCP/IP.
"""

from .emulator_impl import SamsungTvEmulator, AuthPolicy, GARBLED_RESPONSE
from .session import SamsungTvEmulatorSession, EmulatorSessionState
