# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from samsung_legacy_remote.internal_types import *
from samsung_legacy_remote import SamsungTvClientConfig
from samsung_legacy_remote.emulator import SamsungTvEmulator

TEST_CLIENT_ID = "test-remote"
TEST_CLIENT_NAME = "Test Remote"

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps SAMSUNG_TV_* settings of the developer's shell out of the tests."""
    for name in ('HOST', 'PORT', 'CLIENT_IP', 'CLIENT_ID', 'CLIENT_NAME', 'KEY_DELAY', 'CONFIG'):
        monkeypatch.delenv(f"SAMSUNG_TV_{name}", raising=False)

@pytest_asyncio.fixture
async def start_emulator() -> AsyncIterator[Callable[..., Awaitable[SamsungTvEmulator]]]:
    """Factory fixture that starts emulators on ephemeral loopback ports, and
       stops them at the end of the test."""
    emulators: List[SamsungTvEmulator] = []

    async def factory(**kwargs: Any) -> SamsungTvEmulator:
        kwargs.setdefault('bind_addr', '127.0.0.1')
        kwargs.setdefault('port', 0)
        emulator = SamsungTvEmulator(**kwargs)
        await emulator.start()
        emulators.append(emulator)
        return emulator

    yield factory

    for emulator in emulators:
        await emulator.close_and_wait()

def client_config_for(emulator: SamsungTvEmulator, **kwargs: Any) -> SamsungTvClientConfig:
    kwargs.setdefault('client_id', TEST_CLIENT_ID)
    kwargs.setdefault('client_name', TEST_CLIENT_NAME)
    return SamsungTvClientConfig(
        default_host='127.0.0.1',
        default_port=emulator.port,
        **kwargs
      )

async def wait_until(predicate: Callable[[], bool], timeout: float=2.0) -> None:
    """Polls predicate until it returns True, failing the test after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail("Timed out waiting for condition")
        await asyncio.sleep(0.01)
