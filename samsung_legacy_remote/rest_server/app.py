#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that sends remote control keys to a Samsung TV.
"""

from __future__ import annotations

from fastapi import FastAPI

import time
import os
import json

from contextlib import asynccontextmanager

from .logger import logger
from ..internal_types import *
from .. import (
    SamsungTvClient,
    SamsungTvClientConfig,
    samsung_tv_connect,
  )

from .api import router as api_router

def load_raw_config() -> JsonableDict:
    """Loads the JSON client configuration named by SAMSUNG_TV_CONFIG, or
       ./samsung_tv_config.json if that exists. Returns an empty config otherwise."""
    config_file = os.environ.get("SAMSUNG_TV_CONFIG", None)
    if config_file is None:
        if os.path.exists("samsung_tv_config.json"):
            config_file = "samsung_tv_config.json"
    if config_file is None:
        return {}
    with open(config_file, "r") as f:
        raw_config: JsonableDict = json.load(f)
    return raw_config

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """
    logger.info("TV REST server starting up--initializing...")
    raw_config = load_raw_config()
    app.state.raw_config = raw_config
    tv_config = SamsungTvClientConfig.from_jsonable(raw_config)
    app.state.tv_config = tv_config
    app.state.launch_time = time.monotonic()
    logger.info(f"Connecting to TV at {tv_config.default_host}; accept the remote on the TV if asked...")
    tv_client = await samsung_tv_connect(config=tv_config)
    app.state.tv_client = tv_client
    try:
        logger.info(f"Serving API for TV at {tv_client}...")
        yield
    finally:
        logger.info("TV REST server shutting down--cleaning up...")
        await tv_client.aclose_quietly()

tv_api = FastAPI(lifespan=fastapi_lifetime)
tv_api.include_router(api_router)

def get_tv_client() -> SamsungTvClient:
    return tv_api.state.tv_client

def get_tv_config() -> SamsungTvClientConfig:
    return tv_api.state.tv_config

def get_raw_config() -> JsonableDict:
    return tv_api.state.raw_config
