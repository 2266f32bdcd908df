#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST API routes for sending remote control keys to a Samsung TV.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

import time

from .logger import logger
from ..internal_types import *
from .. import (
    __version__ as pkg_version,
    SamsungTvClient,
  )
from ..util import error_info

router = APIRouter(prefix="/api/v1")

TRUE_STRINGS = ("true", "1", "yes", "y", "on")

def get_client(request: Request) -> SamsungTvClient:
    return request.app.state.tv_client

@router.get("/")
async def root(request: Request) -> Dict[str, Any]:
    client = get_client(request)
    return { "message": f"Hello World! Serving TV at {client}" }

@router.get("/version")
async def version() -> Dict[str, Any]:
    """Returns the samsung-legacy-remote package version"""
    return { "version": pkg_version }

@router.get("/config")
async def config_data(request: Request) -> Dict[str, Any]:
    """Returns the current client configuration."""
    client = get_client(request)
    return dict(config=client.config.to_jsonable())

async def send_one_key(client: SamsungTvClient, key: str) -> JsonableDict:
    logger.info(f"Sending key {key}")
    result: JsonableDict = dict(key=key)
    try:
        await client.send_key_by_identifier(key)
    except Exception as exc:
        result.update(error_info(exc))
    return result

@router.get("/key/{key}")
async def send_key(key: str, request: Request) -> Dict[str, Any]:
    """Sends a single key (e.g., KEY_VOLUP) to the TV."""
    return await send_one_key(get_client(request), key)

@router.get("/keys/{keys}")
async def send_keys(
        keys: str,
        request: Request,
        continue_on_error: str=""
      ) -> Dict[str, Any]:
    """Sends one or more keys (comma-delimited) to the TV and returns a list of results.

    If continue_on_error is True, then remaining keys are sent after a
    failure; otherwise, sending stops at the first error encountered. In any
    case, results from all keys attempted are returned.
    """
    client = get_client(request)
    continue_on_error_flag = continue_on_error.lower() in TRUE_STRINGS
    key_list = [ k for k in keys.split(',') if k != '' ]
    logger.info(f"Sending keys {key_list} with continue_on_error={continue_on_error_flag}")
    results: List[JsonableDict] = []
    for key in key_list:
        result = await send_one_key(client, key)
        results.append(result)
        if "error" in result and not continue_on_error_flag:
            break
    return { "results": results }

@router.get("/ping")
async def ping(request: Request) -> Dict[str, Any]:
    """Returns the health status of the API server and the TV session."""
    client = get_client(request)
    launch_time: float = request.app.state.launch_time
    up_time = time.monotonic() - launch_time
    result: Dict[str, Any] = dict(
        server_status="OK",
        up_time=up_time,
        session_state=client.state.name,
      )
    result["tv_status"] = "OK" if client.is_authenticated else "ERROR"
    return result
