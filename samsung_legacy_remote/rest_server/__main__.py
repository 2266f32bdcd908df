# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that sends remote control keys to a Samsung TV.
"""
import sys
import uvicorn
import logging
from dotenv import load_dotenv

def run() -> int:
    load_dotenv()

    logging.basicConfig(level=logging.INFO)

    from samsung_legacy_remote.rest_server.app import tv_api
    uvicorn.run(tv_api, host="0.0.0.0", port=8000, log_config=None)
    return 0

if __name__ == "__main__":
    rc = run()
    sys.exit(rc)
