#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import argparse
import json
import asyncio
import logging
from signal import SIGINT, SIGTERM

import dotenv

from samsung_legacy_remote.internal_types import *
from samsung_legacy_remote import (
    __version__ as pkg_version,
    DEFAULT_PORT,
    SamsungTvClientConfig,
    samsung_tv_connect,
  )
from samsung_legacy_remote.util import error_info

class CmdExitError(RuntimeError):
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        if msg is None:
            msg = f"Command exited with return code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    async def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    async def cmd_emulator(self) -> int:
        from samsung_legacy_remote.emulator import SamsungTvEmulator
        emulator = SamsungTvEmulator(
            auth_policy=self._args.policy,
            await_count=self._args.await_count,
            bind_addr=self._args.bind,
            port=self._args.port,
          )
        def sigint_cleanup() -> None:
            emulator.close(CmdExitError(1, "Emulator terminated with SIGINT or SIGTERM"))
        loop = asyncio.get_running_loop()
        for signal in (SIGINT, SIGTERM):
            loop.add_signal_handler(signal, sigint_cleanup)
        try:
            await emulator.run()
        finally:
            for signal in (SIGINT, SIGTERM):
                loop.remove_signal_handler(signal)
        return 0

    async def cmd_send(self) -> int:
        continue_on_error: bool = self._args.continue_on_error
        config = SamsungTvClientConfig(
            default_host=self._args.host,
            default_port=self._args.port,
            client_ip=self._args.client_ip,
            client_id=self._args.client_id,
            client_name=self._args.client_name,
            key_delay_secs=self._args.delay,
          )

        keys: List[str] = self._args.keys
        if len(keys) == 0:
            raise CmdExitError(1, "No keys specified")
        results: List[JsonableDict] = []
        try:
            async with await samsung_tv_connect(config=config) as client:
                for key in keys:
                    result: JsonableDict = dict(key=key)
                    try:
                        await client.send_key_by_identifier(key)
                    except Exception as exc:
                        result.update(error_info(exc))
                        results.append(result)
                        if not continue_on_error:
                            raise
                    else:
                        results.append(result)
        finally:
            print(json.dumps(results, indent=2))
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    async def arun(self) -> int:
        """Run the samsung-legacy-remote command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Remote control for legacy Samsung TVs.")

        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')

        # ======================= emulator

        parser_emulator = subparsers.add_parser('emulator', description="Run a TV emulator for testing purposes.")
        parser_emulator.add_argument("--port", default=DEFAULT_PORT, type=int,
            help=f"Port number to listen on. Default: {DEFAULT_PORT}")
        parser_emulator.add_argument('-b', '--bind', default="0.0.0.0",
                            help='''The local unicast IP address to bind to. Default: 0.0.0.0.''')
        parser_emulator.add_argument('--policy', default='grant',
                            choices=['grant', 'deny', 'timeout', 'silent', 'garbled', 'hangup'],
                            help='''How the emulated user answers access requests. Default: grant''')
        parser_emulator.add_argument('--await-count', dest='await_count', default=1, type=int,
                            help='''Number of "waiting for user" responses sent before the answer. Default: 1''')
        parser_emulator.set_defaults(func=self.cmd_emulator)

        # ======================= send

        parser_send = subparsers.add_parser('send', description="Authenticate with a TV and send one or more keys.")
        parser_send.add_argument('--host', default=None,
                            help='''The TV IP address. Default: use env var SAMSUNG_TV_HOST.''')
        parser_send.add_argument("--port", default=None, type=int,
            help=f"TV port number to connect to. Default: env var SAMSUNG_TV_PORT, or {DEFAULT_PORT}")
        parser_send.add_argument('--client-ip', dest='client_ip', default=None,
                            help='''The controller IP address sent to the TV. Default: the local address of the connection.''')
        parser_send.add_argument('--client-id', dest='client_id', default=None,
                            help='''The unique controller ID sent to the TV. Default: derived from this machine.''')
        parser_send.add_argument('--client-name', dest='client_name', default=None,
                            help='''The controller name displayed by the TV.''')
        parser_send.add_argument('--delay', default=None, type=float,
                            help='''Delay after each key, in seconds. Default: 0''')
        parser_send.add_argument('--continue', dest="continue_on_error", action='store_true', default=False,
                            help='Continue sending keys on error. Default: False')
        parser_send.add_argument('keys', nargs=argparse.REMAINDER,
                            help='''One or more key identifiers to send; e.g., "KEY_VOLUP".''')
        parser_send.set_defaults(func=self.cmd_send)

        # ======================= version

        parser_version = subparsers.add_parser('version',
                                description='''Display version information.''')
        parser_version.set_defaults(func=self.cmd_version)

        # =========================================================

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            func: Callable[[], Awaitable[int]] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = await func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            ex_desc = str(ex)
            if len(ex_desc) == 0:
                ex_desc = ex.__class__.__name__
            print(f"samsung-legacy-remote: error: {ex_desc}", file=sys.stderr)
        except BaseException as ex:
            print(f"samsung-legacy-remote: Unhandled exception {ex.__class__.__name__}: {ex}", file=sys.stderr)
            raise

        return rc

    def run(self) -> int:
        return asyncio.run(self.arun())

def run(argv: Optional[Sequence[str]]=None) -> int:
    dotenv.load_dotenv()
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

async def arun(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = await CommandHandler(argv).arun()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    sys.exit(run())
