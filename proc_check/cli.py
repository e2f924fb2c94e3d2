# Copyright 2025 proc-check contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Sequence

import mplugin

from proc_check.evaluate import list_processes
from proc_check.models import ProcessState, SnmpTarget
from proc_check.normalize import expand_names, parse_state
from proc_check.output import write_listing
from proc_check.plugin import build_check
from proc_check.snmp import (
    SnmpError,
    fetch_table,
    normalize_snmp_version,
    validate_snmp_credentials,
)
from proc_check.table import reconstruct

__version__ = "1.0.0"

_LOGGER = logging.getLogger(__name__)


class PluginArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with the UNKNOWN exit code."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(int(mplugin.unknown), f"{self.prog}: error: {message}\n")


def _state_arg(value: str) -> ProcessState:
    try:
        return parse_state(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _snmp_version_arg(value: str) -> str:
    try:
        return normalize_snmp_version(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _timeout_arg(value: str) -> int:
    try:
        timeout = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout {value!r}") from None
    if timeout <= 0:
        raise argparse.ArgumentTypeError("timeout must be a positive number of seconds")
    return timeout


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""

    parser = PluginArgumentParser(
        prog="check_snmp_proc",
        description="Check the run state of processes on a remote host via SNMP.",
    )
    parser.add_argument("-H", "--host", required=True, help="host to query")
    parser.add_argument(
        "-t",
        "--timeout",
        type=_timeout_arg,
        default=30,
        help="SNMP timeout seconds (default: 30)",
    )
    parser.add_argument(
        "-C", "--community", default="public", help="SNMP community (default: public)"
    )
    parser.add_argument(
        "-V",
        "--snmp-version",
        type=_snmp_version_arg,
        default="1",
        help="SNMP version: 1, 2c or 3 (default: 1)",
    )
    parser.add_argument("-u", "--snmp-user", help="SNMPv3 user name")
    parser.add_argument("--snmp-auth", help="SNMPv3 authentication as PROTOCOL:SECRET")
    parser.add_argument("--snmp-priv", help="SNMPv3 privacy as PROTOCOL:SECRET")
    parser.add_argument(
        "--state",
        type=_state_arg,
        default=ProcessState.RUNNING,
        help="expected process state, e.g. running or not-runnable (default: running)",
    )
    parser.add_argument(
        "--comma-separated",
        action="store_true",
        help="split each process argument on commas",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="list all processes with their states and exit",
    )
    parser.add_argument("--snmpwalk", default="snmpwalk", help="path to the snmpwalk command")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase plugin output verbosity (up to -vvv)",
    )
    parser.add_argument(
        "--log-level",
        default="WARN",
        choices=["INFO", "DEBUG", "WARN"],
        help="log level for messages on stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("names", nargs="*", metavar="PROCESS", help="process names to check")
    return parser


def configure_logging(level: str) -> None:
    """Configure logging."""

    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s %(message)s")


def build_target(args: argparse.Namespace) -> SnmpTarget:
    """Build the SNMP target from parsed arguments."""

    return SnmpTarget(
        host=args.host,
        snmp_version=args.snmp_version,
        snmp_community=args.community,
        snmp_user=args.snmp_user,
        snmp_auth=args.snmp_auth,
        snmp_priv=args.snmp_priv,
    )


def run_listing(target: SnmpTarget, timeout: int, snmpwalk_cmd: str = "snmpwalk") -> int:
    """Print every process with its state. Never produces a verdict."""

    try:
        entries = fetch_table(target, timeout, snmpwalk_cmd=snmpwalk_cmd)
    except SnmpError as exc:
        _LOGGER.error("Process listing failed: %s", exc)
        print(f"PROCESSES {str(mplugin.unknown).upper()} - {exc}")
        return int(mplugin.unknown)
    write_listing(sys.stdout, list_processes(reconstruct(entries)))
    return int(mplugin.ok)


@mplugin.guarded(verbose=0)
def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Run check_snmp_proc."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    target = build_target(args)
    if not validate_snmp_credentials(target):
        parser.error("incomplete SNMP credentials for the selected version")

    if args.list:
        sys.exit(run_listing(target, args.timeout, args.snmpwalk))

    names = expand_names(args.names, args.comma_separated)
    if not names:
        parser.error("no process names given")
    _LOGGER.debug("Checking %s for state %s", ", ".join(names), args.state.label)

    check = build_check(target, names, args.state, args.timeout, args.snmpwalk)
    check.main(verbose=args.verbose)


if __name__ == "__main__":
    main()
