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
"""Process table collection via SNMP using the snmpwalk CLI."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from proc_check.models import HR_SW_RUN_ENTRY, SnmpTarget

_LOGGER = logging.getLogger(__name__)

_LINE_PATTERN = re.compile(
    r"^\.?(?P<oid>\d+(?:\.\d+)+)\s*=\s*(?:(?P<type>[\w-]+):\s*)?(?P<value>.*)$"
)
_ESCAPE_PATTERN = re.compile(r'\\(["\\])')


class SnmpError(Exception):
    """SNMP collection failed before a complete table was received."""

    def __init__(self, code: str, detail: str = "") -> None:
        self.code = code
        self.detail = detail
        message = f"{code}: {detail}" if detail else code
        super().__init__(message)


@dataclass(frozen=True)
class SnmpwalkResult:
    """Result of running snmpwalk."""

    lines: list[str]
    error: str | None
    detail: str = ""


def fetch_table(
    target: SnmpTarget,
    timeout: int,
    base_oid: str = HR_SW_RUN_ENTRY,
    retries: int = 0,
    snmpwalk_cmd: str = "snmpwalk",
) -> dict[str, str]:
    """Walk the subtree at ``base_oid`` and return numeric OIDs mapped to values.

    Raises :class:`SnmpError` when the walk cannot be completed; partial
    output is never returned.
    """

    if not validate_snmp_credentials(target):
        _LOGGER.warning("SNMP credentials invalid for %s", target.host)
        raise SnmpError("SNMP_AUTH_FAILED", "incomplete credentials")

    if not _command_exists(snmpwalk_cmd):
        _LOGGER.error("snmpwalk command not found: %s", snmpwalk_cmd)
        raise SnmpError("SNMP_COMMAND_MISSING", snmpwalk_cmd)

    result = _run_snmpwalk(snmpwalk_cmd, target, timeout, retries, base_oid)
    if result.error:
        raise SnmpError(result.error, result.detail)

    entries = parse_walk_output(result.lines, base_oid)
    if not entries:
        _LOGGER.error("snmpwalk returned no rows below %s on %s", base_oid, target.host)
        raise SnmpError("SNMP_TABLE_EMPTY", f"no entries below {base_oid}")
    _LOGGER.debug("Collected %s entries from %s", len(entries), target.host)
    return entries


def parse_walk_output(lines: Iterable[str], base_oid: str = HR_SW_RUN_ENTRY) -> dict[str, str]:
    """Parse ``snmpwalk -On`` output into a map of OID to value."""

    prefix = base_oid.lstrip(".") + "."
    entries: dict[str, str] = {}
    for line in lines:
        match = _LINE_PATTERN.match(line.strip())
        if not match:
            continue
        oid = match.group("oid")
        if not oid.startswith(prefix):
            continue
        entries[oid] = _strip_snmp_value(match.group("value"))
    return entries


def validate_snmp_credentials(target: SnmpTarget) -> bool:
    """Validate SNMP credentials for the configured version."""

    version = target.snmp_version.strip().lower()
    if version in {"3", "v3"}:
        if not target.snmp_user:
            return False
        auth = _parse_snmpv3_credential(target.snmp_auth)
        priv = _parse_snmpv3_credential(target.snmp_priv)
        if priv and not auth:
            return False
        if target.snmp_auth and not auth:
            return False
        if target.snmp_priv and not priv:
            return False
        return True
    return bool(target.snmp_community)


def normalize_snmp_version(raw_version: str) -> str:
    """Map user supplied SNMP versions to the spelling snmpwalk expects."""

    version = raw_version.strip().lower()
    if version in {"1", "v1"}:
        return "1"
    if version in {"2", "2c", "v2", "v2c"}:
        return "2c"
    if version in {"3", "v3"}:
        return "3"
    raise ValueError(f"unsupported SNMP version {raw_version!r}")


def _command_exists(command: str) -> bool:
    """Check if a command exists on PATH."""

    return Path(command).is_file() or bool(shutil.which(command))


def _build_snmpwalk_command(
    snmpwalk_cmd: str,
    target: SnmpTarget,
    timeout: int,
    retries: int,
    oid: str,
) -> list[str]:
    """Build a snmpwalk command list based on target credentials."""

    version = normalize_snmp_version(target.snmp_version)
    command = [
        snmpwalk_cmd,
        "-v",
        version,
        "-t",
        str(timeout),
        "-r",
        str(retries),
        "-On",
        "-Oe",
    ]

    if version == "3":
        command.extend(_snmpv3_args(target))
    else:
        command.extend(["-c", target.snmp_community or ""])

    command.extend([target.host, oid])
    return command


def _snmpv3_args(target: SnmpTarget) -> list[str]:
    """Build SNMPv3 auth/priv arguments for snmpwalk."""

    auth = _parse_snmpv3_credential(target.snmp_auth)
    priv = _parse_snmpv3_credential(target.snmp_priv)
    if priv and auth:
        level = "authPriv"
    elif auth:
        level = "authNoPriv"
    else:
        level = "noAuthNoPriv"

    args = ["-l", level, "-u", target.snmp_user or ""]
    if auth:
        args.extend(["-a", auth[0], "-A", auth[1]])
    if priv:
        args.extend(["-x", priv[0], "-X", priv[1]])
    return args


def _parse_snmpv3_credential(raw: str | None) -> tuple[str, str] | None:
    """Parse SNMPv3 credential fields in the form protocol:secret."""

    if not raw:
        return None
    parts = raw.split(":", 1)
    if len(parts) != 2:
        return None
    protocol, secret = (part.strip() for part in parts)
    if not protocol or not secret:
        return None
    return protocol, secret


def _run_snmpwalk(
    snmpwalk_cmd: str,
    target: SnmpTarget,
    timeout: int,
    retries: int,
    oid: str,
) -> SnmpwalkResult:
    """Run snmpwalk and return output lines plus error classification."""

    command = _build_snmpwalk_command(snmpwalk_cmd, target, timeout, retries, oid)
    _LOGGER.info("Running snmpwalk: %s", " ".join(_redact_snmp_command(command)))
    try:
        result = subprocess.run(
            command,
            check=False,
            capture_output=True,
            encoding="utf-8",
            errors="backslashreplace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        _LOGGER.error("snmpwalk on %s exceeded %ss", target.host, timeout)
        return SnmpwalkResult([], "SNMP_TIMEOUT", f"no complete answer within {timeout}s")
    except OSError as exc:
        _LOGGER.error("Failed to run snmpwalk: %s", exc)
        return SnmpwalkResult([], "SNMP_COMMAND_FAILED", str(exc))

    if result.returncode != 0:
        combined_output = "\n".join([result.stdout, result.stderr]).strip()
        error_code = _classify_snmpwalk_error(combined_output)
        _LOGGER.warning(
            "snmpwalk failed for %s (%s). stderr=%s",
            target.host,
            error_code,
            result.stderr.strip() or "<empty>",
        )
        detail = result.stderr.strip().splitlines()[0] if result.stderr.strip() else ""
        return SnmpwalkResult([], error_code, detail)

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    _LOGGER.info("snmpwalk succeeded for %s (%s lines)", target.host, len(lines))
    return SnmpwalkResult(lines, None)


def _redact_snmp_command(command: list[str]) -> list[str]:
    """Redact secrets from an snmpwalk command for logging."""

    redacted = command.copy()
    secret_flags = {"-c", "-A", "-X"}
    for index, token in enumerate(redacted[:-1]):
        if token in secret_flags:
            redacted[index + 1] = "******"
    return redacted


def _classify_snmpwalk_error(output: str) -> str:
    """Classify snmpwalk error output into a stable error code."""

    lowered = output.lower()
    auth_markers = (
        "authentication failure",
        "authorization error",
        "unknown user name",
        "wrong community",
    )
    if any(marker in lowered for marker in auth_markers):
        return "SNMP_AUTH_FAILED"

    mib_markers = (
        "unknown object identifier",
        "no such object",
        "no such instance",
        "cannot find module",
        "mib not found",
    )
    if any(marker in lowered for marker in mib_markers):
        return "SNMP_MIB_MISSING"

    reachability_markers = (
        "timeout",
        "no response",
        "no route to host",
        "network is unreachable",
        "connection refused",
        "host is down",
        "unknown host",
    )
    if any(marker in lowered for marker in reachability_markers):
        return "SNMP_TARGET_UNREACHABLE"

    return "SNMP_UNKNOWN_ERROR"


def _strip_snmp_value(raw_value: str) -> str:
    """Normalize snmpwalk values by removing surrounding quotes and escapes."""

    value = raw_value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return _ESCAPE_PATTERN.sub(r"\1", value[1:-1])
    return value
