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
"""Tests for SNMP process table collection."""

import stat
from pathlib import Path

import pytest

from proc_check.models import HR_SW_RUN_ENTRY, SnmpTarget
from proc_check.snmp import (
    SnmpError,
    _build_snmpwalk_command,
    _classify_snmpwalk_error,
    _redact_snmp_command,
    fetch_table,
    normalize_snmp_version,
    parse_walk_output,
    validate_snmp_credentials,
)

WALK_OUTPUT = """\
.1.3.6.1.2.1.25.4.2.1.1.1 = INTEGER: 1
.1.3.6.1.2.1.25.4.2.1.2.1 = STRING: "systemd"
.1.3.6.1.2.1.25.4.2.1.2.2 = STRING: ""
.1.3.6.1.2.1.25.4.2.1.2.3 = STRING: "sshd"
.1.3.6.1.2.1.25.4.2.1.7.1 = INTEGER: 1
.1.3.6.1.2.1.25.4.2.1.7.3 = INTEGER: 2
"""


def _fake_snmpwalk(
    tmp_path: Path, stdout: str | bytes, stderr: str = "", exit_code: int = 0
) -> Path:
    if isinstance(stdout, str):
        stdout = stdout.encode("utf-8")
    (tmp_path / "stdout.txt").write_bytes(stdout)
    (tmp_path / "stderr.txt").write_text(stderr, encoding="utf-8")
    script = tmp_path / "snmpwalk"
    script.write_text(
        "#!/bin/sh\n"
        f'echo "$@" > "{tmp_path}/args.txt"\n'
        f'cat "{tmp_path}/stdout.txt"\n'
        f'cat "{tmp_path}/stderr.txt" >&2\n'
        f"exit {exit_code}\n",
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


def test_parse_walk_output_extracts_numeric_oids() -> None:
    entries = parse_walk_output(WALK_OUTPUT.splitlines())

    assert entries[f"{HR_SW_RUN_ENTRY}.2.1"] == "systemd"
    assert entries[f"{HR_SW_RUN_ENTRY}.2.2"] == ""
    assert entries[f"{HR_SW_RUN_ENTRY}.7.3"] == "2"
    assert len(entries) == 6


def test_parse_walk_output_ignores_foreign_lines() -> None:
    lines = [
        ".1.3.6.1.2.1.1.5.0 = STRING: host01",
        "No more variables left in this MIB View (It is past the end of the MIB tree)",
        ".1.3.6.1.2.1.25.4.2.1.2.4 = STRING: cron",
    ]

    entries = parse_walk_output(lines)

    assert entries == {f"{HR_SW_RUN_ENTRY}.2.4": "cron"}


def test_parse_walk_output_unescapes_quotes() -> None:
    lines = [r'.1.3.6.1.2.1.25.4.2.1.2.8 = STRING: "say \"hi\" \\ bye"']

    entries = parse_walk_output(lines)

    assert entries[f"{HR_SW_RUN_ENTRY}.2.8"] == 'say "hi" \\ bye'


def test_build_snmpwalk_command_community() -> None:
    target = SnmpTarget(host="10.0.0.1", snmp_version="v2c", snmp_community="secret")

    command = _build_snmpwalk_command("snmpwalk", target, 5, 0, HR_SW_RUN_ENTRY)

    assert command == [
        "snmpwalk",
        "-v",
        "2c",
        "-t",
        "5",
        "-r",
        "0",
        "-On",
        "-Oe",
        "-c",
        "secret",
        "10.0.0.1",
        HR_SW_RUN_ENTRY,
    ]


def test_build_snmpwalk_command_snmpv3_auth_priv() -> None:
    target = SnmpTarget(
        host="10.0.0.1",
        snmp_version="3",
        snmp_community=None,
        snmp_user="snmpuser",
        snmp_auth="sha:authpass",
        snmp_priv="aes:privpass",
    )

    command = _build_snmpwalk_command("snmpwalk", target, 2, 1, HR_SW_RUN_ENTRY)

    assert command[9:] == [
        "-l",
        "authPriv",
        "-u",
        "snmpuser",
        "-a",
        "sha",
        "-A",
        "authpass",
        "-x",
        "aes",
        "-X",
        "privpass",
        "10.0.0.1",
        HR_SW_RUN_ENTRY,
    ]


def test_redact_snmp_command_hides_secrets() -> None:
    command = [
        "snmpwalk",
        "-v",
        "2c",
        "-c",
        "public",
        "-A",
        "authpass",
        "-X",
        "privpass",
        "10.0.0.1",
        HR_SW_RUN_ENTRY,
    ]

    redacted = _redact_snmp_command(command)

    assert redacted[redacted.index("-c") + 1] == "******"
    assert redacted[redacted.index("-A") + 1] == "******"
    assert redacted[redacted.index("-X") + 1] == "******"
    assert command[4] == "public"


def test_classify_snmpwalk_error_auth_failure() -> None:
    output = "Authentication failure (incorrect password, community or key)"

    assert _classify_snmpwalk_error(output) == "SNMP_AUTH_FAILED"


def test_classify_snmpwalk_error_mib_missing() -> None:
    output = "No Such Object available on this agent at this OID"

    assert _classify_snmpwalk_error(output) == "SNMP_MIB_MISSING"


def test_classify_snmpwalk_error_target_unreachable() -> None:
    output = "Timeout: No Response from 10.0.0.1"

    assert _classify_snmpwalk_error(output) == "SNMP_TARGET_UNREACHABLE"


def test_validate_snmp_credentials() -> None:
    assert validate_snmp_credentials(SnmpTarget(host="h"))
    assert not validate_snmp_credentials(SnmpTarget(host="h", snmp_community=""))
    assert not validate_snmp_credentials(SnmpTarget(host="h", snmp_version="3"))
    assert not validate_snmp_credentials(
        SnmpTarget(host="h", snmp_version="3", snmp_user="u", snmp_priv="aes:x")
    )
    assert validate_snmp_credentials(
        SnmpTarget(host="h", snmp_version="3", snmp_user="u", snmp_auth="sha:x")
    )


def test_normalize_snmp_version() -> None:
    assert normalize_snmp_version("v1") == "1"
    assert normalize_snmp_version("2") == "2c"
    assert normalize_snmp_version("V2C") == "2c"
    assert normalize_snmp_version("3") == "3"
    with pytest.raises(ValueError, match="unsupported SNMP version"):
        normalize_snmp_version("4")


def test_fetch_table_runs_snmpwalk(tmp_path: Path) -> None:
    script = _fake_snmpwalk(tmp_path, WALK_OUTPUT)

    entries = fetch_table(SnmpTarget(host="10.0.0.1"), timeout=5, snmpwalk_cmd=str(script))

    assert entries[f"{HR_SW_RUN_ENTRY}.2.3"] == "sshd"
    args = (tmp_path / "args.txt").read_text(encoding="utf-8").split()
    assert args[-2:] == ["10.0.0.1", HR_SW_RUN_ENTRY]
    assert "-On" in args


def test_fetch_table_classifies_failures(tmp_path: Path) -> None:
    script = _fake_snmpwalk(tmp_path, "", "Timeout: No Response from 10.0.0.1.", exit_code=1)

    with pytest.raises(SnmpError) as excinfo:
        fetch_table(SnmpTarget(host="10.0.0.1"), timeout=5, snmpwalk_cmd=str(script))

    assert excinfo.value.code == "SNMP_TARGET_UNREACHABLE"
    assert "No Response" in str(excinfo.value)


def test_fetch_table_empty_walk_is_error(tmp_path: Path) -> None:
    script = _fake_snmpwalk(tmp_path, "")

    with pytest.raises(SnmpError) as excinfo:
        fetch_table(SnmpTarget(host="10.0.0.1"), timeout=5, snmpwalk_cmd=str(script))

    assert excinfo.value.code == "SNMP_TABLE_EMPTY"


def test_fetch_table_missing_command(tmp_path: Path) -> None:
    with pytest.raises(SnmpError) as excinfo:
        fetch_table(
            SnmpTarget(host="10.0.0.1"),
            timeout=5,
            snmpwalk_cmd=str(tmp_path / "does-not-exist"),
        )

    assert excinfo.value.code == "SNMP_COMMAND_MISSING"


def test_fetch_table_rejects_incomplete_credentials() -> None:
    with pytest.raises(SnmpError) as excinfo:
        fetch_table(SnmpTarget(host="10.0.0.1", snmp_version="3"), timeout=5)

    assert excinfo.value.code == "SNMP_AUTH_FAILED"


def test_fetch_table_tolerates_non_utf8_names(tmp_path: Path) -> None:
    output = (
        b'.1.3.6.1.2.1.25.4.2.1.2.1 = STRING: "Proze\xdf.exe"\n'
        b'.1.3.6.1.2.1.25.4.2.1.2.2 = STRING: "sshd"\n'
        b".1.3.6.1.2.1.25.4.2.1.7.2 = INTEGER: 1\n"
    )
    script = _fake_snmpwalk(tmp_path, output)

    entries = fetch_table(SnmpTarget(host="10.0.0.1"), timeout=5, snmpwalk_cmd=str(script))

    assert entries[f"{HR_SW_RUN_ENTRY}.2.2"] == "sshd"
    assert entries[f"{HR_SW_RUN_ENTRY}.2.1"] == "Proze\\xdf.exe"
