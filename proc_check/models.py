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
"""Data models for proc-check."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Mapping

HR_SW_RUN_ENTRY = "1.3.6.1.2.1.25.4.2.1"
NAME_COLUMN = "2"
STATUS_COLUMN = "7"


class ProcessState(IntEnum):
    """Run state of a process, ordered from least to most healthy."""

    UNKNOWN = 0
    INVALID = 1
    NOT_RUNNABLE = 2
    RUNNABLE = 3
    RUNNING = 4

    @property
    def label(self) -> str:
        return STATE_LABELS[self]


STATE_LABELS: dict[ProcessState, str] = {
    ProcessState.UNKNOWN: "Unknown",
    ProcessState.INVALID: "Invalid",
    ProcessState.NOT_RUNNABLE: "Not Runnable",
    ProcessState.RUNNABLE: "Runnable",
    ProcessState.RUNNING: "Running",
}

# hrSWRunStatus values as defined by HOST-RESOURCES-MIB.
SNMP_STATUS_MAP: dict[int, ProcessState] = {
    1: ProcessState.RUNNING,
    2: ProcessState.RUNNABLE,
    3: ProcessState.NOT_RUNNABLE,
    4: ProcessState.INVALID,
}


@dataclass(frozen=True)
class SnmpTarget:
    """Host and credentials used for a single SNMP query."""

    host: str
    snmp_version: str = "1"
    snmp_community: str | None = "public"
    snmp_user: str | None = None
    snmp_auth: str | None = None
    snmp_priv: str | None = None


@dataclass(frozen=True)
class ProcessTable:
    """Process name to row index mapping plus the raw entries it came from."""

    indices: Mapping[str, str]
    entries: Mapping[str, str]
    base_oid: str = HR_SW_RUN_ENTRY

    def __contains__(self, name: object) -> bool:
        return name in self.indices

    def __len__(self) -> int:
        return len(self.indices)

    def status_oid(self, row_index: str) -> str:
        return f"{self.base_oid}.{STATUS_COLUMN}.{row_index}"


@dataclass(frozen=True)
class QueryResult:
    """Outcome of evaluating requested processes against a desired state."""

    want_state: ProcessState
    passing: bool
    groups: Mapping[ProcessState, tuple[str, ...]] = field(default_factory=dict)

    @property
    def states(self) -> list[ProcessState]:
        """States present in the report, in ascending order."""

        return sorted(self.groups)
