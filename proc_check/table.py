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
"""Process table reconstruction and state classification."""

from __future__ import annotations

import logging
from typing import Mapping

from proc_check.models import (
    HR_SW_RUN_ENTRY,
    NAME_COLUMN,
    SNMP_STATUS_MAP,
    ProcessState,
    ProcessTable,
)

_LOGGER = logging.getLogger(__name__)


def reconstruct(entries: Mapping[str, str], base_oid: str = HR_SW_RUN_ENTRY) -> ProcessTable:
    """Build a process name to row index table from raw walk entries.

    Only the name column is consulted. Rows with an empty name are skipped.
    When several rows carry the same name the last one seen wins.
    """

    base = base_oid.lstrip(".")
    prefix = f"{base}.{NAME_COLUMN}."
    normalized = {oid.lstrip("."): value for oid, value in entries.items()}
    indices: dict[str, str] = {}
    for oid, value in normalized.items():
        if not oid.startswith(prefix):
            continue
        row_index = oid[len(prefix) :]
        name = "" if value is None else str(value)
        if not row_index or not name:
            continue
        if name in indices:
            _LOGGER.debug(
                "Duplicate process name %s at rows %s and %s; keeping %s",
                name,
                indices[name],
                row_index,
                row_index,
            )
        indices[name] = row_index
    return ProcessTable(indices=indices, entries=normalized, base_oid=base)


def classify(table: ProcessTable, name: str) -> ProcessState:
    """Return the run state of ``name``; anything unresolvable is UNKNOWN."""

    row_index = table.indices.get(name)
    if row_index is None:
        return ProcessState.UNKNOWN
    code = _parse_status_code(table.entries.get(table.status_oid(row_index)))
    if code is None:
        return ProcessState.UNKNOWN
    return SNMP_STATUS_MAP.get(code, ProcessState.UNKNOWN)


def _parse_status_code(raw_value: object) -> int | None:
    """Parse a raw hrSWRunStatus value into an integer, or None if malformed."""

    if raw_value is None or isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, int):
        return raw_value
    text = str(raw_value).strip()
    if len(text) != 1 or not (text.isascii() and text.isdigit()):
        return None
    return int(text)
