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
"""Reduce requested processes to a verdict and list discovered processes."""

from __future__ import annotations

import logging
from typing import Sequence

from proc_check.models import ProcessState, ProcessTable, QueryResult
from proc_check.table import classify

_LOGGER = logging.getLogger(__name__)


def evaluate(
    table: ProcessTable,
    requested_names: Sequence[str],
    want_state: ProcessState = ProcessState.RUNNING,
) -> QueryResult:
    """Classify each requested process and group the names by state.

    The result is passing only if every requested process is in
    ``want_state``. Duplicate names are evaluated and reported each time.
    """

    if not requested_names:
        raise ValueError("no process names given")

    passing = True
    groups: dict[ProcessState, list[str]] = {}
    for name in requested_names:
        state = classify(table, name)
        if state != want_state:
            passing = False
            _LOGGER.debug("%s is %s, expected %s", name, state.label, want_state.label)
        groups.setdefault(state, []).append(name)

    ordered = {state: tuple(groups[state]) for state in sorted(groups)}
    return QueryResult(want_state=want_state, passing=passing, groups=ordered)


def list_processes(table: ProcessTable) -> list[str]:
    """Return ``name: state`` lines for every discovered process, sorted by name."""

    return [f"{name}: {classify(table, name).label}" for name in sorted(table.indices)]
