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
"""Output rendering for reports."""

from __future__ import annotations

from typing import Iterable, TextIO

from proc_check.models import QueryResult


def format_report(result: QueryResult) -> str:
    """Render the grouped report as a single status line.

    Groups appear in ascending state order, e.g.
    ``Unknown: gamma; Running: alpha, beta``.
    """

    parts = [
        f"{state.label}: {', '.join(result.groups[state])}" for state in result.states
    ]
    return "; ".join(parts)


def write_listing(handle: TextIO, lines: Iterable[str]) -> None:
    """Write one process listing line per row."""

    for line in lines:
        handle.write(f"{line}\n")
