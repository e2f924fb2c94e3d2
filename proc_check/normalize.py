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
"""Normalization utilities for command line input."""

from __future__ import annotations

import re
from typing import Iterable

from proc_check.models import STATE_LABELS, ProcessState


def normalize_state_name(raw_name: str) -> str:
    """Normalize a state name to a lower-case, single-space form."""

    if not raw_name:
        return ""
    cleaned = re.sub(r"[\s_-]+", " ", raw_name.strip())
    return cleaned.lower()


_STATE_BY_KEY: dict[str, ProcessState] = {
    normalize_state_name(label): state for state, label in STATE_LABELS.items()
}


def parse_state(raw_name: str) -> ProcessState:
    """Resolve a user supplied state name such as ``not-runnable``."""

    key = normalize_state_name(raw_name)
    state = _STATE_BY_KEY.get(key)
    if state is None:
        choices = ", ".join(_STATE_BY_KEY)
        raise ValueError(f"unknown state {raw_name!r} (choose from: {choices})")
    return state


def expand_names(raw_names: Iterable[str], comma_separated: bool = False) -> list[str]:
    """Return requested process names, splitting on commas when asked."""

    if not comma_separated:
        return list(raw_names)
    names: list[str] = []
    for raw_name in raw_names:
        names.extend(part.strip() for part in raw_name.split(",") if part.strip())
    return names
