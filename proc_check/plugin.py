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
"""Monitoring plugin wiring for the process state check."""

from __future__ import annotations

import logging
from typing import Sequence

import mplugin

from proc_check.evaluate import evaluate
from proc_check.models import HR_SW_RUN_ENTRY, ProcessState, QueryResult, SnmpTarget
from proc_check.output import format_report
from proc_check.snmp import SnmpError, fetch_table
from proc_check.table import reconstruct

_LOGGER = logging.getLogger(__name__)

METRIC_NAME = "processes"


class ProcessTableResource(mplugin.Resource):
    """Fetch the remote process table and evaluate the requested processes."""

    def __init__(
        self,
        target: SnmpTarget,
        names: Sequence[str],
        want_state: ProcessState,
        timeout: int,
        snmpwalk_cmd: str = "snmpwalk",
        base_oid: str = HR_SW_RUN_ENTRY,
    ) -> None:
        self.target = target
        self.names = list(names)
        self.want_state = want_state
        self.timeout = timeout
        self.snmpwalk_cmd = snmpwalk_cmd
        self.base_oid = base_oid

    @property
    def name(self) -> str:
        return "PROCESSES"

    def probe(self) -> mplugin.Metric:
        try:
            entries = fetch_table(
                self.target,
                self.timeout,
                base_oid=self.base_oid,
                snmpwalk_cmd=self.snmpwalk_cmd,
            )
        except SnmpError as exc:
            raise mplugin.CheckError(str(exc)) from exc
        table = reconstruct(entries, self.base_oid)
        _LOGGER.info("Found %s processes on %s", len(table), self.target.host)
        result = evaluate(table, self.names, self.want_state)
        return mplugin.Metric(METRIC_NAME, result, context=METRIC_NAME)


class ProcessStateContext(mplugin.Context):
    """OK when every requested process is in the wanted state, CRITICAL otherwise."""

    def __init__(self, name: str = METRIC_NAME) -> None:
        super().__init__(name)

    def evaluate(self, metric: mplugin.Metric, resource: mplugin.Resource) -> mplugin.Result:
        result: QueryResult = metric.value
        hint = format_report(result)
        if result.passing:
            return self.ok(hint, metric)
        return self.critical(hint, metric)


class ProcessSummary(mplugin.Summary):
    """Use the grouped report as status line."""

    def ok(self, results: mplugin.Results) -> str:
        return results[0].hint or ""

    def problem(self, results: mplugin.Results) -> str:
        return results.first_significant.hint or ""

    def verbose(self, results: mplugin.Results) -> list[str]:
        lines: list[str] = []
        for result in results:
            if result.metric is None:
                continue
            query: QueryResult = result.metric.value
            lines.append(f"expected state: {query.want_state.label}")
            for state in query.states:
                lines.append(f"{state.label}: {', '.join(query.groups[state])}")
        return lines


def build_check(
    target: SnmpTarget,
    names: Sequence[str],
    want_state: ProcessState,
    timeout: int,
    snmpwalk_cmd: str = "snmpwalk",
) -> mplugin.Check:
    """Assemble the check from its resource, context and summary."""

    return mplugin.Check(
        ProcessTableResource(target, names, want_state, timeout, snmpwalk_cmd),
        ProcessStateContext(),
        ProcessSummary(),
    )
