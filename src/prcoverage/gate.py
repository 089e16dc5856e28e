"""Pass/fail decision on the coverage of new code."""

from __future__ import annotations

from enum import Enum

import structlog

from prcoverage.reconcile import CoverageResult

log = structlog.get_logger(__name__)


class GateOutcome(Enum):
    PASS = "pass"
    FAIL = "fail"

    @property
    def passed(self) -> bool:
        return self is GateOutcome.PASS


def evaluate(result: CoverageResult, threshold: float) -> GateOutcome:
    """PASS only when the percentage is strictly greater than ``threshold``.

    A result exactly at the threshold fails.
    """
    outcome = GateOutcome.PASS if result.coverage_percentage > threshold else GateOutcome.FAIL
    log.info(
        "gate_evaluated",
        percentage=result.coverage_percentage,
        threshold=threshold,
        outcome=outcome.value,
    )
    return outcome
