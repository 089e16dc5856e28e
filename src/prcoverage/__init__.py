"""prcoverage - gate pull requests on test coverage of the lines they add."""

from prcoverage.coverage import CoverageReport, FileCoverage, parse_artifact, parse_document
from prcoverage.diff import ModifiedLineSet, parse_diff
from prcoverage.gate import GateOutcome, evaluate
from prcoverage.reconcile import CoverageResult, reconcile

__version__ = "0.1.0"

__all__ = [
    "CoverageReport",
    "CoverageResult",
    "FileCoverage",
    "GateOutcome",
    "ModifiedLineSet",
    "evaluate",
    "parse_artifact",
    "parse_diff",
    "parse_document",
    "reconcile",
]
