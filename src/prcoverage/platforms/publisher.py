"""Publishing sequence shared by every platform.

``publish_report`` ordering:
1. resolve the pull request's head commit
2. remove every pre-existing coverage report for that commit
3. create the new report (PASSED/FAILED)
4. attach one annotation per uncovered line to the new report

Each step completes before the next starts and the first PlatformApiError
aborts the sequence, so no half-built report is left behind after a failed
create.
"""

from __future__ import annotations

import uuid

import structlog

from prcoverage.platforms.base import Annotation, PlatformClient
from prcoverage.reconcile import CoverageResult
from prcoverage.report.markdown import build_markdown_report

log = structlog.get_logger(__name__)

DEFAULT_REPORT_THRESHOLD = 80.0


class CoveragePublisher:
    """Posts comments and check reports through a PlatformClient."""

    def __init__(
        self,
        client: PlatformClient,
        *,
        report_threshold: float = DEFAULT_REPORT_THRESHOLD,
        report_title: str = "Coverage report",
    ) -> None:
        self.client = client
        self.report_threshold = report_threshold
        self.report_title = report_title

    def report_passed(self, result: CoverageResult) -> bool:
        """Report tag: FAILED at or below the report threshold.

        Kept separate from the gate's strict ``>`` check against its own
        configurable threshold.
        """
        return not result.coverage_percentage <= self.report_threshold

    def post_comment(self, result: CoverageResult, pull_request_id: int) -> None:
        commit_id = self.client.get_head_commit(pull_request_id)
        markdown = build_markdown_report(
            result,
            passed=self.report_passed(result),
            title=self.report_title,
            link_builder=lambda path, line: self.client.source_url(commit_id, path, line),
        )
        self.client.post_comment(pull_request_id, markdown)
        log.info("comment_posted", platform=self.client.name, pull_request=pull_request_id)

    def publish_report(self, result: CoverageResult, pull_request_id: int) -> str:
        """Replace the commit's coverage report. Returns the new report id."""
        commit_id = self.client.get_head_commit(pull_request_id)

        stale = self.client.list_reports(commit_id)
        for report in stale:
            self.client.delete_report(commit_id, report)

        passed = self.report_passed(result)
        report_id = self.client.create_report(
            commit_id,
            external_id=str(uuid.uuid4()),
            percentage=result.coverage_percentage,
            passed=passed,
        )

        annotations = [
            Annotation(path=path, line=line, external_id=str(uuid.uuid4()))
            for path, lines in result.uncovered_by_file.items()
            for line in lines
        ]
        if annotations:
            self.client.add_annotations(commit_id, report_id, annotations)

        log.info(
            "report_published",
            platform=self.client.name,
            commit=commit_id,
            report=report_id,
            replaced=len(stale),
            annotations=len(annotations),
            result="PASSED" if passed else "FAILED",
        )
        return report_id
