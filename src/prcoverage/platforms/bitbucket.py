"""Bitbucket Cloud (API 2.0) client.

Reports map to Code Insights reports of type COVERAGE, annotations to
Code Insights annotations.
"""

from __future__ import annotations

from typing import ClassVar

import structlog

from prcoverage.platforms.base import Annotation, HttpPlatformClient, Report

log = structlog.get_logger(__name__)

# Bitbucket accepts at most 100 annotations per bulk request
_ANNOTATION_BATCH = 100


class BitbucketClient(HttpPlatformClient):
    name: ClassVar[str] = "bitbucket"
    default_api_url: ClassVar[str] = "https://api.bitbucket.org/2.0"
    web_url: ClassVar[str] = "https://bitbucket.org"

    @property
    def _repo_path(self) -> str:
        return f"/repositories/{self.workspace}/{self.repository}"

    def get_diff(self, pull_request_id: int) -> str:
        url = f"{self._repo_path}/pullrequests/{pull_request_id}/diff"
        return self._request("GET", url, headers={"Accept": "text/plain"}).text

    def get_head_commit(self, pull_request_id: int) -> str:
        body = self._json("GET", f"{self._repo_path}/pullrequests/{pull_request_id}")
        return str(body["source"]["commit"]["hash"])

    def post_comment(self, pull_request_id: int, markdown: str) -> None:
        self._request(
            "POST",
            f"{self._repo_path}/pullrequests/{pull_request_id}/comments",
            json={"content": {"raw": markdown}},
        )

    def list_reports(self, commit_id: str) -> list[Report]:
        reports: list[Report] = []
        url: str | None = f"{self._repo_path}/commit/{commit_id}/reports"
        while url:
            body = self._json("GET", url)
            reports.extend(
                Report(
                    id=str(item.get("uuid", "")),
                    external_id=item.get("external_id"),
                    title=item.get("title", ""),
                )
                for item in body.get("values", [])
                if item.get("report_type") == "COVERAGE"
            )
            # Absolute URL of the next page, absent on the last one
            url = body.get("next")
        return reports

    def delete_report(self, commit_id: str, report: Report) -> None:
        report_key = report.external_id or report.id
        self._request("DELETE", f"{self._repo_path}/commit/{commit_id}/reports/{report_key}")

    def create_report(
        self,
        commit_id: str,
        *,
        external_id: str,
        percentage: float,
        passed: bool,
    ) -> str:
        payload = {
            "external_id": external_id,
            "title": self.report_title,
            "details": "Coverage report of the modified/created code",
            "report_type": "COVERAGE",
            "result": "PASSED" if passed else "FAILED",
            "data": [
                {
                    "type": "PERCENTAGE",
                    "title": "Coverage of new code",
                    "value": percentage,
                }
            ],
        }
        body = self._json(
            "PUT", f"{self._repo_path}/commit/{commit_id}/reports/{external_id}", json=payload
        )
        return str(body["uuid"])

    def add_annotations(
        self, commit_id: str, report_id: str, annotations: list[Annotation]
    ) -> None:
        url = f"{self._repo_path}/commit/{commit_id}/reports/{report_id}/annotations"
        for start in range(0, len(annotations), _ANNOTATION_BATCH):
            batch = annotations[start : start + _ANNOTATION_BATCH]
            self._request(
                "POST",
                url,
                json=[
                    {
                        "external_id": a.external_id,
                        "annotation_type": "VULNERABILITY",
                        "summary": a.summary,
                        "severity": "HIGH",
                        "path": a.path,
                        "line": a.line,
                    }
                    for a in batch
                ],
            )
        log.debug("annotations_added", platform=self.name, count=len(annotations))

    def source_url(self, commit_id: str, path: str, line: int) -> str:
        return (
            f"{self.web_url}/{self.workspace}/{self.repository}/src/{commit_id}/{path}#lines-{line}"
        )
