"""GitHub REST client.

Reports map to check runs. GitHub cannot delete check runs, so a stale
coverage run is superseded: it is re-concluded as ``neutral`` before the new
run is created.
"""

from __future__ import annotations

from typing import Any, ClassVar

import structlog

from prcoverage.platforms.base import Annotation, HttpPlatformClient, Report
from prcoverage.report.markdown import format_percentage

log = structlog.get_logger(__name__)

# GitHub accepts at most 50 annotations per check run update
_ANNOTATION_BATCH = 50


class GitHubClient(HttpPlatformClient):
    name: ClassVar[str] = "github"
    default_api_url: ClassVar[str] = "https://api.github.com"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # check run id -> output block; PATCHing annotations must resend title/summary
        self._outputs: dict[str, dict[str, str]] = {}

    def _default_headers(self, token: str) -> dict[str, str]:
        return {
            **super()._default_headers(token),
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.workspace}/{self.repository}"

    @property
    def web_url(self) -> str:
        if self.api_url == self.default_api_url:
            return "https://github.com"
        # GitHub Enterprise Server: https://host/api/v3
        return self.api_url.removesuffix("/api/v3")

    def get_diff(self, pull_request_id: int) -> str:
        response = self._request(
            "GET",
            f"{self._repo_path}/pulls/{pull_request_id}",
            headers={"Accept": "application/vnd.github.diff"},
        )
        return response.text

    def get_head_commit(self, pull_request_id: int) -> str:
        body = self._json("GET", f"{self._repo_path}/pulls/{pull_request_id}")
        return str(body["head"]["sha"])

    def post_comment(self, pull_request_id: int, markdown: str) -> None:
        self._request(
            "POST",
            f"{self._repo_path}/issues/{pull_request_id}/comments",
            json={"body": markdown},
        )

    def list_reports(self, commit_id: str) -> list[Report]:
        body = self._json(
            "GET",
            f"{self._repo_path}/commits/{commit_id}/check-runs",
            params={"check_name": self.report_title, "filter": "all"},
        )
        return [
            Report(
                id=str(run["id"]),
                external_id=run.get("external_id") or None,
                title=run.get("name", ""),
            )
            for run in body.get("check_runs", [])
            if run.get("conclusion") != "neutral"
        ]

    def delete_report(self, commit_id: str, report: Report) -> None:
        self._request(
            "PATCH",
            f"{self._repo_path}/check-runs/{report.id}",
            json={
                "conclusion": "neutral",
                "output": {
                    "title": "Superseded",
                    "summary": f"Superseded by a newer coverage report for {commit_id}.",
                },
            },
        )

    def create_report(
        self,
        commit_id: str,
        *,
        external_id: str,
        percentage: float,
        passed: bool,
    ) -> str:
        output = {
            "title": f"{format_percentage(percentage)} of new code covered",
            "summary": "Coverage report of the modified/created code",
        }
        body = self._json(
            "POST",
            f"{self._repo_path}/check-runs",
            json={
                "name": self.report_title,
                "head_sha": commit_id,
                "external_id": external_id,
                "status": "completed",
                "conclusion": "success" if passed else "failure",
                "output": output,
            },
        )
        report_id = str(body["id"])
        self._outputs[report_id] = output
        return report_id

    def add_annotations(
        self, commit_id: str, report_id: str, annotations: list[Annotation]
    ) -> None:
        output = self._outputs.get(
            report_id,
            {"title": self.report_title, "summary": "Lines not covered in tests"},
        )
        for start in range(0, len(annotations), _ANNOTATION_BATCH):
            batch = annotations[start : start + _ANNOTATION_BATCH]
            self._request(
                "PATCH",
                f"{self._repo_path}/check-runs/{report_id}",
                json={
                    "output": {
                        **output,
                        "annotations": [
                            {
                                "path": a.path,
                                "start_line": a.line,
                                "end_line": a.line,
                                "annotation_level": "warning",
                                "message": a.summary,
                            }
                            for a in batch
                        ],
                    }
                },
            )
        log.debug("annotations_added", platform=self.name, commit=commit_id, count=len(annotations))

    def source_url(self, commit_id: str, path: str, line: int) -> str:
        return f"{self.web_url}/{self.workspace}/{self.repository}/blob/{commit_id}/{path}#L{line}"
