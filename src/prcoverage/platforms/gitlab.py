"""GitLab REST (v4) client.

Reports map to commit statuses. Posting a status with the same name on the
same commit replaces the previous one, so there is nothing stale to list or
delete. Annotations map to line comments on the head commit.
"""

from __future__ import annotations

from typing import Any, ClassVar
from urllib.parse import quote

import structlog

from prcoverage.platforms.base import Annotation, HttpPlatformClient, Report
from prcoverage.report.markdown import format_percentage

log = structlog.get_logger(__name__)

_DIFFS_PER_PAGE = 100


def _render_file_diff(entry: dict[str, Any]) -> str:
    """Rebuild a ``git diff`` file section from a merge request diff entry."""
    old_path = entry["old_path"]
    new_path = entry["new_path"]
    lines = [f"diff --git a/{old_path} b/{new_path}"]
    if entry.get("new_file"):
        lines.append(f"new file mode {entry.get('b_mode') or '100644'}")
    if entry.get("deleted_file"):
        lines.append(f"deleted file mode {entry.get('a_mode') or '100644'}")
    if entry.get("renamed_file"):
        lines.append(f"rename from {old_path}")
        lines.append(f"rename to {new_path}")

    body = entry.get("diff") or ""
    if body:
        lines.append("--- /dev/null" if entry.get("new_file") else f"--- a/{old_path}")
        lines.append("+++ /dev/null" if entry.get("deleted_file") else f"+++ b/{new_path}")
        lines.append(body.rstrip("\n"))
    return "\n".join(lines) + "\n"


class GitLabClient(HttpPlatformClient):
    name: ClassVar[str] = "gitlab"
    default_api_url: ClassVar[str] = "https://gitlab.com/api/v4"

    @property
    def _project_path(self) -> str:
        project = quote(f"{self.workspace}/{self.repository}", safe="")
        return f"/projects/{project}"

    @property
    def web_url(self) -> str:
        return self.api_url.removesuffix("/api/v4")

    def get_diff(self, pull_request_id: int) -> str:
        sections: list[str] = []
        page: str | None = "1"
        while page:
            response = self._request(
                "GET",
                f"{self._project_path}/merge_requests/{pull_request_id}/diffs",
                params={"page": page, "per_page": _DIFFS_PER_PAGE},
            )
            sections.extend(_render_file_diff(entry) for entry in response.json())
            page = response.headers.get("X-Next-Page") or None
        return "".join(sections)

    def get_head_commit(self, pull_request_id: int) -> str:
        body = self._json("GET", f"{self._project_path}/merge_requests/{pull_request_id}")
        return str(body["sha"])

    def post_comment(self, pull_request_id: int, markdown: str) -> None:
        self._request(
            "POST",
            f"{self._project_path}/merge_requests/{pull_request_id}/notes",
            json={"body": markdown},
        )

    def list_reports(self, commit_id: str) -> list[Report]:
        # A new status with the same name replaces the old one in place
        return []

    def delete_report(self, commit_id: str, report: Report) -> None:
        log.debug(
            "report_replaced_in_place", platform=self.name, commit=commit_id, report=report.id
        )

    def create_report(
        self,
        commit_id: str,
        *,
        external_id: str,
        percentage: float,
        passed: bool,
    ) -> str:
        body = self._json(
            "POST",
            f"{self._project_path}/statuses/{commit_id}",
            json={
                "state": "success" if passed else "failed",
                "name": self.report_title,
                "description": f"{format_percentage(percentage)} of new code covered",
                "coverage": round(percentage, 2),
            },
        )
        log.debug("status_created", platform=self.name, external_id=external_id)
        return str(body["id"])

    def add_annotations(
        self, commit_id: str, report_id: str, annotations: list[Annotation]
    ) -> None:
        url = f"{self._project_path}/repository/commits/{commit_id}/comments"
        for a in annotations:
            self._request(
                "POST",
                url,
                json={"note": a.summary, "path": a.path, "line": a.line, "line_type": "new"},
            )
        log.debug("annotations_added", platform=self.name, report=report_id, count=len(annotations))

    def source_url(self, commit_id: str, path: str, line: int) -> str:
        return (
            f"{self.web_url}/{self.workspace}/{self.repository}/-/blob/{commit_id}/{path}#L{line}"
        )
