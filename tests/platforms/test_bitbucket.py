"""Tests for the Bitbucket Cloud client."""

from __future__ import annotations

from typing import Any

import pytest

from prcoverage.core.errors import PlatformApiError
from prcoverage.platforms import Annotation, BitbucketClient, Report

REPO = "/2.0/repositories/acme/shop"


@pytest.fixture
def client(fake_api: Any) -> BitbucketClient:
    return BitbucketClient("acme", "shop", "tok", transport=fake_api.transport)


class TestPullRequest:
    """Tests for diff, head commit and comments."""

    def test_get_diff(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("GET", f"{REPO}/pullrequests/7/diff", text="diff --git a/x b/x\n")

        assert client.get_diff(7) == "diff --git a/x b/x\n"
        request = fake_api.requests[0]
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["Accept"] == "text/plain"

    def test_get_head_commit(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route(
            "GET", f"{REPO}/pullrequests/7", json={"source": {"commit": {"hash": "abc123"}}}
        )
        assert client.get_head_commit(7) == "abc123"

    def test_post_comment(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("POST", f"{REPO}/pullrequests/7/comments", status_code=201, json={})

        client.post_comment(7, "## hi")

        assert fake_api.body(0) == {"content": {"raw": "## hi"}}


class TestReports:
    """Tests for Code Insights reports and annotations."""

    def test_list_reports_keeps_coverage_only(
        self, client: BitbucketClient, fake_api: Any
    ) -> None:
        fake_api.route(
            "GET",
            f"{REPO}/commit/abc/reports",
            json={
                "values": [
                    {"uuid": "{1}", "external_id": "old", "report_type": "COVERAGE"},
                    {"uuid": "{2}", "external_id": "lint", "report_type": "BUG"},
                ]
            },
        )

        reports = client.list_reports("abc")

        assert reports == [Report(id="{1}", external_id="old", title="")]

    def test_list_reports_follows_next_page(
        self, client: BitbucketClient, fake_api: Any
    ) -> None:
        path = f"{REPO}/commit/abc/reports"
        fake_api.route(
            "GET",
            path,
            json={
                "values": [{"uuid": "{1}", "external_id": "old-1", "report_type": "COVERAGE"}],
                "next": f"https://api.bitbucket.org{path}?page=2",
            },
        )
        fake_api.route(
            "GET",
            path,
            json={
                "values": [{"uuid": "{2}", "external_id": "old-2", "report_type": "COVERAGE"}]
            },
        )

        reports = client.list_reports("abc")

        assert [r.external_id for r in reports] == ["old-1", "old-2"]
        assert len(fake_api.requests) == 2
        assert fake_api.requests[1].url.params["page"] == "2"

    def test_delete_report_by_external_id(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("DELETE", f"{REPO}/commit/abc/reports/old", status_code=204)
        client.delete_report("abc", Report(id="{1}", external_id="old"))
        assert fake_api.calls() == [("DELETE", f"{REPO}/commit/abc/reports/old")]

    def test_create_report_payload(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("PUT", f"{REPO}/commit/abc/reports/ext-1", json={"uuid": "{new}"})

        report_id = client.create_report("abc", external_id="ext-1", percentage=50.0, passed=False)

        assert report_id == "{new}"
        payload = fake_api.body(0)
        assert payload["report_type"] == "COVERAGE"
        assert payload["result"] == "FAILED"
        assert payload["title"] == "Coverage report"
        assert payload["data"] == [
            {"type": "PERCENTAGE", "title": "Coverage of new code", "value": 50.0}
        ]

    def test_annotations_are_batched(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("POST", f"{REPO}/commit/abc/reports/rep-1/annotations", json=[])
        annotations = [
            Annotation(path="src/a.php", line=n, external_id=f"e{n}") for n in range(1, 151)
        ]

        client.add_annotations("abc", "rep-1", annotations)

        assert len(fake_api.requests) == 2
        first = fake_api.body(0)
        assert len(first) == 100
        assert len(fake_api.body(1)) == 50
        assert first[0] == {
            "external_id": "e1",
            "annotation_type": "VULNERABILITY",
            "summary": "Line not covered in tests",
            "severity": "HIGH",
            "path": "src/a.php",
            "line": 1,
        }

    def test_source_url(self, client: BitbucketClient) -> None:
        assert (
            client.source_url("abc", "src/a.php", 12)
            == "https://bitbucket.org/acme/shop/src/abc/src/a.php#lines-12"
        )


class TestErrors:
    """Tests for non-2xx handling."""

    def test_error_message_from_body(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route(
            "GET", f"{REPO}/pullrequests/7", status_code=403, json={"error": {"message": "Denied"}}
        )

        with pytest.raises(PlatformApiError) as exc_info:
            client.get_head_commit(7)

        assert exc_info.value.status_code == 403
        assert "Denied" in exc_info.value.message

    def test_non_json_error_body(self, client: BitbucketClient, fake_api: Any) -> None:
        fake_api.route("GET", f"{REPO}/pullrequests/7/diff", status_code=500, text="oops")

        with pytest.raises(PlatformApiError, match="API error"):
            client.get_diff(7)
