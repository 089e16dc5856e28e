"""Platform capability interface and shared HTTP plumbing.

Every hosting platform implements the same small set of capabilities
(``PlatformClient``). Only URL shapes, payload schemas and auth headers
differ; the publishing sequence lives in ``publisher.CoveragePublisher``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any, ClassVar, Protocol

import httpx
import structlog

from prcoverage.core.errors import PlatformApiError

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0
ANNOTATION_SUMMARY = "Line not covered in tests"


@dataclass(frozen=True, slots=True)
class Report:
    """A coverage report/check already attached to a commit."""

    id: str  # platform identifier
    external_id: str | None = None
    title: str = ""


@dataclass(frozen=True, slots=True)
class Annotation:
    """One uncovered line to flag inline."""

    path: str
    line: int
    external_id: str
    summary: str = ANNOTATION_SUMMARY


class PlatformClient(Protocol):
    """Capabilities a hosting platform must provide."""

    name: ClassVar[str]

    def get_diff(self, pull_request_id: int) -> str: ...

    def get_head_commit(self, pull_request_id: int) -> str: ...

    def list_reports(self, commit_id: str) -> list[Report]: ...

    def delete_report(self, commit_id: str, report: Report) -> None: ...

    def create_report(
        self,
        commit_id: str,
        *,
        external_id: str,
        percentage: float,
        passed: bool,
    ) -> str:
        """Create the report and return the identifier annotations attach to."""
        ...

    def add_annotations(
        self, commit_id: str, report_id: str, annotations: list[Annotation]
    ) -> None: ...

    def post_comment(self, pull_request_id: int, markdown: str) -> None: ...

    def source_url(self, commit_id: str, path: str, line: int) -> str: ...

    def close(self) -> None: ...


def error_message(response: httpx.Response) -> str:
    """Best-effort error text from a platform's JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return "API error"
    if not isinstance(body, dict):
        return "API error"

    message = body.get("message")
    if message is None and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
    if message is None:
        message = body.get("error")
    return str(message) if message else "API error"


class HttpPlatformClient:
    """Shared httpx plumbing: auth, timeout, non-2xx handling.

    Subclasses set ``name`` and ``default_api_url`` and build paths relative
    to the API root. No request is retried; any non-2xx response or transport
    failure raises PlatformApiError.
    """

    name: ClassVar[str] = "http"
    default_api_url: ClassVar[str] = ""

    def __init__(
        self,
        workspace: str,
        repository: str,
        token: str,
        *,
        api_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        report_title: str = "Coverage report",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.workspace = workspace
        self.repository = repository
        self.report_title = report_title
        self.api_url = (api_url or self.default_api_url).rstrip("/")
        self._client = httpx.Client(
            base_url=self.api_url,
            headers=self._default_headers(token),
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def _default_headers(self, token: str) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.warning("platform_request_failed", platform=self.name, method=method, url=url)
            raise PlatformApiError.from_response(
                0, f"{type(e).__name__}: {e}", method=method, url=url
            ) from e

        log.debug(
            "platform_request",
            platform=self.name,
            method=method,
            url=url,
            status=response.status_code,
        )
        if not response.is_success:
            raise PlatformApiError.from_response(
                response.status_code, error_message(response), method=method, url=url
            )
        return response

    def _json(self, method: str, url: str, **kwargs: Any) -> Any:
        response = self._request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise PlatformApiError.from_response(
                response.status_code, "invalid JSON in response", method=method, url=url
            ) from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpPlatformClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
