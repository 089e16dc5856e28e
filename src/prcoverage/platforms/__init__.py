"""Hosting platform adapters.

Usage:
    from prcoverage.platforms import CoveragePublisher, create_client

    with create_client(config.platform, config.http) as client:
        CoveragePublisher(client).publish_report(result, pull_request_id=42)
"""

from __future__ import annotations

import httpx

from prcoverage.config.models import HttpConfig, PlatformConfig
from prcoverage.core.errors import ConfigError
from prcoverage.platforms.base import (
    Annotation,
    HttpPlatformClient,
    PlatformClient,
    Report,
    error_message,
)
from prcoverage.platforms.bitbucket import BitbucketClient
from prcoverage.platforms.github import GitHubClient
from prcoverage.platforms.gitlab import GitLabClient
from prcoverage.platforms.publisher import CoveragePublisher

CLIENT_BY_PLATFORM: dict[str, type[HttpPlatformClient]] = {
    cls.name: cls for cls in (BitbucketClient, GitHubClient, GitLabClient)
}

__all__ = [
    "Annotation",
    "BitbucketClient",
    "CLIENT_BY_PLATFORM",
    "CoveragePublisher",
    "GitHubClient",
    "GitLabClient",
    "HttpPlatformClient",
    "PlatformClient",
    "Report",
    "create_client",
    "error_message",
]


def create_client(
    platform: PlatformConfig,
    http: HttpConfig | None = None,
    *,
    report_title: str = "Coverage report",
    transport: httpx.BaseTransport | None = None,
) -> HttpPlatformClient:
    """Build the client for ``platform.name`` from explicit configuration.

    Raises:
        ConfigError: If the platform or any of its credentials is missing.
    """
    if platform.name is None:
        raise ConfigError.missing_required("platform.name")
    for field in ("workspace", "repository", "token"):
        if not getattr(platform, field):
            raise ConfigError.missing_required(f"platform.{field}")

    assert platform.workspace and platform.repository and platform.token
    client_cls = CLIENT_BY_PLATFORM[platform.name]
    return client_cls(
        platform.workspace,
        platform.repository,
        platform.token.get_secret_value(),
        api_url=platform.api_url,
        timeout=(http or HttpConfig()).timeout_sec,
        report_title=report_title,
        transport=transport,
    )
