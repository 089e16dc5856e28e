"""prcov check command - gate a pull request on coverage of new code."""

from __future__ import annotations

import contextlib
import json
from pathlib import Path
from typing import IO, Any

import click
import structlog

from prcoverage.config import PrCoverageConfig, load_config
from prcoverage.core.console import pluralize, status
from prcoverage.core.errors import ConfigError, PrCoverageError
from prcoverage.core.logging import clear_run_id, configure_logging, set_run_id
from prcoverage.coverage import parse_artifact
from prcoverage.diff import parse_diff
from prcoverage.gate import GateOutcome, evaluate
from prcoverage.platforms import CLIENT_BY_PLATFORM, CoveragePublisher, create_client
from prcoverage.reconcile import CoverageResult, reconcile
from prcoverage.report import compress_ranges, format_percentage

log = structlog.get_logger(__name__)


def _overrides(**sections: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Drop unset CLI flags so lower-precedence sources still apply."""
    result: dict[str, dict[str, Any]] = {}
    for section, values in sections.items():
        present = {k: v for k, v in values.items() if v is not None}
        if present:
            result[section] = present
    return result


def _print_summary(result: CoverageResult, outcome: GateOutcome, threshold: float) -> None:
    pct = format_percentage(result.coverage_percentage)
    status(
        f"Coverage of new code: {pct} "
        f"({result.total_covered}/{pluralize(result.total_countable, 'line')})",
        style="success" if outcome.passed else "error",
    )
    for path, lines in result.uncovered_by_file.items():
        status(f"{path}: {', '.join(compress_ranges(lines))}", indent=2)
    if outcome.passed:
        status(f"Coverage gate passed (> {threshold:g}%)", style="success")
    else:
        status(f"Coverage gate failed (must be > {threshold:g}%)", style="error")


def _result_json(result: CoverageResult, outcome: GateOutcome, threshold: float) -> str:
    return json.dumps(
        {
            "coverage_percentage": result.coverage_percentage,
            "total_countable": result.total_countable,
            "total_covered": result.total_covered,
            "uncovered_by_file": {p: list(lines) for p, lines in result.uncovered_by_file.items()},
            "threshold": threshold,
            "outcome": outcome.value,
        }
    )


def run_check(
    config: PrCoverageConfig,
    coverage_file: Path,
    diff_file: IO[str] | None,
    pull_request_id: int | None,
    *,
    comment: bool,
    report: bool,
) -> tuple[CoverageResult, GateOutcome]:
    """Parse, reconcile, gate and publish. Raises PrCoverageError on failure."""
    needs_platform = comment or report or diff_file is None

    with contextlib.ExitStack() as stack:
        client = None
        if needs_platform:
            if pull_request_id is None:
                raise ConfigError.missing_required("pull_request")
            client = stack.enter_context(
                create_client(config.platform, config.http, report_title=config.report.title)
            )

        # Absolute report paths are made relative to the checkout we run from
        coverage = parse_artifact(
            coverage_file,
            format_id=config.coverage.format,
            base_path=config.coverage.base_path or str(Path.cwd()),
        )
        if diff_file is not None:
            diff_text = diff_file.read()
        else:
            assert client is not None and pull_request_id is not None
            diff_text = client.get_diff(pull_request_id)

        result = reconcile(parse_diff(diff_text), coverage)
        outcome = evaluate(result, config.gate.threshold)

        if client is not None and pull_request_id is not None:
            publisher = CoveragePublisher(
                client,
                report_threshold=config.report.pass_threshold,
                report_title=config.report.title,
            )
            if comment:
                publisher.post_comment(result, pull_request_id)
            if report:
                publisher.publish_report(result, pull_request_id)

    return result, outcome


@click.command()
@click.argument(
    "coverage_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--diff",
    "diff_file",
    type=click.File("r"),
    default=None,
    help="Unified diff of the pull request ('-' for stdin). Fetched from the platform if omitted.",
)
@click.option(
    "--format",
    "format_id",
    type=click.Choice(["clover", "cobertura", "lcov"]),
    default=None,
    help="Coverage report format (auto-detected by default)",
)
@click.option(
    "--base-path",
    default=None,
    help="Prefix stripped from coverage report paths (default: the working directory)",
)
@click.option(
    "--threshold",
    type=float,
    default=None,
    help="Coverage of new code must be strictly greater than this (default 80)",
)
@click.option("--platform", type=click.Choice(sorted(CLIENT_BY_PLATFORM)), default=None)
@click.option("--workspace", default=None, help="Bitbucket workspace / GitHub owner / GitLab group")
@click.option("--repository", default=None, help="Repository slug")
@click.option("--token", envvar="PRCOVERAGE_TOKEN", default=None, help="Platform API token")
@click.option("--api-url", default=None, help="API root for self-hosted instances")
@click.option("--pull-request", "pull_request_id", type=int, default=None)
@click.option("--comment", is_flag=True, help="Post the result as a pull request comment")
@click.option("--report", is_flag=True, help="Publish a check report with line annotations")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./.prcoverage.yaml)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON on stdout")
@click.pass_context
def check_command(
    ctx: click.Context,
    coverage_file: Path,
    diff_file: IO[str] | None,
    format_id: str | None,
    base_path: str | None,
    threshold: float | None,
    platform: str | None,
    workspace: str | None,
    repository: str | None,
    token: str | None,
    api_url: str | None,
    pull_request_id: int | None,
    comment: bool,
    report: bool,
    config_path: Path | None,
    as_json: bool,
) -> None:
    """Check coverage of the lines a pull request adds.

    COVERAGE_FILE is a Clover, Cobertura or LCOV report. Exits 1 when the
    coverage of new code is not above the threshold.
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    overrides = _overrides(
        logging={"level": "DEBUG" if verbose else None},
        gate={"threshold": threshold},
        coverage={"format": format_id, "base_path": base_path},
        platform={
            "name": platform,
            "workspace": workspace,
            "repository": repository,
            "token": token,
            "api_url": api_url,
        },
    )

    try:
        config = load_config(config_path, **overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(config=config.logging)
    run_id = set_run_id()
    log.debug("check_started", run_id=run_id, coverage_file=str(coverage_file))

    try:
        result, outcome = run_check(
            config,
            coverage_file,
            diff_file,
            pull_request_id,
            comment=comment,
            report=report,
        )
    except PrCoverageError as e:
        log.error("check_failed", error=e.error_name, message=e.message)
        raise click.ClickException(str(e)) from e
    finally:
        clear_run_id()

    if as_json:
        click.echo(_result_json(result, outcome, config.gate.threshold))
    else:
        _print_summary(result, outcome, config.gate.threshold)

    if not outcome.passed:
        ctx.exit(1)
