"""Test mode: submit resolved tests, execute them and evaluate the report."""

from __future__ import annotations

import copy

from alex_cli.common.console import info
from alex_cli.common.constants import POLL_MAX_WAIT, POLL_TIME_TESTING
from alex_cli.common.errors import AlexCliError, ServerReportedFailure
from alex_cli.common.logging import EventLog
from alex_cli.runner.client import AlexClient
from alex_cli.runner.context import RunContext
from alex_cli.runner.polling import poll_until_inactive
from alex_cli.runner.report import (
    print_test_results,
    report_message,
    report_passed,
    write_output_file,
)
from alex_cli.runner.resolver import resolve_tests
from alex_cli.runner.symbols import SymbolCatalog


def build_execution_config(driver_config: dict, tests: list[dict], url_id: int | None) -> dict:
    """Driver config plus the created test IDs, the target URL and ``createReport``."""
    config = copy.deepcopy(driver_config)
    config["tests"] = [t["id"] for t in tests]
    config["url"] = url_id
    config["createReport"] = True
    return config


def run_tests(
    client: AlexClient,
    ctx: RunContext,
    catalog: SymbolCatalog,
    log: EventLog,
    *,
    interval: float = POLL_TIME_TESTING,
) -> str:
    """Run the whole test mode and return the success message.

    Raises :class:`ServerReportedFailure` when at least one test failed.
    """
    opts, project = ctx.options, ctx.project
    resolved = resolve_tests(list(opts.tests), catalog, project.id, opts.suite_layout)

    created = client.create_tests(project.id, resolved)
    if not isinstance(created, list):
        raise AlexCliError(f"Unexpected test batch response: {created}")
    ctx.tests = created
    info("Tests have been imported.")
    log.info("tests_created", project_id=project.id, count=len(created))

    info("Executing tests...")
    client.execute_tests(
        project.id, build_execution_config(opts.config, created, project.default_url_id),
    )
    poll_until_inactive(
        lambda: client.test_status(project.id),
        interval=interval,
        timeout=opts.timeout or POLL_MAX_WAIT,
        cancel=ctx.cancel,
        log=log,
        what="test execution",
    )

    report = client.latest_test_report(project.id)
    print_test_results(report)
    _write_junit_report(client, ctx, report, log)

    passed = report_passed(report)
    log.info(
        "test_report",
        report_id=report.get("id"),
        passed=passed,
        num_tests=report.get("numTests"),
        num_passed=report.get("numTestsPassed"),
    )
    message = report_message(report, passed)
    if not passed:
        raise ServerReportedFailure(message)
    return message


def _write_junit_report(client: AlexClient, ctx: RunContext, report: dict, log: EventLog) -> None:
    """Fetch the JUnit XML form of *report*; failures here never change the outcome."""
    if report.get("id") is None:
        return
    try:
        xml = client.junit_report(ctx.project.id, report["id"])
    except AlexCliError as exc:
        log.warning("junit_report_failed", report_id=report["id"], error=str(exc))
        return
    write_output_file(ctx.options.out, xml)
