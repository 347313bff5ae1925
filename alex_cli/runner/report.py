"""Console summary of test reports and output file handling."""

from __future__ import annotations

from pathlib import Path

from alex_cli.common.console import info, result_line, warn


def print_test_results(report: dict) -> None:
    """One ``<passed|failed> <name>`` line per test result in *report*."""
    for result in report.get("testResults") or []:
        name = (result.get("test") or {}).get("name", "<unnamed>")
        result_line(bool(result.get("passed")), name)


def report_passed(report: dict) -> bool:
    """Every test result passed; without results fall back to the summary fields."""
    results = report.get("testResults") or []
    if results:
        return all(bool(r.get("passed")) for r in results)
    if "passed" in report:
        return bool(report["passed"])
    return report.get("numTestsPassed", 0) == report.get("numTests", 0)


def report_message(report: dict, passed: bool) -> str:
    total = report.get("numTests", len(report.get("testResults") or []))
    n_passed = report.get("numTestsPassed", 0)
    if passed:
        return f"{n_passed}/{total} tests passed."
    n_failed = report.get("numTestsFailed", total - n_passed)
    return f"{n_failed}/{total} tests failed."


def write_output_file(path: Path | None, data: str) -> bool:
    """Replace *path* with *data*.  A failed write is reported, not raised."""
    if path is None:
        return False
    try:
        if path.exists():
            path.unlink()
        path.write_text(data)
    except OSError as exc:
        warn(f"Failed to write result in file {path}: {exc}")
        return False
    info(f"Wrote result to file {path}")
    return True
