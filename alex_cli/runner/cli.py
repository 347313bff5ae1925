"""CLI entrypoint for running tests or learning processes in ALEX.

Pipeline (strictly sequential):
  1. Validate flags and load the config, symbol and test files
  2. Log in and create a scratch project
  3. Upload files, import symbols
  4. Resolve symbol names to IDs, then either
     a. create + execute tests and poll for the report, or
     b. start the learner and poll for the hypothesis
  5. Delete the project (with --clean-up), print the result, exit 0/1
"""

from __future__ import annotations

import argparse
import signal
import sys
import textwrap
from pathlib import Path

from alex_cli.common.console import error, info, ok
from alex_cli.common.constants import POLL_TIME_LEARNING, POLL_TIME_TESTING, VERSION
from alex_cli.common.errors import AlexCliError, ConfigValidationError, PollCancelledError
from alex_cli.common.logging import EventLog, configure_structlog
from alex_cli.runner.client import AlexClient
from alex_cli.runner.context import RunContext
from alex_cli.runner.inputs import build_options, load_dotenv
from alex_cli.runner.learning import run_learning
from alex_cli.runner.provisioning import create_project, delete_project, upload_files
from alex_cli.runner.symbols import SymbolCatalog, import_symbols
from alex_cli.runner.testing import run_tests


class _ArgumentParser(argparse.ArgumentParser):
    """Report usage errors as validation errors (exit code 1, not 2)."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigValidationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="alex-cli",
        description="Run tests or learning processes in ALEX from the command line.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              alex-cli --uri http://localhost:8000 --targets http://localhost:8080 \\
                  -a test -u admin@alex.example:admin -s symbols.json -t tests.json -c config.json
              alex-cli --uri http://localhost:8000 --targets http://localhost:8080 \\
                  -a learn -u admin@alex.example:admin -s symbols.json -c learner.json -o model.json
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--uri", help="The URI where ALEX is running, without trailing '/'")
    parser.add_argument(
        "--targets", "--target", dest="targets",
        help="The base URL and mirrors of the target application as comma separated list",
    )
    parser.add_argument(
        "--clean-up", action="store_true", default=False,
        help="Delete the project after the test or learning process",
    )
    parser.add_argument("-a", "--action", help="What to do with ALEX: test | learn")
    parser.add_argument("-u", "--user", help='Credentials with the pattern "email:password"')
    parser.add_argument("-s", "--symbols", metavar="FILE", help="JSON file with symbols or symbol groups")
    parser.add_argument(
        "-t", "--tests", metavar="FILE",
        help="JSON file with the tests to execute. Omit this if you want to learn.",
    )
    parser.add_argument("-c", "--config", metavar="FILE", help="JSON file with the web driver / learner config")
    parser.add_argument("-f", "--files", metavar="PATH", help="A file or directory with files to upload to ALEX")
    parser.add_argument("-o", "--out", metavar="FILE", help="File the test report or learned model is written to")
    parser.add_argument(
        "--suite-layout", default="nested",
        help="nested: keep test suites as given (default) | flat: submit all test cases at top level",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, metavar="SECONDS",
        help="Maximum time to wait for test execution or learning",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Also write pipeline events as JSON lines to FILE")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Log every poll")
    return parser


def execute_pipeline(
    client: AlexClient,
    ctx: RunContext,
    log: EventLog,
    *,
    test_interval: float = POLL_TIME_TESTING,
    learn_interval: float = POLL_TIME_LEARNING,
) -> str:
    """Run every stage up to the final result and return the success message."""
    opts = ctx.options

    def checkpoint() -> None:
        if ctx.cancel.is_set():
            raise PollCancelledError("The run has been cancelled.")

    client.login(opts.credentials)
    info(f'User "{opts.credentials.email}" logged in.')
    checkpoint()

    ctx.project = create_project(client, opts.targets)
    info(f"Project {ctx.project.name} has been created.")
    log.info("project_created", project_id=ctx.project.id, name=ctx.project.name)
    checkpoint()

    if opts.files:
        upload_files(client, ctx.project, opts.files, log)
        info("Files have been uploaded.")
    checkpoint()

    ctx.symbols = import_symbols(
        client, ctx.project.id, symbols=opts.symbols, symbol_groups=opts.symbol_groups,
    )
    catalog = SymbolCatalog(ctx.symbols)
    info("Symbols have been imported.")
    log.info("symbols_imported", project_id=ctx.project.id, count=len(ctx.symbols))
    checkpoint()

    if opts.action == "test":
        return run_tests(client, ctx, catalog, log, interval=test_interval)
    return run_learning(client, ctx, catalog, log, interval=learn_interval)


def run(argv: list[str] | None = None, **intervals: float) -> int:
    """Parse *argv*, run the pipeline and return the process exit code."""
    load_dotenv(Path.cwd() / ".env")
    try:
        args = build_parser().parse_args(argv)
        options = build_options(args)
    except ConfigValidationError as exc:
        error(str(exc))
        return 1

    configure_structlog(verbose=args.verbose)
    log = EventLog("alex_cli", options.log_file)
    ctx = RunContext(options)
    client = AlexClient(options.base_url)

    previous_handler = signal.signal(signal.SIGINT, lambda *_: ctx.cancel.set())
    try:
        message = execute_pipeline(client, ctx, log, **intervals)
        success = True
    except AlexCliError as exc:
        message, success = str(exc), False
        log.warning("run_failed", kind=type(exc).__name__, error=message)
    except Exception as exc:
        message, success = f"Unexpected error: {exc!r}", False
        log.warning("run_failed", kind=type(exc).__name__, error=repr(exc))
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if options.clean_up and ctx.project is not None:
        if delete_project(client, ctx.project, log):
            info("Project has been deleted.")

    if success:
        ok(message)
        return 0
    error(message)
    return 1


def main() -> None:
    sys.exit(run())
