"""Learn mode: start a learning session and fetch the learned hypothesis."""

from __future__ import annotations

import json

from alex_cli.common.console import info
from alex_cli.common.constants import POLL_MAX_WAIT, POLL_TIME_LEARNING
from alex_cli.common.errors import ServerReportedFailure
from alex_cli.common.logging import EventLog
from alex_cli.runner.client import AlexClient
from alex_cli.runner.context import RunContext
from alex_cli.runner.polling import poll_until_inactive
from alex_cli.runner.report import write_output_file
from alex_cli.runner.resolver import resolve_learner_config
from alex_cli.runner.symbols import SymbolCatalog


def _learner_activity(client: AlexClient, project_id: int) -> dict:
    """Learner status; servers whose status lacks ``active`` answer on ``/active``."""
    data = client.learner_status(project_id)
    if isinstance(data, dict) and "active" in data:
        return data
    return client.learner_active(project_id)


def run_learning(
    client: AlexClient,
    ctx: RunContext,
    catalog: SymbolCatalog,
    log: EventLog,
    *,
    interval: float = POLL_TIME_LEARNING,
) -> str:
    """Run the whole learn mode and return the success message.

    Raises :class:`ServerReportedFailure` with the server's error message
    when the learner finished with an error.
    """
    opts, project = ctx.options, ctx.project
    config = resolve_learner_config(opts.config, catalog)
    config["urls"] = [project.default_url_id]

    info("Start learning...")
    client.start_learning(project.id, config)
    log.info("learning_started", project_id=project.id, symbols=len(config["symbols"]))

    poll_until_inactive(
        lambda: _learner_activity(client, project.id),
        interval=interval,
        timeout=opts.timeout or POLL_MAX_WAIT,
        cancel=ctx.cancel,
        log=log,
        what="learning process",
    )

    result = client.latest_learner_result(project.id)
    if result.get("error"):
        raise ServerReportedFailure(result.get("errorMessage") or "The learning process failed.")

    hypothesis = result.get("hypothesis")
    print("\n", json.dumps(hypothesis, indent=2), "\n")
    write_output_file(opts.out, json.dumps(hypothesis))
    return "The learning process finished."
