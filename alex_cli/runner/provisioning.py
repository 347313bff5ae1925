"""Scratch project lifecycle and file uploads."""

from __future__ import annotations

import random
from datetime import datetime
from pathlib import Path

from alex_cli.common.constants import (
    PROJECT_NAME_ALPHABET,
    PROJECT_NAME_PREFIX,
    PROJECT_NAME_SUFFIX_LEN,
)
from alex_cli.common.errors import AlexCliError
from alex_cli.common.logging import EventLog
from alex_cli.runner.client import AlexClient
from alex_cli.runner.context import Project


def project_name(now: datetime | None = None) -> str:
    """``alex-cli-<iso datetime>-<random suffix>``, unique per invocation."""
    stamp = (now or datetime.now().astimezone()).strftime("%Y-%m-%dT%H:%M:%S%z")
    suffix = "".join(random.choices(PROJECT_NAME_ALPHABET, k=PROJECT_NAME_SUFFIX_LEN))
    return f"{PROJECT_NAME_PREFIX}{stamp}-{suffix}"


def project_urls(targets: tuple[str, ...] | list[str]) -> list[dict]:
    """Project URL payload; the first target is the default one."""
    return [{"url": url, "default": i == 0} for i, url in enumerate(targets)]


def create_project(client: AlexClient, targets: tuple[str, ...]) -> Project:
    """Create a uniquely named project pointing at *targets*."""
    data = client.create_project(project_name(), project_urls(targets))
    if not isinstance(data, dict) or "id" not in data:
        raise AlexCliError(f"Unexpected project response: {data}")
    return Project.from_payload(data)


def delete_project(client: AlexClient, project: Project, log: EventLog) -> bool:
    """Best-effort delete.  Returns False (and logs) instead of raising."""
    try:
        client.delete_project(project.id)
    except AlexCliError as exc:
        log.warning("project_delete_failed", project_id=project.id, error=str(exc))
        return False
    log.info("project_deleted", project_id=project.id)
    return True


def upload_files(client: AlexClient, project: Project, files: tuple[Path, ...], log: EventLog) -> None:
    """Upload *files* one at a time; the next starts only after the previous returned."""
    for path in files:
        client.upload_file(project.id, path)
        log.debug("file_uploaded", project_id=project.id, file=str(path))
