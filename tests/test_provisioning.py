from datetime import datetime, timedelta, timezone

from alex_cli.common.constants import PROJECT_NAME_PREFIX
from alex_cli.runner.client import AlexClient
from alex_cli.runner.context import Project
from alex_cli.runner.provisioning import (
    create_project,
    delete_project,
    project_name,
    project_urls,
    upload_files,
)
from conftest import BASE


def test_project_name_has_prefix_timestamp_and_random_suffix():
    now = datetime(2019, 3, 1, 12, 30, 5, tzinfo=timezone(timedelta(hours=1)))
    name = project_name(now)

    assert name.startswith(f"{PROJECT_NAME_PREFIX}2019-03-01T12:30:05+0100-")
    suffix = name.rsplit("-", 1)[1]
    assert len(suffix) == 10 and suffix.isalnum()


def test_project_names_do_not_collide():
    assert len({project_name() for _ in range(50)}) == 50


def test_first_target_is_default():
    assert project_urls(["http://a", "http://b"]) == [
        {"url": "http://a", "default": True},
        {"url": "http://b", "default": False},
    ]


def test_create_project_returns_server_project(alex):
    project = create_project(AlexClient(BASE), ("http://a",))
    assert project.id == 42
    assert project.default_url_id == 100


def test_default_url_falls_back_to_first():
    project = Project(id=1, name="p", urls=[{"id": 5, "default": False}, {"id": 6}])
    assert project.default_url_id == 5
    assert Project(id=1, name="p").default_url_id is None


def test_delete_failure_is_logged_not_raised(alex, log):
    del alex.routes[("DELETE", "/projects/42")]
    assert delete_project(AlexClient(BASE), Project(id=42, name="p"), log) is False


def test_uploads_happen_one_after_another_in_order(alex, log, tmp_path):
    files = []
    for name in ("1.txt", "2.txt", "3.txt"):
        path = tmp_path / name
        path.write_text(name)
        files.append(path)

    upload_files(AlexClient(BASE), Project(id=42, name="p"), tuple(files), log)

    bodies = [c.payload for c in alex.calls]
    assert len(bodies) == 3
    for body, name in zip(bodies, ("1.txt", "2.txt", "3.txt")):
        assert f'filename="{name}"'.encode() in body
