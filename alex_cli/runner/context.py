"""Run options and the per-invocation context threaded through the pipeline."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str

    def as_payload(self) -> dict[str, str]:
        return {"email": self.email, "password": self.password}


@dataclass(frozen=True)
class RunOptions:
    """Validated command line input, with every referenced file already parsed."""

    action: str                          # "test" | "learn"
    base_url: str                        # ALEX REST root, e.g. http://host:8000/rest
    targets: tuple[str, ...]             # system-under-test base URLs, first is default
    credentials: Credentials
    config: dict                         # driver (test) or learner (learn) config
    symbols: tuple[dict, ...] = ()        # set when the symbol file holds plain symbols
    symbol_groups: tuple[dict, ...] = ()  # set when it holds symbol groups
    tests: tuple[dict, ...] = ()
    files: tuple[Path, ...] = ()
    out: Path | None = None
    clean_up: bool = False
    suite_layout: str = "nested"
    timeout: float | None = None
    log_file: Path | None = None


@dataclass
class Project:
    """Scratch project created on the server for one invocation."""

    id: int
    name: str
    urls: list[dict] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict) -> Project:
        return cls(id=data["id"], name=data.get("name", ""), urls=list(data.get("urls", [])))

    @property
    def default_url_id(self) -> int | None:
        """ID of the URL flagged as default (falls back to the first one)."""
        for url in self.urls:
            if url.get("default"):
                return url.get("id")
        return self.urls[0].get("id") if self.urls else None


@dataclass
class RunContext:
    """Mutable state gathered stage by stage during one run."""

    options: RunOptions
    project: Project | None = None
    symbols: list[dict] = field(default_factory=list)   # imported, with server IDs
    tests: list[dict] = field(default_factory=list)     # created, with server IDs
    cancel: threading.Event = field(default_factory=threading.Event)
