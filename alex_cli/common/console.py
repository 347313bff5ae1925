"""ANSI colour codes and console output helpers."""

from __future__ import annotations

import sys


class C:
    """ANSI colour codes (no-op if not a tty)."""

    _tty = sys.stdout.isatty()
    RED = "\033[0;31m" if _tty else ""
    GREEN = "\033[0;32m" if _tty else ""
    YELLOW = "\033[1;33m" if _tty else ""
    DIM = "\033[2m" if _tty else ""
    BG_RED = "\033[41m" if _tty else ""
    BG_GREEN = "\033[42m" if _tty else ""
    NC = "\033[0m" if _tty else ""


def info(msg: str) -> None:
    print(f"{C.DIM}{msg}{C.NC}")


def ok(msg: str) -> None:
    print(f"{C.GREEN}{msg}{C.NC}")


def warn(msg: str) -> None:
    print(f"{C.YELLOW}{msg}{C.NC}")


def error(msg: str) -> None:
    print(f"{C.RED}{msg}{C.NC}")


def result_line(passed: bool, name: str) -> None:
    """Print one ``<passed|failed> <test name>`` line."""
    if passed:
        print(f"{C.BG_GREEN}passed{C.NC} {name}")
    else:
        print(f"{C.BG_RED}failed{C.NC} {name}")
