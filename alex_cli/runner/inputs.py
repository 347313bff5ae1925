"""Command line validation and input file loading.

Everything here runs before the first network call; any problem is a
:class:`ConfigValidationError` carrying the message shown to the user.
"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

from alex_cli.common.console import info, warn
from alex_cli.common.constants import ACTIONS, REST_SUFFIX, SUITE_LAYOUTS
from alex_cli.common.errors import ConfigValidationError
from alex_cli.runner.context import Credentials, RunOptions
from alex_cli.runner.resolver import STEP_KEYS


def load_dotenv(env_path: Path) -> None:
    """Load variables from a .env file into os.environ (no overwrite)."""
    if not env_path.is_file():
        return
    info(f"Loading environment from {env_path}")
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("\"'")
            os.environ.setdefault(key, value)


def parse_credentials(value: str) -> Credentials:
    """``email:password``; the password is everything after the first colon."""
    email, _, password = value.partition(":")
    if not email.strip() or not password.strip():
        raise ConfigValidationError("Email or password are not defined or empty.")
    return Credentials(email=email, password=password)


# ── Shape checks ─────────────────────────────────────────────────────────────


def _check_list(value: object, where: str) -> list:
    if not isinstance(value, list):
        raise ConfigValidationError(f"{where} must be a list, got: {value!r}")
    return value


def _check_psymbol(psymbol: object, where: str) -> None:
    """``{symbol: {name}, parameterValues: [{parameter: {name}}, ...]}``."""
    if not isinstance(psymbol, dict):
        raise ConfigValidationError(f"{where} must be an object, got: {psymbol!r}")
    ref = psymbol.get("symbol")
    if not isinstance(ref, dict) or not isinstance(ref.get("name"), str) or not ref["name"]:
        raise ConfigValidationError(f"{where} needs a symbol with a name, got: {ref!r}")
    for i, value in enumerate(_check_list(psymbol.get("parameterValues", []), f"{where}.parameterValues")):
        param = value.get("parameter") if isinstance(value, dict) else None
        if not isinstance(param, dict) or not isinstance(param.get("name"), str):
            raise ConfigValidationError(
                f"{where}.parameterValues[{i}] needs a parameter with a name, got: {value!r}"
            )


def _check_step(step: object, where: str) -> None:
    if isinstance(step, dict) and "pSymbol" in step:
        _check_psymbol(step["pSymbol"], f"{where}.pSymbol")
    else:
        _check_psymbol(step, where)


def _check_test_tree(tests: list, where: str) -> None:
    """Every node is a ``case`` or ``suite``, every step references a symbol by name."""
    for i, test in enumerate(tests):
        node = f"{where}[{i}]"
        if not isinstance(test, dict) or test.get("type") not in ("case", "suite"):
            raise ConfigValidationError(f'Every test needs type "case" or "suite", got: {test!r}')
        if test["type"] == "suite":
            _check_test_tree(_check_list(test.get("tests", []), f"{node}.tests"), f"{node}.tests")
            continue
        for key in STEP_KEYS:
            for j, step in enumerate(_check_list(test.get(key, []), f"{node}.{key}")):
                _check_step(step, f"{node}.{key}[{j}]")


def _check_symbol_list(symbols: object, where: str) -> None:
    for i, sym in enumerate(_check_list(symbols, where)):
        if not isinstance(sym, dict) or not isinstance(sym.get("name"), str) or not sym["name"]:
            raise ConfigValidationError(f"{where}[{i}] needs a name, got: {sym!r}")


def _check_group_tree(groups: object, where: str) -> None:
    for i, group in enumerate(_check_list(groups, where)):
        node = f"{where}[{i}]"
        if not isinstance(group, dict):
            raise ConfigValidationError(f"{node} must be an object, got: {group!r}")
        _check_symbol_list(group.get("symbols", []), f"{node}.symbols")
        _check_group_tree(group.get("groups", []), f"{node}.groups")


def check_learner_config(config: dict) -> None:
    """``symbols`` and ``resetSymbol`` are required, ``postSymbol`` is optional."""
    if "symbols" not in config:
        raise ConfigValidationError("The learner config has no symbols.")
    for i, psymbol in enumerate(_check_list(config["symbols"], "symbols")):
        _check_psymbol(psymbol, f"symbols[{i}]")
    if config.get("resetSymbol") is None:
        raise ConfigValidationError("The learner config has no resetSymbol.")
    _check_psymbol(config["resetSymbol"], "resetSymbol")
    if config.get("postSymbol") is not None:
        _check_psymbol(config["postSymbol"], "postSymbol")


# ── File loaders ─────────────────────────────────────────────────────────────


def read_json_file(path: str | Path, what: str) -> object:
    file = Path(path)
    if not file.is_file():
        raise ConfigValidationError(f"The file for the {what} cannot be found: {file}")
    try:
        return json.loads(file.read_text())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigValidationError(f"The file for the {what} is not valid JSON: {exc}") from exc


def load_symbols(path: str | Path) -> tuple[tuple[dict, ...], tuple[dict, ...]]:
    """Return ``(symbols, symbol_groups)``; exactly one of them is non-empty."""
    data = read_json_file(path, "symbols")
    if isinstance(data, dict):
        if data.get("type") == "symbols" and data.get("symbols"):
            _check_symbol_list(data["symbols"], "symbols")
            return tuple(data["symbols"]), ()
        if data.get("type") == "symbolGroups" and data.get("symbolGroups"):
            _check_group_tree(data["symbolGroups"], "symbolGroups")
            return (), tuple(data["symbolGroups"])
    raise ConfigValidationError("The file that you specified does not seem to contain any symbols.")


def load_tests(path: str | Path) -> tuple[dict, ...]:
    data = read_json_file(path, "tests")
    if not isinstance(data, dict) or not data.get("tests"):
        raise ConfigValidationError("The file that you specified does not seem to contain any tests.")
    _check_test_tree(_check_list(data["tests"], "tests"), "tests")
    return tuple(data["tests"])


def collect_files(path: str | Path) -> tuple[Path, ...]:
    """A single file, or the regular files directly inside a directory (sorted)."""
    target = Path(path)
    if target.is_file():
        return (target,)
    if target.is_dir():
        return tuple(sorted(p for p in target.iterdir() if p.is_file()))
    warn("The file or directory that contains files could not be found.")
    return ()


def build_options(args: argparse.Namespace) -> RunOptions:
    """Validate parsed arguments in a fixed order and load every input file."""
    action = (args.action or "").strip()
    if not action:
        raise ConfigValidationError(
            "You haven't specified what action to execute. It can either be 'test' or 'learn'."
        )
    if action not in ACTIONS:
        raise ConfigValidationError(
            "You have specified an invalid action. It can either be 'test' or 'learn'."
        )

    uri = args.uri or os.environ.get("ALEX_URI", "")
    if not uri:
        raise ConfigValidationError(
            "You haven't specified the URI where the server of ALEX is running."
        )

    raw_targets = args.targets or os.environ.get("ALEX_TARGETS", "")
    targets = tuple(t.strip() for t in raw_targets.split(",") if t.strip())
    if not targets:
        raise ConfigValidationError("You haven't specified the URL of the target application.")

    user = args.user or os.environ.get("ALEX_USER", "")
    if not user:
        raise ConfigValidationError("You haven't specified a user.")
    credentials = parse_credentials(user)

    if not args.config:
        raise ConfigValidationError("You haven't specified config file for the web driver.")
    config = read_json_file(args.config, "web driver config")
    if not isinstance(config, dict):
        raise ConfigValidationError("The web driver config must be a JSON object.")

    if not args.symbols:
        raise ConfigValidationError("You have to specify a file that contains symbols.")
    symbols, symbol_groups = load_symbols(args.symbols)

    tests: tuple[dict, ...] = ()
    if action == "test":
        if not args.tests:
            raise ConfigValidationError("You have to specify a file that contains tests.")
        tests = load_tests(args.tests)
    elif args.tests:
        raise ConfigValidationError("You want to learn, but have specified tests.")
    else:
        check_learner_config(config)

    if args.suite_layout not in SUITE_LAYOUTS:
        raise ConfigValidationError(f"Unknown suite layout {args.suite_layout!r}.")
    if args.timeout is not None and args.timeout <= 0:
        raise ConfigValidationError("The timeout has to be a positive number of seconds.")

    return RunOptions(
        action=action,
        base_url=uri.rstrip("/") + REST_SUFFIX,
        targets=targets,
        credentials=credentials,
        config=config,
        symbols=symbols,
        symbol_groups=symbol_groups,
        tests=tests,
        files=collect_files(args.files) if args.files else (),
        out=Path(args.out) if args.out else None,
        clean_up=bool(args.clean_up),
        suite_layout=args.suite_layout,
        timeout=args.timeout,
        log_file=Path(args.log_file) if args.log_file else None,
    )
