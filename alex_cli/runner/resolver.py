"""Rewrite name-based symbol/parameter references into server IDs.

Input files reference symbols and their parameters by name; ALEX expects
numeric IDs.  Everything here is a pure transformation over the imported
:class:`SymbolCatalog`: inputs are never mutated and an unknown name is a
:class:`NameResolutionError`, never a silently dropped step.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator

from alex_cli.common.errors import ConfigValidationError, NameResolutionError
from alex_cli.runner.symbols import SymbolCatalog

STEP_KEYS = ("preSteps", "steps", "postSteps")


def resolve_parameterized_symbol(psymbol: dict, catalog: SymbolCatalog) -> dict:
    """Resolve ``{symbol: {name}, parameterValues: [{parameter: {name}}]}``."""
    ref = psymbol.get("symbol")
    name = ref.get("name") if isinstance(ref, dict) else None
    if not name:
        raise NameResolutionError(f"Symbol reference without a name: {ref!r}")

    symbol_id = catalog.symbol_id(name)
    resolved = copy.deepcopy(psymbol)
    resolved["symbol"] = {"id": symbol_id}
    for value in resolved.get("parameterValues") or []:
        param = value.get("parameter") or {}
        if "name" not in param:
            raise NameResolutionError(
                f'Parameter value of symbol "{name}" has no parameter name: {value!r}'
            )
        param["id"] = catalog.parameter_id(symbol_id, param["name"])
    return resolved


def resolve_step(step: dict, catalog: SymbolCatalog) -> dict:
    """A step either wraps its symbol in ``pSymbol`` or is the parameterized symbol."""
    if "pSymbol" in step:
        resolved = copy.deepcopy(step)
        resolved["pSymbol"] = resolve_parameterized_symbol(step["pSymbol"], catalog)
        return resolved
    return resolve_parameterized_symbol(step, catalog)


def resolve_case(case: dict, catalog: SymbolCatalog, project_id: int) -> dict:
    resolved = copy.deepcopy(case)
    resolved["project"] = project_id
    for key in STEP_KEYS:
        resolved[key] = [resolve_step(s, catalog) for s in case.get(key) or []]
    return resolved


def _test_type(test: dict) -> str:
    kind = test.get("type")
    if kind not in ("case", "suite"):
        raise ConfigValidationError(
            f'Test "{test.get("name", "?")}" has unknown type {kind!r}, expected "case" or "suite".'
        )
    return kind


def _resolve_nested(tests: list[dict], catalog: SymbolCatalog, project_id: int) -> list[dict]:
    resolved: list[dict] = []
    for test in tests:
        if _test_type(test) == "case":
            item = resolve_case(test, catalog, project_id)
        else:
            item = copy.deepcopy({k: v for k, v in test.items() if k != "tests"})
            item["project"] = project_id
            item["tests"] = _resolve_nested(test.get("tests") or [], catalog, project_id)
        item["parent"] = None
        resolved.append(item)
    return resolved


def _iter_cases(tests: list[dict]) -> Iterator[dict]:
    for test in tests:
        if _test_type(test) == "case":
            yield test
        else:
            yield from _iter_cases(test.get("tests") or [])


def resolve_tests(
    tests: list[dict],
    catalog: SymbolCatalog,
    project_id: int,
    layout: str = "nested",
) -> list[dict]:
    """Resolve a suite/case tree.

    ``nested`` keeps the suite hierarchy, ``flat`` submits every case at
    top level in depth-first order and drops the suites.
    """
    if layout == "flat":
        flat = []
        for case in _iter_cases(tests):
            item = resolve_case(case, catalog, project_id)
            item["parent"] = None
            flat.append(item)
        return flat
    if layout != "nested":
        raise ConfigValidationError(f"Unknown suite layout {layout!r}.")
    return _resolve_nested(tests, catalog, project_id)


def resolve_learner_config(config: dict, catalog: SymbolCatalog) -> dict:
    """Resolve ``symbols``, ``resetSymbol`` and the optional ``postSymbol``."""
    if "resetSymbol" not in config or config["resetSymbol"] is None:
        raise ConfigValidationError("The learner config has no resetSymbol.")

    resolved = copy.deepcopy(config)
    resolved["symbols"] = [
        resolve_parameterized_symbol(ps, catalog) for ps in config.get("symbols") or []
    ]
    resolved["resetSymbol"] = resolve_parameterized_symbol(config["resetSymbol"], catalog)
    if config.get("postSymbol") is not None:
        resolved["postSymbol"] = resolve_parameterized_symbol(config["postSymbol"], catalog)
    return resolved
