"""Symbol import and the name → ID catalog built from the server's answer."""

from __future__ import annotations

from alex_cli.common.errors import AlexCliError, NameResolutionError
from alex_cli.runner.client import AlexClient


def flatten_groups(groups: list[dict]) -> list[dict]:
    """Collect every symbol of a group tree.

    Depth-first; a group's own symbols come before those of its child
    groups, and sibling order is preserved.
    """
    symbols: list[dict] = []

    def visit(group: dict) -> None:
        symbols.extend(group.get("symbols") or [])
        for child in group.get("groups") or []:
            visit(child)

    for group in groups:
        visit(group)
    return symbols


def import_symbols(
    client: AlexClient,
    project_id: int,
    *,
    symbols: tuple[dict, ...] = (),
    symbol_groups: tuple[dict, ...] = (),
) -> list[dict]:
    """Create the symbols (or symbol groups) and return the flat list the server assigned IDs to."""
    if symbol_groups:
        created = client.create_symbol_groups(project_id, list(symbol_groups))
        if not isinstance(created, list):
            raise AlexCliError(f"Unexpected symbol group response: {created}")
        return flatten_groups(created)

    created = client.create_symbols(project_id, list(symbols))
    if not isinstance(created, list):
        raise AlexCliError(f"Unexpected symbol response: {created}")
    return created


class SymbolCatalog:
    """Lookup tables over imported symbols.

    ``by_name`` maps symbol name → symbol ID, the first symbol wins on
    duplicate names.  ``params`` maps symbol ID → input parameter name →
    parameter ID.
    """

    def __init__(self, symbols: list[dict]) -> None:
        self.by_name: dict[str, int] = {}
        self.params: dict[int, dict[str, int]] = {}
        for sym in symbols:
            self.by_name.setdefault(sym["name"], sym["id"])
            scoped = self.params.setdefault(sym["id"], {})
            for param in sym.get("inputs") or []:
                scoped.setdefault(param["name"], param["id"])

    def __len__(self) -> int:
        return len(self.by_name)

    def symbol_id(self, name: str) -> int:
        try:
            return self.by_name[name]
        except KeyError:
            raise NameResolutionError(f'Symbol "{name}" has not been imported.') from None

    def parameter_id(self, symbol_id: int, name: str) -> int:
        try:
            return self.params[symbol_id][name]
        except KeyError:
            raise NameResolutionError(
                f'Symbol {symbol_id} has no input parameter "{name}".'
            ) from None
