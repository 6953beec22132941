from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from simcl.enums import SimCLType


@dataclass
class Symbol:
    name: str
    type: SimCLType
    line: int = 0


class SymbolTable:
    """One lexical scope, chained to its enclosing scope.

    Bindings are kept in declaration order and searched newest first, so a
    repeated name shadows the earlier one instead of replacing or
    rejecting it. ``parent`` is a lookup link only: freeing a scope never
    touches its parent.
    """

    def __init__(self, parent: Optional[SymbolTable] = None):
        self.parent = parent
        self.symbols: list[Symbol] = []

    @property
    def depth(self) -> int:
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return depth

    def add(self, name: str, type: SimCLType, line: int = 0) -> Symbol:
        symbol = Symbol(name, type, line)
        self.symbols.append(symbol)
        return symbol

    def lookup_local(self, name: str) -> Optional[Symbol]:
        for symbol in reversed(self.symbols):
            if symbol.name == name:
                return symbol
        return None

    def lookup(self, name: str) -> Optional[Symbol]:
        """Search this scope, then each enclosing scope; None means undeclared."""
        scope: Optional[SymbolTable] = self
        while scope is not None:
            symbol = scope.lookup_local(name)
            if symbol is not None:
                return symbol
            scope = scope.parent
        return None

    def free(self) -> None:
        self.symbols.clear()

    def __iter__(self) -> Iterator[Symbol]:
        return reversed(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def __contains__(self, name: str) -> bool:
        return self.lookup_local(name) is not None
