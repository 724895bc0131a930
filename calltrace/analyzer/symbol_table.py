"""Per-walk table of declared symbols."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Set


GLOBAL_SCOPE = 'global'

SYMBOL_KINDS = frozenset({'function', 'class', 'arrow', 'variable', 'component'})


@dataclass
class Symbol:
    """A name declared somewhere in the walked file."""
    name: str  # ClassName.methodName for methods, bare otherwise
    kind: str
    line: int
    callees: Set[str] = field(default_factory=set)


class SymbolTable:
    """Declared symbols, keyed by name, in declaration order.

    The first declaration of a name wins; later re-declarations are no-ops.
    """

    def __init__(self):
        self._symbols: Dict[str, Symbol] = {}

    def declare(self, name: str, line: int, kind: str) -> Symbol:
        """Register a symbol if absent and return the stored one.

        Args:
            name: Dotted symbol name
            line: 1-based declaration line
            kind: One of SYMBOL_KINDS

        Returns:
            The Symbol now stored under ``name``

        Raises:
            ValueError: If kind is not a known symbol kind
        """
        if kind not in SYMBOL_KINDS:
            raise ValueError(f"Unsupported symbol kind: {kind}")

        existing = self._symbols.get(name)
        if existing is not None:
            return existing

        symbol = Symbol(name=name, kind=kind, line=line)
        self._symbols[name] = symbol
        return symbol

    def has(self, name: str) -> bool:
        return name in self._symbols

    def get(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def record_outgoing_call(self, caller: str, callee: str) -> bool:
        """Cache ``callee`` on the caller's symbol.

        The synthetic global scope is never declared, so calls from it only
        ever exist as edges.

        Returns:
            True if the caller is a known symbol and was updated
        """
        symbol = self._symbols.get(caller)
        if symbol is None:
            return False
        symbol.callees.add(callee)
        return True

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())
