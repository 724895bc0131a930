"""Deduplicated caller -> callee edges and their diagram-safe emission."""
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from .syntax import Location


# Characters with meaning inside Mermaid node labels
_MERMAID_RESERVED = re.compile(r'([<>{}|])')


def escape_mermaid(text: str) -> str:
    """Backslash-escape ``< > { } |``. Not idempotent; apply exactly once."""
    return _MERMAID_RESERVED.sub(r'\\\1', text)


@dataclass(frozen=True)
class Edge:
    """A resolved reference, located at its first occurrence."""
    caller: str
    callee: str
    location: Location

    @property
    def label(self) -> str:
        return f"{self.location}: {self.caller}"


class EdgeStore:
    """Insertion-ordered edges, at most one per (caller, callee) pair.

    The diagram shows *that* A references B, not how often, so later
    occurrences of a pair are dropped.
    """

    def __init__(self):
        self._edges: Dict[Tuple[str, str], Edge] = {}

    def insert_if_absent(self, caller: str, callee: str, location: Location) -> bool:
        """Record an edge unless the pair is already known.

        Returns:
            True if a new edge was stored
        """
        key = (caller, callee)
        if key in self._edges:
            return False
        self._edges[key] = Edge(caller=caller, callee=callee, location=location)
        return True

    def has(self, caller: str, callee: str) -> bool:
        return (caller, callee) in self._edges

    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def emit(self) -> List[List[str]]:
        """Render ``[escaped "<loc>: <caller>", escaped callee]`` pairs in insertion order."""
        return [
            [escape_mermaid(edge.label), escape_mermaid(edge.callee)]
            for edge in self._edges.values()
        ]

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[Edge]:
        return iter(self._edges.values())
