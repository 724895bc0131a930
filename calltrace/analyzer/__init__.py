"""Syntax-tree analysis: symbol/import tables, reference resolution, edge emission."""
from .edge_store import Edge, EdgeStore, escape_mermaid
from .graph_builder import CallGraphBuilder, FileGraph
from .parser import LanguageParser
from .walker import CallGraphResult, CallGraphWalker, analyze_tree, build_graph

__all__ = [
    "CallGraphBuilder",
    "CallGraphResult",
    "CallGraphWalker",
    "Edge",
    "EdgeStore",
    "FileGraph",
    "LanguageParser",
    "analyze_tree",
    "build_graph",
    "escape_mermaid",
]
