"""calltrace - caller -> callee reference graphs for JavaScript and TypeScript files."""
from .config import __version__
from .analyzer.walker import analyze_tree, build_graph

__all__ = ["__version__", "analyze_tree", "build_graph"]
