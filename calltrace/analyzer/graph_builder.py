"""File- and project-level call graph building on top of the single-file walker."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import networkx as nx

from ..config import Config, get_config
from .parser import LanguageParser
from .walker import CallGraphResult, analyze_tree


logger = logging.getLogger(__name__)


@dataclass
class FileGraph:
    """Call graph of one source file."""
    file_path: str
    language: Optional[str]
    result: CallGraphResult = field(default_factory=CallGraphResult.empty)
    skipped: Optional[str] = None  # reason the file was not walked

    @property
    def pairs(self) -> List[List[str]]:
        return self.result.pairs


class CallGraphBuilder:
    """Parse files and run one independent walk per file."""

    def __init__(self, config: Optional[Config] = None,
                 permissive_markup: Optional[bool] = None,
                 lowercase_tag_attributes: Optional[bool] = None):
        """Initialize builder.

        Args:
            config: Settings to use; defaults to the process-wide get_config()
            permissive_markup: Overrides config.permissive_markup when not None
            lowercase_tag_attributes: Overrides config.lowercase_tag_attributes when not None
        """
        self.config = config or get_config()
        self.permissive_markup = (
            self.config.permissive_markup if permissive_markup is None else permissive_markup
        )
        self.lowercase_tag_attributes = (
            self.config.lowercase_tag_attributes if lowercase_tag_attributes is None
            else lowercase_tag_attributes
        )

    def build_source(self, source_code: Union[str, bytes], language: str,
                     file_path: str = "<source>") -> FileGraph:
        """Walk in-memory source.

        Raises:
            ValueError: If language is not supported
        """
        parser = LanguageParser(language)
        tree = parser.parse_source(source_code)
        return FileGraph(file_path=file_path, language=language, result=self._analyze(tree))

    def build_file(self, file_path: Union[str, Path]) -> FileGraph:
        """Walk a single file.

        Unsupported extensions, missing files and oversized files are not
        errors: they come back as an empty FileGraph with a skip reason.
        """
        file_path = Path(file_path)
        str_file_path = str(file_path)

        parser = LanguageParser.from_file_extension(file_path)
        if not parser:
            logger.warning("No parser available for extension: %s", file_path.suffix or str_file_path)
            return FileGraph(str_file_path, None, skipped="unsupported extension")

        try:
            size = file_path.stat().st_size
        except OSError as e:
            logger.warning("Cannot read %s: %s", str_file_path, e)
            return FileGraph(str_file_path, parser.language, skipped="unreadable")

        if size > self.config.max_file_size:
            logger.warning(
                "Skipping %s: %d bytes exceeds limit of %d bytes",
                str_file_path, size, self.config.max_file_size,
            )
            return FileGraph(str_file_path, parser.language, skipped="too large")

        tree = parser.parse_file(file_path)
        if tree is None:
            logger.warning("Cannot parse %s", str_file_path)
            return FileGraph(str_file_path, parser.language, skipped="unreadable")

        return FileGraph(str_file_path, parser.language, result=self._analyze(tree))

    def discover_files(self, project_root: Union[str, Path]) -> List[Path]:
        """Find all supported source files under project_root.

        Args:
            project_root: Directory to scan

        Returns:
            Sorted list of files, excluding vendored and build directories
        """
        project_root = Path(project_root)
        excluded_dirs = self.config.excluded_dirs

        files = set()
        for extension in LanguageParser.SUPPORTED_LANGUAGES:
            for file_path in project_root.rglob(f'*{extension}'):
                relative_parts = file_path.relative_to(project_root).parts[:-1]
                if any(part in excluded_dirs for part in relative_parts):
                    continue
                # Declaration files carry no bodies to walk
                if file_path.name.endswith('.d.ts'):
                    continue
                if file_path.is_file():
                    files.add(file_path)

        return sorted(files)

    def build_project(self, project_root: Union[str, Path]) -> List[FileGraph]:
        return [self.build_file(path) for path in self.discover_files(project_root)]

    def _analyze(self, tree) -> CallGraphResult:
        return analyze_tree(
            tree,
            permissive_markup=self.permissive_markup,
            lowercase_tag_attributes=self.lowercase_tag_attributes,
        )


def to_digraph(file_graphs: Iterable[FileGraph]) -> nx.DiGraph:
    """Merge per-file results into one DiGraph.

    Nodes are (file_path, name) so equal names in different files stay
    distinct; edges carry 'location' and 'file' attributes.
    """
    graph = nx.DiGraph()
    for file_graph in file_graphs:
        for edge in file_graph.result.edges:
            caller = (file_graph.file_path, edge.caller)
            callee = (file_graph.file_path, edge.callee)
            graph.add_edge(caller, callee, location=str(edge.location), file=file_graph.file_path)
    return graph


def most_referenced(graph: nx.DiGraph, limit: int = 5) -> List[Tuple[Tuple[str, str], int]]:
    """Callees ranked by how many distinct callers reference them."""
    ranked = sorted(
        ((node, degree) for node, degree in graph.in_degree() if degree > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return ranked[:limit]
