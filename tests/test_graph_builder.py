"""Tests for file and project level graph building."""
import logging

import pytest

from calltrace.analyzer.graph_builder import CallGraphBuilder, FileGraph, most_referenced, to_digraph
from calltrace.config import Config


APP_SOURCE = """\
import { Route } from 'react-router-dom';
import Home from './Home';
function App() {
  return <Route element={<Home />} />;
}
"""


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return Config()


@pytest.fixture
def project(tmp_path):
    """A small project tree with vendored and declaration files mixed in."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "App.jsx").write_text(APP_SOURCE)
    (tmp_path / "src" / "util.ts").write_text("export function a() {}\nexport function b() { a(); }\n")
    (tmp_path / "src" / "types.d.ts").write_text("declare function c(): void;\n")
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "lib" / "index.js").write_text("function x() {}\n")
    (tmp_path / "README.md").write_text("# demo\n")
    return tmp_path


class TestBuildSource:

    def test_in_memory_source(self, config):
        file_graph = CallGraphBuilder(config).build_source(APP_SOURCE, 'javascript')

        assert file_graph.file_path == "<source>"
        assert file_graph.pairs == [["4:10: App", "Route"], ["4:26: App", "Home"]]

    def test_files_do_not_share_state(self, config):
        builder = CallGraphBuilder(config)
        builder.build_source("function helper() {}", 'javascript')

        second = builder.build_source("function run() { helper(); }", 'javascript')

        assert second.pairs == []

    def test_overrides_take_precedence_over_config(self, config):
        source = "function Card() {}\nfunction App() { return <Card />; }\n"

        default = CallGraphBuilder(config).build_source(source, 'javascript')
        permissive = CallGraphBuilder(config, permissive_markup=True).build_source(source, 'javascript')

        assert default.pairs == []
        assert permissive.pairs == [["2:25: App", "Card"]]

    def test_config_flags_are_used(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CALLTRACE_LOWERCASE_TAG_ATTRIBUTES", "false")
        builder = CallGraphBuilder(Config())

        assert builder.lowercase_tag_attributes is False
        assert builder.permissive_markup is False

    def test_unknown_language(self, config):
        with pytest.raises(ValueError):
            CallGraphBuilder(config).build_source("x", 'python')


class TestBuildFile:

    def test_supported_file(self, config, project):
        file_graph = CallGraphBuilder(config).build_file(project / "src" / "util.ts")

        assert file_graph.language == 'typescript'
        assert file_graph.skipped is None
        assert file_graph.pairs == [["2:22: b", "a"]]

    def test_unsupported_extension_is_skipped(self, config, project, caplog):
        with caplog.at_level(logging.WARNING, logger='calltrace'):
            file_graph = CallGraphBuilder(config).build_file(project / "README.md")

        assert file_graph.skipped == "unsupported extension"
        assert file_graph.pairs == []
        assert "No parser available" in caplog.text

    def test_missing_file_is_skipped(self, config, tmp_path):
        file_graph = CallGraphBuilder(config).build_file(tmp_path / "gone.js")

        assert file_graph.skipped == "unreadable"
        assert file_graph.pairs == []

    def test_oversized_file_is_skipped(self, tmp_path, monkeypatch, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CALLTRACE_MAX_FILE_SIZE", "10")
        big = tmp_path / "big.js"
        big.write_text("function a() {}\nfunction b() { a(); }\n")

        with caplog.at_level(logging.WARNING, logger='calltrace'):
            file_graph = CallGraphBuilder(Config()).build_file(big)

        assert file_graph.skipped == "too large"
        assert "exceeds limit" in caplog.text


class TestProject:

    def test_discover_files(self, config, project):
        files = CallGraphBuilder(config).discover_files(project)

        assert [path.relative_to(project).as_posix() for path in files] == [
            "src/App.jsx",
            "src/util.ts",
        ]

    def test_extra_excluded_dirs(self, tmp_path, monkeypatch, project):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CALLTRACE_EXCLUDED_DIRS", "src")

        assert CallGraphBuilder(Config()).discover_files(project) == []

    def test_build_project(self, config, project):
        file_graphs = CallGraphBuilder(config).build_project(project)

        assert [len(fg.pairs) for fg in file_graphs] == [2, 1]


class TestDigraph:

    def test_names_stay_distinct_per_file(self, config):
        builder = CallGraphBuilder(config)
        first = builder.build_source("function a() {}\nfunction b() { a(); }", 'javascript', "one.js")
        second = builder.build_source("function a() {}\na();", 'javascript', "two.js")

        graph = to_digraph([first, second])

        assert set(graph.nodes) == {("one.js", "b"), ("one.js", "a"), ("two.js", "global"), ("two.js", "a")}
        assert graph.edges[("one.js", "b"), ("one.js", "a")] == {"location": "2:15", "file": "one.js"}

    def test_most_referenced(self, config):
        skipped = FileGraph("none.js", None, skipped="unsupported extension")
        builder = CallGraphBuilder(config)
        file_graph = builder.build_source(
            "function log() {}\nfunction a() { log(); }\nfunction b() { log(); a(); }",
            'javascript', "m.js",
        )

        ranked = most_referenced(to_digraph([file_graph, skipped]), limit=1)

        assert ranked == [(("m.js", "log"), 2)]
