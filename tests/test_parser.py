"""Tests for extension-based parser selection."""
import pytest

from calltrace.analyzer.parser import LanguageParser


class TestLanguageSelection:

    @pytest.mark.parametrize('file_name,language', [
        ('app.js', 'javascript'),
        ('App.jsx', 'javascript'),
        ('server.mjs', 'javascript'),
        ('config.cjs', 'javascript'),
        ('index.ts', 'typescript'),
        ('worker.mts', 'typescript'),
        ('Page.tsx', 'tsx'),
        ('LEGACY.JS', 'javascript'),
    ])
    def test_supported_extensions(self, file_name, language):
        parser = LanguageParser.from_file_extension(file_name)

        assert parser is not None
        assert parser.language == language

    @pytest.mark.parametrize('file_name', ['main.py', 'README', 'styles.css'])
    def test_unsupported_extensions(self, file_name):
        assert LanguageParser.from_file_extension(file_name) is None

    def test_unknown_language_raises(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            LanguageParser('python')


class TestParsing:

    def test_parse_source_accepts_str_and_bytes(self):
        parser = LanguageParser('javascript')

        from_str = parser.parse_source("run();")
        from_bytes = parser.parse_source(b"run();")

        assert from_str.root_node.type == 'program'
        assert from_str.root_node.text == from_bytes.root_node.text

    def test_tsx_grammar_understands_markup(self):
        tree = LanguageParser('tsx').parse_source("const x = <Card id={1} />;")

        assert not tree.root_node.has_error

    def test_parse_file(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("export function a(): void {}\n", encoding="utf-8")

        tree = LanguageParser('typescript').parse_file(source)

        assert tree is not None
        assert tree.root_node.type == 'program'

    def test_missing_file_returns_none(self, tmp_path):
        assert LanguageParser('javascript').parse_file(tmp_path / "missing.js") is None

    def test_directory_returns_none(self, tmp_path):
        assert LanguageParser('javascript').parse_file(tmp_path) is None
