"""Shared fixtures: real tree-sitter parsers and a clean calltrace environment."""
import os
from textwrap import dedent

import pytest

from calltrace.analyzer.parser import LanguageParser
from calltrace.analyzer.walker import CallGraphWalker
from calltrace.config import reset_config


_PARSERS = {}


def parse(source: str, language: str = 'javascript'):
    """Parse dedented source with a cached LanguageParser."""
    if language not in _PARSERS:
        _PARSERS[language] = LanguageParser(language)
    return _PARSERS[language].parse_source(dedent(source))


def walk(source: str, language: str = 'javascript', **options) -> CallGraphWalker:
    """Run a fresh walker over source and return it for table inspection."""
    walker = CallGraphWalker(**options)
    walker.walk(parse(source, language).root_node)
    return walker


def find_nodes(node, node_type: str):
    """All descendants of the given type, in pre-order."""
    found = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            found.append(current)
        stack.extend(reversed(current.children))
    return found


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate every test from CALLTRACE_* variables and the config singleton.

    setenv-then-delenv makes monkeypatch remember the variable as absent, so
    anything a .env file sets during the test is removed again afterwards.
    """
    names = [name for name in os.environ if name.startswith('CALLTRACE_')]
    names += [
        'CALLTRACE_PERMISSIVE_MARKUP',
        'CALLTRACE_LOWERCASE_TAG_ATTRIBUTES',
        'CALLTRACE_MAX_FILE_SIZE',
        'CALLTRACE_LOG_LEVEL',
        'CALLTRACE_EXCLUDED_DIRS',
    ]
    for name in set(names):
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    reset_config()
    yield
    reset_config()
