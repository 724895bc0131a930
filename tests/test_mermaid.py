"""Tests for mermaid rendering of edges."""
from calltrace.analyzer.edge_store import EdgeStore
from calltrace.analyzer.syntax import Location
from calltrace.utils.mermaid import render_mermaid


def make_edges(*triples):
    store = EdgeStore()
    for caller, callee, (line, column) in triples:
        store.insert_if_absent(caller, callee, Location(line, column))
    return store.edges()


def test_empty_graph():
    assert render_mermaid([]) == "graph TD"


def test_nodes_are_declared_once():
    edges = make_edges(
        ('App', 'Header', (3, 4)),
        ('App', 'Footer', (4, 4)),
        ('Header', 'Footer', (9, 2)),
    )

    assert render_mermaid(edges).splitlines() == [
        'graph TD',
        '    n0["App"] -->|"3:4"| n1["Header"]',
        '    n0 -->|"4:4"| n2["Footer"]',
        '    n1 -->|"9:2"| n2',
    ]


def test_labels_are_escaped():
    edges = make_edges(('Map<K>', 'say"hi"', (1, 0)))

    line = render_mermaid(edges).splitlines()[1]
    assert 'n0["Map\\<K\\>"]' in line
    assert 'n1["say#quot;hi#quot;"]' in line


def test_max_edges_adds_note():
    edges = make_edges(
        ('a', 'b', (1, 0)),
        ('a', 'c', (2, 0)),
        ('a', 'd', (3, 0)),
    )

    lines = render_mermaid(edges, max_edges=1).splitlines()
    assert len(lines) == 3
    assert lines[-1] == '    note["... and 2 more edges"]'
