"""
Mermaid diagram generation from call graph edges.

Produces `graph TD` definitions that render one node per symbol and one
arrow per edge, labelled with the location of its first occurrence.
"""

from typing import Dict, Iterable, Optional

from ..analyzer.edge_store import Edge, escape_mermaid


def render_mermaid(edges: Iterable[Edge], max_edges: Optional[int] = None) -> str:
    """Generate a mermaid diagram from call graph edges.

    Args:
        edges: Edges in emission order
        max_edges: Limit to prevent huge diagrams; None renders everything

    Returns:
        Mermaid graph definition string suitable for rendering.
    """
    edge_list = list(edges)
    shown = edge_list if max_edges is None else edge_list[:max_edges]

    lines = ["graph TD"]
    node_ids: Dict[str, str] = {}

    def node(name: str) -> str:
        # First appearance declares the label; later ones reuse the id
        if name in node_ids:
            return node_ids[name]
        node_ids[name] = f"n{len(node_ids)}"
        return f'{node_ids[name]}["{_label(name)}"]'

    for edge in shown:
        caller = node(edge.caller)
        callee = node(edge.callee)
        lines.append(f'    {caller} -->|"{_label(str(edge.location))}"| {callee}')

    omitted = len(edge_list) - len(shown)
    if omitted > 0:
        lines.append(f'    note["... and {omitted} more edges"]')

    return "\n".join(lines)


def _label(text: str) -> str:
    """Make text safe inside a quoted mermaid label."""
    return escape_mermaid(text).replace('"', '#quot;')
