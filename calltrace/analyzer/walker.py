"""Single-pass scope-tracking walk that turns a syntax tree into call edges.

The walk is depth-first pre-order. A node registers its imports and
declarations and resolves its own references before any of its children are
visited, and scope context only ever flows downward: each child receives its
own copy of the parent's context, so siblings never observe each other's
declarations as "current scope".

Because the pass is single and ordered, a call to a function declared later in
the file is not resolved. That gap is accepted: the output is a best-effort
diagram of a file, not a sound call graph.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from tree_sitter import Node

from . import syntax
from .edge_store import Edge, EdgeStore
from .import_tracker import Binding, ImportTable, import_bindings, require_bindings
from .resolver import ReferenceResolver
from .symbol_table import GLOBAL_SCOPE, Symbol, SymbolTable


logger = logging.getLogger(__name__)

FUNCTION_VALUE_TYPES = ('arrow_function',) + syntax.FUNCTION_EXPRESSION_TYPES

# Initializers that make a PascalCase binding "component-like" on their own:
# class {...}, <svg/>. Calls count only when they wrap a component.
COMPONENT_INITIALIZER_TYPES = (
    'class',
    'jsx_element',
    'jsx_self_closing_element',
)


@dataclass(frozen=True)
class WalkContext:
    """Context handed down from a node to each of its children."""
    enclosing_class: Optional[str] = None
    current_scope: str = GLOBAL_SCOPE
    # Set only on the initializer node of a named binding (const f = () => ...)
    binding_name: Optional[str] = None
    # Display name of the nearest enclosing opening / self-closing markup tag
    markup_tag: Optional[str] = None
    # False inside attributes of tags whose attributes are not scanned
    scan_references: bool = True


@dataclass
class CallGraphResult:
    """Everything one walk produced, for renderers and the CLI."""
    pairs: List[List[str]] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    symbols: List[Symbol] = field(default_factory=list)
    imports: List[Binding] = field(default_factory=list)

    @classmethod
    def empty(cls) -> 'CallGraphResult':
        return cls()


class CallGraphWalker:
    """Owns the symbol, import and edge tables for exactly one file."""

    def __init__(self, permissive_markup: bool = False, lowercase_tag_attributes: bool = True):
        self.symbols = SymbolTable()
        self.imports = ImportTable()
        self.edges = EdgeStore()
        self.resolver = ReferenceResolver(
            self.symbols,
            self.imports,
            self.edges,
            permissive_markup=permissive_markup,
            lowercase_tag_attributes=lowercase_tag_attributes,
        )
        self._walked = False

    def walk(self, root: Node) -> EdgeStore:
        """Walk the tree once and return the populated edge store.

        Raises:
            RuntimeError: If this walker was already used for a tree
        """
        if self._walked:
            raise RuntimeError("CallGraphWalker is single-use; create one per file")
        self._walked = True

        # Explicit stack keeps pre-order without hitting the recursion limit
        # on deeply nested (e.g. minified) sources
        stack: List[Tuple[Node, WalkContext]] = [(root, WalkContext())]
        while stack:
            node, context = stack.pop()
            child_context, initializer = self._visit(node, context)

            for child in reversed(node.children):
                if initializer is not None and child == initializer[0]:
                    stack.append((child, replace(child_context, binding_name=initializer[1])))
                else:
                    stack.append((child, child_context))

        logger.debug(
            "Walk finished: %d symbols, %d imports, %d edges",
            len(self.symbols), len(self.imports), len(self.edges),
        )
        return self.edges

    def result(self) -> CallGraphResult:
        return CallGraphResult(
            pairs=self.edges.emit(),
            edges=self.edges.edges(),
            symbols=list(self.symbols),
            imports=self.imports.items(),
        )

    def _visit(self, node: Node, context: WalkContext) -> Tuple[WalkContext, Optional[Tuple[Node, str]]]:
        """Process one node.

        Returns:
            The context for its children, and optionally an (initializer
            node, binding name) pair for the one child that initializes a
            named binding
        """
        node_type = node.type
        scope = context.current_scope
        child_context = context
        if context.binding_name is not None:
            child_context = replace(context, binding_name=None)
        initializer = None

        if node_type == 'import_statement':
            self._bind(import_bindings(node))

        elif node_type in syntax.CLASS_TYPES:
            name = syntax.declared_name(node)
            if name:
                self.symbols.declare(name, _line(node), 'class')
                child_context = replace(child_context, enclosing_class=name)

        elif node_type in syntax.FUNCTION_DECLARATION_TYPES or node_type == 'method_definition':
            child_context = self._declare_scope(child_context, syntax.declared_name(node), node, 'function')

        elif node_type == 'arrow_function':
            child_context = self._declare_scope(child_context, context.binding_name, node, 'arrow')

        elif node_type in syntax.FUNCTION_EXPRESSION_TYPES:
            name = context.binding_name or syntax.declared_name(node)
            child_context = self._declare_scope(child_context, name, node, 'function')

        elif node_type == 'variable_declarator':
            bindings = require_bindings(node)
            if bindings:
                self._bind(bindings)
            else:
                child_context, initializer = self._visit_declarator(node, child_context)

        elif node_type in syntax.FIELD_DEFINITION_TYPES:
            name = syntax.field_name(node)
            value = node.child_by_field_name('value')
            if name and value is not None:
                initializer = (value, name)

        elif node_type in syntax.CALL_TYPES:
            if context.scan_references:
                self.resolver.resolve_call(node, scope)

        elif node_type in syntax.MARKUP_TAG_TYPES:
            if context.scan_references:
                self.resolver.resolve_markup_tag(node, scope)
            tag = syntax.markup_tag(node)
            child_context = replace(child_context, markup_tag=getattr(tag, 'name', None))

        elif node_type == 'jsx_attribute' and context.scan_references:
            if self.resolver.scans_attributes_of(context.markup_tag):
                self.resolver.resolve_attribute(node, scope, context.markup_tag)
            else:
                child_context = replace(child_context, scan_references=False)

        return child_context, initializer

    def _visit_declarator(self, node: Node, context: WalkContext) -> Tuple[WalkContext, Optional[Tuple[Node, str]]]:
        name_node = node.child_by_field_name('name')
        value = node.child_by_field_name('value')
        if name_node is None or name_node.type != 'identifier' or value is None:
            return context, None
        name = syntax.node_text(name_node)

        # The function node names itself from the binding
        if value.type in FUNCTION_VALUE_TYPES:
            return context, (value, name)

        if syntax.is_pascal_case(name) and (
                value.type in COMPONENT_INITIALIZER_TYPES or syntax.is_component_wrapper(value)):
            return self._declare_scope(context, name, node, 'component'), None

        return context, None

    def _declare_scope(self, context: WalkContext, name: Optional[str], node: Node, kind: str) -> WalkContext:
        if not name:
            return context
        if context.enclosing_class:
            name = f"{context.enclosing_class}.{name}"
        self.symbols.declare(name, _line(node), kind)
        return replace(context, current_scope=name)

    def _bind(self, bindings: List[Binding]):
        for alias, original in bindings:
            self.imports.bind(alias, original)


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def analyze_tree(root, *, permissive_markup: bool = False,
                 lowercase_tag_attributes: bool = True) -> CallGraphResult:
    """Walk a tree (or its root node) with fresh tables.

    Any failure while reading the tree is logged and turns the whole file's
    result into an empty one; there is no partial recovery mid-walk.

    Args:
        root: tree-sitter Tree or Node; None yields an empty result
        permissive_markup: Let markup tags resolve to local symbols, not only imports
        lowercase_tag_attributes: Also scan attributes of intrinsic tags like <div>

    Returns:
        CallGraphResult for the walked file
    """
    if root is None:
        return CallGraphResult.empty()

    try:
        root = getattr(root, 'root_node', root)
        walker = CallGraphWalker(
            permissive_markup=permissive_markup,
            lowercase_tag_attributes=lowercase_tag_attributes,
        )
        walker.walk(root)
        return walker.result()
    except Exception:
        logger.exception("Call graph extraction failed, returning an empty graph")
        return CallGraphResult.empty()


def build_graph(root, *, permissive_markup: bool = False,
                lowercase_tag_attributes: bool = True) -> List[List[str]]:
    """Return ``[escaped "<line:col>: <caller>", escaped callee]`` pairs for one tree."""
    return analyze_tree(
        root,
        permissive_markup=permissive_markup,
        lowercase_tag_attributes=lowercase_tag_attributes,
    ).pairs
