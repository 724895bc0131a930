"""Decides whether a call, markup tag or markup attribute references a known symbol."""
import logging
from typing import Optional

from tree_sitter import Node

from . import syntax
from .edge_store import EdgeStore
from .import_tracker import ImportTable
from .symbol_table import SymbolTable
from .syntax import IdentifierRef, Location, MemberChainRef


logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Turns candidate callee names into edges attributed to the current scope.

    Calls resolve against declared symbols and import aliases alike. Markup
    tags resolve against import aliases only, since component libraries are
    conventionally imported; ``permissive_markup`` lets locally declared
    symbols through as well.
    """

    def __init__(self, symbols: SymbolTable, imports: ImportTable, edges: EdgeStore,
                 permissive_markup: bool = False, lowercase_tag_attributes: bool = True):
        self.symbols = symbols
        self.imports = imports
        self.edges = edges
        self.permissive_markup = permissive_markup
        self.lowercase_tag_attributes = lowercase_tag_attributes

    def is_callable(self, name: str) -> bool:
        return self.symbols.has(name) or self.imports.has(name)

    def is_component(self, name: str) -> bool:
        if self.imports.has(name):
            return True
        return self.permissive_markup and self.symbols.has(name)

    def resolve_call(self, node: Node, scope: str) -> bool:
        """Direct (``f()``) and chained (``a.b.c()``) calls, plus ``new F()``."""
        target = syntax.call_target(node)
        if not isinstance(target, (IdentifierRef, MemberChainRef)):
            return False
        if not self.is_callable(target.name):
            return False
        return self._link(scope, target.name, target.location)

    def resolve_markup_tag(self, node: Node, scope: str) -> bool:
        """``<Dashboard />`` / ``<Layout>``: uppercase tags are component references."""
        target = syntax.markup_tag(node)
        if not isinstance(target, (IdentifierRef, MemberChainRef)):
            return False
        if not syntax.is_component_name(target.name):
            return False
        if not self.is_component(target.name):
            return False
        return self._link(scope, target.name, target.location)

    def scans_attributes_of(self, tag: Optional[str]) -> bool:
        """Component tags always; intrinsic tags like <div> only when enabled."""
        return syntax.is_component_name(tag) or self.lowercase_tag_attributes

    def resolve_attribute(self, node: Node, scope: str, tag: Optional[str]) -> bool:
        """Scan one jsx_attribute's value for references.

        ``element={...}`` is the route-table pattern: the component is passed
        as a prop instead of rendered as a child, so its identifier or nested
        element resolves as if it were referenced directly.
        """
        if tag is None or not self.scans_attributes_of(tag):
            return False

        name, value = syntax.attribute_parts(node)
        if value is None:
            return False
        expression = syntax.attribute_expression(value)
        if expression is None:
            return False

        if name == 'element':
            if expression.type == 'identifier':
                candidate = syntax.node_text(expression)
                if self.is_callable(candidate):
                    return self._link(scope, candidate, syntax.location_of(expression))
                return False
            if expression.type in syntax.MARKUP_ELEMENT_TYPES:
                return self.resolve_markup_tag(expression, scope)
            return False

        if expression.type in syntax.CALL_TYPES:
            return self.resolve_call(expression, scope)
        if expression.type == 'identifier':
            candidate = syntax.node_text(expression)
            if self.is_component(candidate):
                return self._link(scope, candidate, syntax.location_of(expression))
        return False

    def _link(self, caller: str, callee: str, location: Location) -> bool:
        added = self.edges.insert_if_absent(caller, callee, location)
        if added:
            self.symbols.record_outgoing_call(caller, callee)
            logger.debug("Edge %s -> %s at %s", caller, callee, location)
        return added
