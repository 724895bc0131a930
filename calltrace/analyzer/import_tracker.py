from typing import Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node

from .syntax import is_require_call, node_text


Binding = Tuple[str, str]  # (local alias, original exported name)


class ImportTable:
    """Local alias -> originally exported name, for one walked file.

    The module an alias came from is deliberately not kept: aliases are only
    used to decide that an otherwise-unknown name is still worth an edge.
    """

    def __init__(self):
        self._bindings: Dict[str, str] = {}

    def bind(self, alias: str, original: str) -> None:
        # Last binding for an alias wins
        self._bindings[alias] = original

    def has(self, alias: str) -> bool:
        return alias in self._bindings

    def get(self, alias: str) -> Optional[str]:
        return self._bindings.get(alias)

    def items(self) -> List[Binding]:
        return list(self._bindings.items())

    def __contains__(self, alias: str) -> bool:
        return self.has(alias)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)


def import_bindings(node: Node) -> List[Binding]:
    """
    Maps one ESM import statement to its local bindings, in textual order.

    import x from 'mod'            -> (x, x)
    import * as ns from 'mod'      -> (ns, ns)
    import { y, z as w } from 'm'  -> (y, y), (w, z)
    import q = require('mod')      -> (q, q)   (TypeScript)
    """
    bindings: List[Binding] = []
    if node.type != 'import_statement':
        return bindings

    for clause in node.named_children:
        if clause.type == 'import_require_clause':
            for child in clause.named_children:
                if child.type == 'identifier':
                    name = node_text(child)
                    bindings.append((name, name))
                    break
            continue

        if clause.type != 'import_clause':
            continue

        # import x, { y } from 'mod' puts both forms under one clause
        for child in clause.named_children:

            # Default import: a direct identifier inside the clause
            if child.type == 'identifier':
                name = node_text(child)
                bindings.append((name, name))

            # Namespace import: * as identifier
            elif child.type == 'namespace_import':
                for ns_child in child.named_children:
                    if ns_child.type == 'identifier':
                        name = node_text(ns_child)
                        bindings.append((name, name))

            # Named imports, possibly aliased
            elif child.type == 'named_imports':
                for specifier in child.named_children:
                    if specifier.type != 'import_specifier':
                        continue
                    name_node = specifier.child_by_field_name('name')
                    alias_node = specifier.child_by_field_name('alias')
                    if name_node is None:
                        continue

                    original = node_text(name_node).strip('"\'')
                    if alias_node is not None:
                        bindings.append((node_text(alias_node), original))
                    else:
                        bindings.append((original, original))

    return bindings


def require_bindings(declarator: Node) -> List[Binding]:
    """
    Maps a CommonJS declarator to its local bindings.

    const x = require('mod')             -> (x, x)
    const { a, b: c } = require('mod')   -> (a, a), (c, b)
    """
    bindings: List[Binding] = []
    if declarator.type != 'variable_declarator':
        return bindings

    name_node = declarator.child_by_field_name('name')
    value_node = declarator.child_by_field_name('value')
    if name_node is None or not is_require_call(value_node):
        return bindings

    if name_node.type == 'identifier':
        name = node_text(name_node)
        bindings.append((name, name))

    elif name_node.type == 'object_pattern':
        for prop in name_node.named_children:
            if prop.type == 'shorthand_property_identifier_pattern':
                name = node_text(prop)
                bindings.append((name, name))

            elif prop.type == 'pair_pattern':
                key_node = prop.child_by_field_name('key')
                local_node = prop.child_by_field_name('value')
                if key_node is not None and local_node is not None and local_node.type == 'identifier':
                    bindings.append((node_text(local_node), node_text(key_node).strip('"\'')))

            # const { a = fallback } = require('mod')
            elif prop.type == 'object_assignment_pattern':
                left = prop.child_by_field_name('left')
                if left is not None and left.type == 'shorthand_property_identifier_pattern':
                    name = node_text(left)
                    bindings.append((name, name))

    return bindings
