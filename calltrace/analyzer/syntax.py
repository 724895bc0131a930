"""Adapter between raw tree-sitter nodes and the shapes the walker cares about.

Every "which child is the callee / the tag / the name" decision is made here
once, so the resolver only ever sees a small set of tagged variants instead of
raw node lists.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from tree_sitter import Node


CALL_TYPES = ('call_expression', 'new_expression')
CLASS_TYPES = ('class_declaration', 'abstract_class_declaration')
FUNCTION_DECLARATION_TYPES = ('function_declaration', 'generator_function_declaration')
# 'function' is the pre-0.21 tree-sitter-javascript name for function_expression
FUNCTION_EXPRESSION_TYPES = ('function_expression', 'function', 'generator_function')
FIELD_DEFINITION_TYPES = ('field_definition', 'public_field_definition')
MARKUP_TAG_TYPES = ('jsx_opening_element', 'jsx_self_closing_element')
MARKUP_ELEMENT_TYPES = ('jsx_element', 'jsx_self_closing_element')

PROPERTY_NAME_TYPES = ('property_identifier', 'private_property_identifier', 'identifier')
_IDENTIFIER = re.compile(r'^[A-Za-z_$][\w$]*$')


@dataclass(frozen=True)
class Location:
    """Source position of a triggering occurrence."""
    line: int  # 1-based
    column: int  # 0-based, as tree-sitter reports it

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class IdentifierRef:
    """A bare identifier in a callee or tag slot."""
    name: str
    location: Location


@dataclass(frozen=True)
class MemberChainRef:
    """A member-access chain rooted at an identifier, e.g. ``api.users.list``."""
    parts: Tuple[str, ...]
    location: Location

    @property
    def name(self) -> str:
        return '.'.join(self.parts)


@dataclass(frozen=True)
class OpaqueRef:
    """Anything we cannot name: ``this.x``, ``a[b]``, ``f()()``, a missing slot."""
    node_type: Optional[str] = None


Reference = Union[IdentifierRef, MemberChainRef, OpaqueRef]


def node_text(node: Node) -> str:
    """Decode a node's source text."""
    text = node.text
    if text is None:
        return ''
    return text.decode('utf-8', errors='ignore')


def location_of(node: Node) -> Location:
    return Location(node.start_point[0] + 1, node.start_point[1])


def member_chain(node: Node) -> Optional[Tuple[str, ...]]:
    """Collect ``base.p1.p2`` parts from a member_expression, outermost first.

    Returns None unless the chain bottoms out at a plain identifier.
    """
    parts = []
    current = node
    while current is not None and current.type == 'member_expression':
        prop = current.child_by_field_name('property')
        if prop is None or prop.type not in PROPERTY_NAME_TYPES:
            return None
        parts.append(node_text(prop))
        current = current.child_by_field_name('object')

    if current is None or current.type != 'identifier':
        return None
    parts.append(node_text(current))
    return tuple(reversed(parts))


def classify_reference(node: Optional[Node]) -> Reference:
    """Tag an expression that sits in a callee or tag-name slot."""
    if node is None:
        return OpaqueRef()

    if node.type == 'identifier':
        return IdentifierRef(node_text(node), location_of(node))

    if node.type == 'member_expression':
        parts = member_chain(node)
        if parts:
            return MemberChainRef(parts, location_of(node))

    return OpaqueRef(node.type)


def call_target(node: Node) -> Reference:
    """Return the callee slot of a call_expression or new_expression."""
    if node.type == 'new_expression':
        return classify_reference(node.child_by_field_name('constructor'))
    return classify_reference(node.child_by_field_name('function'))


def markup_tag(node: Node) -> Reference:
    """Return the tag name of an opening or self-closing markup element.

    Fragments (``<>``) have no name and come back opaque.
    """
    if node.type == 'jsx_element':
        node = node.child_by_field_name('open_tag')
        if node is None:
            return OpaqueRef()

    name_node = node.child_by_field_name('name')
    reference = classify_reference(name_node)
    if isinstance(reference, OpaqueRef) and name_node is not None:
        # <Foo.Bar> is a nested_identifier in some grammar versions and a
        # member_expression without fields in others
        if name_node.type in ('member_expression', 'nested_identifier'):
            parts = tuple(node_text(name_node).split('.'))
            if all(_IDENTIFIER.match(part) for part in parts):
                return MemberChainRef(parts, location_of(name_node))
    return reference


def is_component_name(name: Optional[str]) -> bool:
    """Markup tags starting with an uppercase letter are components."""
    return bool(name) and name[0].isupper()


def is_pascal_case(name: str) -> bool:
    """``UserCard`` yes, ``API_URL`` no."""
    return is_component_name(name) and not name.isupper()


def declared_name(node: Node) -> Optional[str]:
    """Name of a function/class/method declaration, if it has a plain one.

    Computed (``[Symbol.iterator]``) and string method names yield None.
    """
    name_node = node.child_by_field_name('name')
    if name_node is None:
        return None
    if name_node.type not in PROPERTY_NAME_TYPES + ('type_identifier',):
        return None
    return node_text(name_node) or None


def field_name(node: Node) -> Optional[str]:
    """Name of a class field definition (``handle = () => {}``)."""
    # tree-sitter-javascript uses 'property', tree-sitter-typescript uses 'name'
    name_node = node.child_by_field_name('property')
    if name_node is None:
        name_node = node.child_by_field_name('name')
    if name_node is None or name_node.type not in PROPERTY_NAME_TYPES:
        return None
    return node_text(name_node) or None


def attribute_parts(node: Node) -> Tuple[Optional[str], Optional[Node]]:
    """Split a jsx_attribute into (name, value node).

    ``<input disabled />`` has no value and returns (name, None).
    """
    named = [child for child in node.named_children if child.type != 'comment']
    if not named:
        return None, None

    name_node = named[0]
    name = node_text(name_node) if name_node.type == 'property_identifier' else None
    value = named[-1] if len(named) > 1 else None
    return name, value


def attribute_expression(value: Node) -> Optional[Node]:
    """Unwrap ``{expr}`` to expr; bare markup values are returned as-is."""
    if value.type == 'jsx_expression':
        for child in value.named_children:
            if child.type != 'comment':
                return child
        return None
    if value.type in MARKUP_ELEMENT_TYPES:
        return value
    return None


def is_require_call(node: Optional[Node]) -> bool:
    """``require('module')`` with a string literal argument."""
    if node is None or node.type != 'call_expression':
        return False
    function_node = node.child_by_field_name('function')
    if function_node is None or function_node.type != 'identifier':
        return False
    if node_text(function_node) != 'require':
        return False
    args_node = node.child_by_field_name('arguments')
    if args_node is None or args_node.named_child_count == 0:
        return False
    return args_node.named_children[0].type in ('string', 'template_string')


def first_argument(node: Node) -> Optional[Node]:
    args_node = node.child_by_field_name('arguments')
    if args_node is None:
        return None
    for child in args_node.named_children:
        if child.type != 'comment':
            return child
    return None


def is_component_wrapper(node: Optional[Node]) -> bool:
    """A call that wraps a component definition.

    ``memo(() => ...)``, ``forwardRef(function (props, ref) {...})``,
    ``memo(forwardRef(...))`` and tagged templates like ``styled.div`...```.
    A plain ``compute()`` or ``withRouter(Page)`` is not one.
    """
    if node is None or node.type != 'call_expression':
        return False
    args_node = node.child_by_field_name('arguments')
    if args_node is None:
        return False
    if args_node.type == 'template_string':
        return True

    argument = first_argument(node)
    if argument is None:
        return False
    if argument.type in ('arrow_function', 'class') + FUNCTION_EXPRESSION_TYPES + MARKUP_ELEMENT_TYPES:
        return True
    return is_component_wrapper(argument)
