"""Binding expressions — parse once, compile against an accessor environment.

A binding declaration is a comma-separated list of ``operator: expression``
pairs, written in a small object-literal language:

    text: full_name, value: first_name
    className: {"is-active": active, hidden: !visible}, toggle: true

Parsing produces an AST (Identifier, Literal, ObjectLiteral, Not); nothing
in the text is ever executed. Compiling evaluates the AST against an explicit
mapping of identifier -> accessor and yields one AccessorKind per operator:

- Leaf: a live accessor, re-read on every update;
- Composite: a mapping of nested kinds (class-name toggles, CSS maps);
- Constant: a value baked in at compile time. Literals and ``!x`` produce
  these; a binding containing one is dirty and must be recompiled, not
  re-read, when its dependencies change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from arpeggio import EOF, NoMatch, Optional, ParserPython, PTNodeVisitor, ZeroOrMore, visit_parse_tree
from arpeggio import RegExMatch as _

from epoxy.errors import ParseError

# ─── Grammar ────────────────────────────────────────────────────────────────

_KEYWORDS = r"true|false|null|True|False|None"


def name():
    return _(r"(?!({})\b)[A-Za-z_$][\w$]*".format(_KEYWORDS))


def string():
    return _(r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'')


def number():
    return _(r"-?\d+(\.\d+)?([eE][+-]?\d+)?")


def constant():
    return _(r"({})\b".format(_KEYWORDS))


def key_name():
    # Object keys may be reserved words: {null: x} names the "null" class.
    return _(r"[A-Za-z_$][\w$]*")


def key():
    return [key_name, string]


def negation():
    return "!", expression


def group():
    return "(", expression, ")"


def object_literal():
    return "{", Optional(pair, ZeroOrMore(",", pair), Optional(",")), "}"


def expression():
    # constant before name so keywords are never read as identifiers.
    return [negation, object_literal, group, string, number, constant, name]


def pair():
    return key, ":", expression


def bindings():
    return Optional(pair, ZeroOrMore(",", pair), Optional(",")), EOF


_parser: ParserPython | None = None


def _get_parser() -> ParserPython:
    global _parser
    if _parser is None:
        _parser = ParserPython(bindings)
    return _parser


# ─── AST ────────────────────────────────────────────────────────────────────


class Node:
    """Base class of binding-expression AST nodes."""


@dataclass(frozen=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True)
class Literal(Node):
    value: Any


@dataclass(frozen=True)
class ObjectLiteral(Node):
    entries: tuple[tuple[str, Node], ...]


@dataclass(frozen=True)
class Not(Node):
    operand: Node


@dataclass(frozen=True)
class _Key:
    text: str


class _BindingVisitor(PTNodeVisitor):
    """Turns the arpeggio parse tree into AST nodes.

    Punctuation is filtered by type, so the visitor does not depend on
    whether string matches are suppressed from ``children``.
    """

    def visit_name(self, node, children):
        return Identifier(node.value)

    def visit_string(self, node, children):
        return Literal(_unescape(node.value[1:-1]))

    def visit_key_name(self, node, children):
        return _Key(node.value)

    def visit_number(self, node, children):
        text = node.value
        if any(c in text for c in ".eE"):
            return Literal(float(text))
        return Literal(int(text))

    def visit_constant(self, node, children):
        return Literal({"true": True, "True": True, "false": False, "False": False}.get(node.value))

    def visit_key(self, node, children):
        (inner,) = [c for c in children if isinstance(c, (Node, _Key))]
        return _as_key(inner)

    def visit_negation(self, node, children):
        (operand,) = _nodes(children)
        return Not(operand)

    def visit_group(self, node, children):
        (inner,) = _nodes(children)
        return inner

    def visit_expression(self, node, children):
        (inner,) = _nodes(children)
        return inner

    def visit_pair(self, node, children):
        # A single-alternative choice may reach us unwrapped, as a bare node.
        key, value = [c for c in children if isinstance(c, (Node, _Key))]
        return (_as_key(key).text, value)

    def visit_object_literal(self, node, children):
        return ObjectLiteral(tuple(_pairs(children)))

    def visit_bindings(self, node, children):
        return list(_pairs(children))


def _as_key(item: Node | _Key) -> _Key:
    if isinstance(item, _Key):
        return item
    return _Key(str(item.value))


_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "0": "\0"}
_ESCAPE = re.compile(r"\\(u[0-9A-Fa-f]{4}|x[0-9A-Fa-f]{2}|.)", re.DOTALL)


def _unescape(body: str) -> str:
    """Decode string-literal escapes; an unknown escape stands for the character itself."""

    def replace(match: re.Match) -> str:
        code = match.group(1)
        if len(code) > 1:
            return chr(int(code[1:], 16))
        return _ESCAPES.get(code, code)

    return _ESCAPE.sub(replace, body)


def _nodes(children) -> list[Node]:
    return [c for c in children if isinstance(c, Node)]


def _pairs(children) -> list[tuple[str, Node]]:
    return [c for c in children if isinstance(c, tuple)]


# ─── Accessor kinds ─────────────────────────────────────────────────────────


@dataclass(eq=False)
class Leaf:
    """A live accessor for one attribute."""

    accessor: Callable[..., Any]


@dataclass(eq=False)
class Composite:
    """A mapping of sub-keys to nested accessor kinds."""

    entries: dict[str, AccessorKind]


@dataclass(eq=False)
class Constant:
    """A value fixed at compile time."""

    value: Any


AccessorKind = Leaf | Composite | Constant


def read(kind: AccessorKind, on_constant: Callable[[], None] | None = None) -> Any:
    """Resolve an accessor kind to its current value.

    on_constant is called for every Constant met, which is how bindings learn
    they are dirty.
    """
    if isinstance(kind, Leaf):
        return kind.accessor()
    if isinstance(kind, Composite):
        return {key: read(entry, on_constant) for key, entry in kind.entries.items()}
    if on_constant is not None:
        on_constant()
    return kind.value


# ─── Expression ─────────────────────────────────────────────────────────────


class BindingExpression:
    """A parsed binding declaration: operator name -> AST."""

    def __init__(self, text: str, operators: dict[str, Node], selector: str | None = None) -> None:
        self.text = text
        self.operators = operators
        self.selector = selector

    def compile(self, accessors: Mapping[str, Callable[..., Any]]) -> dict[str, AccessorKind]:
        return {op: self.compile_operator(op, accessors) for op in self.operators}

    def compile_operator(self, operator: str, accessors: Mapping[str, Callable[..., Any]]) -> AccessorKind:
        return self._evaluate(self.operators[operator], accessors)

    def _evaluate(self, node: Node, accessors: Mapping[str, Callable[..., Any]]) -> AccessorKind:
        if isinstance(node, Identifier):
            try:
                return Leaf(accessors[node.name])
            except KeyError:
                raise ParseError(f"{node.name} is not defined", selector=self.selector) from None
        if isinstance(node, ObjectLiteral):
            return Composite({k: self._evaluate(v, accessors) for k, v in node.entries})
        if isinstance(node, Not):
            return Constant(not read(self._evaluate(node.operand, accessors)))
        return Constant(node.value)

    def __iter__(self):
        return iter(self.operators)

    def __repr__(self) -> str:
        return f"BindingExpression({self.text!r})"


def parse(text: str, selector: str | None = None) -> BindingExpression:
    """Parse binding text. Raises ParseError on malformed input."""
    if not text.strip():
        return BindingExpression(text, {}, selector)

    parser = _get_parser()
    try:
        tree = parser.parse(text)
    except NoMatch as e:
        line, column = parser.pos_to_linecol(e.position)
        raise ParseError(f"unexpected input near {text[e.position:e.position + 10]!r}",
                         selector=selector, line=line, column=column) from None

    operators: dict[str, Node] = {}
    for op, node in visit_parse_tree(tree, _BindingVisitor()):
        if op in operators:
            raise ParseError(f"duplicate binding {op!r}", selector=selector)
        operators[op] = node
    return BindingExpression(text, operators, selector)


def compile_bindings(
    text: str,
    accessors: Mapping[str, Callable[..., Any]],
    selector: str | None = None,
) -> dict[str, AccessorKind]:
    """Parse and compile in one step: operator name -> accessor kind."""
    return parse(text, selector).compile(accessors)
