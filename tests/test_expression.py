"""Tests for binding-expression parsing and compiling."""

import pytest

from epoxy import Composite, Constant, Leaf, ParseError, compile_bindings, parse, read
from epoxy.expression import Identifier, Literal, Not, ObjectLiteral


class TestParse:
    def test_identifier_pairs(self):
        expr = parse("text: full_name, value: first_name")
        assert expr.operators == {
            "text": Identifier("full_name"),
            "value": Identifier("first_name"),
        }

    def test_literals(self):
        expr = parse("a: 'hi', b: \"there\", c: 42, d: -1.5, e: true, f: null, g: False")
        assert expr.operators == {
            "a": Literal("hi"),
            "b": Literal("there"),
            "c": Literal(42),
            "d": Literal(-1.5),
            "e": Literal(True),
            "f": Literal(None),
            "g": Literal(False),
        }

    def test_object_literal(self):
        expr = parse('className: {"is-active": active, hidden: !visible}')
        assert expr.operators["className"] == ObjectLiteral(
            (("is-active", Identifier("active")), ("hidden", Not(Identifier("visible"))))
        )

    def test_nested_not_and_group(self):
        expr = parse("toggle: !(!shown)")
        assert expr.operators["toggle"] == Not(Not(Identifier("shown")))

    def test_trailing_comma_and_whitespace(self):
        expr = parse("  text: a ,\n  value: b,  ")
        assert list(expr) == ["text", "value"]

    def test_empty_text(self):
        assert parse("").operators == {}
        assert parse("   ").operators == {}

    def test_keyword_prefix_is_an_identifier(self):
        assert parse("text: trueish").operators["text"] == Identifier("trueish")

    def test_keyword_object_keys(self):
        expr = parse("className: {null: empty, true: on}")
        assert expr.operators["className"] == ObjectLiteral(
            (("null", Identifier("empty")), ("true", Identifier("on")))
        )

    @pytest.mark.parametrize(
        "text, expected",
        [
            (r"text: 'a\/b'", "a/b"),
            (r"text: 'it\'s'", "it's"),
            (r'text: "say \"hi\""', 'say "hi"'),
            (r"text: 'tab\there'", "tab\there"),
            (r"text: '\u00e9\x41'", "\u00e9A"),
            (r"text: 'back\\slash'", "back\\slash"),
        ],
    )
    def test_string_escapes(self, text, expected):
        assert parse(text).operators["text"] == Literal(expected)

    @pytest.mark.parametrize(
        "text",
        ["text full_name", "text: ", "text: a b", "text: {a: b", ": a", "text: a;", "text: a()"],
    )
    def test_malformed(self, text):
        with pytest.raises(ParseError):
            parse(text)

    def test_error_carries_selector_and_position(self):
        with pytest.raises(ParseError) as info:
            parse("text: {a: b", selector="#name")
        assert info.value.selector == "#name"
        assert info.value.line == 1
        assert '"#name"' in str(info.value)

    def test_duplicate_operator(self):
        with pytest.raises(ParseError, match="duplicate"):
            parse("text: a, text: b")


class TestCompile:
    def _accessors(self, **values):
        return {name: (lambda v=v: v) for name, v in values.items()}

    def test_identifier_becomes_leaf(self):
        accessors = self._accessors(name="Ann")
        compiled = compile_bindings("text: name", accessors)
        assert isinstance(compiled["text"], Leaf)
        assert compiled["text"].accessor is accessors["name"]

    def test_object_becomes_composite(self):
        compiled = compile_bindings("css: {color: c, width: '10px'}", self._accessors(c="red"))
        kind = compiled["css"]
        assert isinstance(kind, Composite)
        assert isinstance(kind.entries["color"], Leaf)
        assert isinstance(kind.entries["width"], Constant)

    def test_not_is_evaluated_at_compile_time(self):
        compiled = compile_bindings("toggle: !hidden", self._accessors(hidden=False))
        assert isinstance(compiled["toggle"], Constant)
        assert compiled["toggle"].value is True

    def test_unknown_identifier(self):
        with pytest.raises(ParseError, match="missing is not defined") as info:
            compile_bindings("text: missing", {}, selector=".x")
        assert info.value.selector == ".x"


class TestRead:
    def test_leaf(self):
        assert read(Leaf(lambda: 7)) == 7

    def test_composite_reads_every_entry(self):
        kind = Composite({"a": Leaf(lambda: 1), "b": Composite({"c": Constant(2)})})
        assert read(kind) == {"a": 1, "b": {"c": 2}}

    def test_constant_reports(self):
        met = []
        assert read(Constant("x"), lambda: met.append(True)) == "x"
        assert met == [True]

    def test_leaf_does_not_report(self):
        met = []
        read(Leaf(lambda: 1), lambda: met.append(True))
        assert met == []
