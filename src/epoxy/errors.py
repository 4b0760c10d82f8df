"""Exceptions raised by epoxy.

Binding-construction errors (ParseError, UnknownOperator) surface
synchronously from View.bind_view(). NoGetter and NoSetter signal a computed
property used in a direction its definition does not support.
"""

from __future__ import annotations


class EpoxyError(Exception):
    """Base class for all epoxy errors."""


class ParseError(EpoxyError):
    """A binding expression is malformed or references an unknown name."""

    def __init__(
        self,
        message: str,
        *,
        selector: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.message = message
        self.selector = selector
        self.line = line
        self.column = column
        super().__init__(str(self))

    def with_selector(self, selector: str) -> ParseError:
        """Return a copy annotated with the selector that owns the expression."""
        return ParseError(self.message, selector=selector, line=self.line, column=self.column)

    def __str__(self) -> str:
        where = f" at line {self.line}, column {self.column}" if self.line is not None else ""
        if self.selector is not None:
            return f'Error parsing bindings for "{self.selector}"{where}: {self.message}'
        return f"Error parsing bindings{where}: {self.message}"


class UnknownOperator(EpoxyError):
    """A binding names an operator absent from the merged catalog."""

    def __init__(self, operator: str, *, selector: str | None = None) -> None:
        self.operator = operator
        self.selector = selector
        target = f' for "{selector}"' if selector is not None else ""
        super().__init__(f"invalid binding{target} => {operator}")


class NoGetter(EpoxyError):
    """A computed property was defined without a getter."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No getter defined for computed property {name!r}.")


class NoSetter(EpoxyError):
    """A write was attempted on a read-only computed property."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No setter defined for computed property {name!r}.")
