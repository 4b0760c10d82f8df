"""Binding operators — named get/set pairs applied to elements.

An operator writes a value onto an element (``set``) and, for read-write
operators, extracts the element's current value (``get``). Operators are
stateless and shared by every binding that names them.

The catalog is open: register_operator() adds to the global table, and a
View can declare its own ``operators`` on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

# Tags whose value the user can edit; read-write operators listen on these.
EDITABLE_TAGS = frozenset({"input", "select", "textarea"})


@dataclass(frozen=True)
class Operator:
    set: Callable[[Any, Any], None]
    get: Callable[[Any], Any] | None = None

    @property
    def readable(self) -> bool:
        return self.get is not None


def as_operator(declaration: Any) -> Operator:
    """Normalise a mapping ``{"set": fn, "get": fn}`` or an object with set/get."""
    if isinstance(declaration, Operator):
        return declaration
    if isinstance(declaration, Mapping):
        setter, getter = declaration.get("set"), declaration.get("get")
    else:
        setter, getter = getattr(declaration, "set", None), getattr(declaration, "get", None)
    if not callable(setter):
        raise TypeError(f"Operator needs a callable 'set': {declaration!r}")
    return Operator(setter, getter)


# --- Built-in operators ---


def _set_attr(element, value) -> None:
    for name, attr_value in (value or {}).items():
        element.set_attr(name, attr_value)


def _get_checked(element) -> bool:
    return bool(element.get_prop("checked"))


def _set_checked(element, value) -> None:
    element.set_prop("checked", bool(value))


def _set_class_name(element, value) -> None:
    for class_name, enabled in (value or {}).items():
        element.toggle_class(class_name, bool(enabled))


def _set_css(element, value) -> None:
    element.set_css(dict(value or {}))


def _set_enabled(element, value) -> None:
    element.set_prop("disabled", not value)


def _set_html(element, value) -> None:
    element.set_html(value)


def _set_text(element, value) -> None:
    element.set_text(value)


def _set_toggle(element, value) -> None:
    element.set_visible(bool(value))


def _get_value(element) -> Any:
    return element.get_value()


def _set_value(element, value) -> None:
    element.set_value(value)


default_operators: dict[str, Operator] = {
    "attr": Operator(_set_attr),
    "checked": Operator(_set_checked, _get_checked),
    "className": Operator(_set_class_name),
    "css": Operator(_set_css),
    "enabled": Operator(_set_enabled),
    "html": Operator(_set_html),
    "text": Operator(_set_text),
    "toggle": Operator(_set_toggle),
    "value": Operator(_set_value, _get_value),
}

# ─── Global registry ─────────────────────────────────────────────────────────
_registered: dict[str, Operator] = {}


def register_operator(name: str, declaration: Any) -> Operator:
    """Add an operator to every view's catalog.

    Usage:
        register_operator("glow", {"set": lambda el, v: el.toggle_class("glow", bool(v))})
    """
    operator = as_operator(declaration)
    _registered[name] = operator
    return operator


def unregister_operator(name: str) -> None:
    _registered.pop(name, None)


def merged_operators(overrides: Mapping[str, Any] | None = None) -> dict[str, Operator]:
    """Defaults, then globally registered, then per-view overrides."""
    catalog = dict(default_operators)
    catalog.update(_registered)
    for name, declaration in (overrides or {}).items():
        catalog[name] = as_operator(declaration)
    return catalog
