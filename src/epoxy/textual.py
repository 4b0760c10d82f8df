"""Textual integration for epoxy. Opt-in — requires textual.

Adapts Textual widgets to the element interface bindings use, so a View can
bind a model straight onto a running app:

    class PersonApp(App):
        def on_mount(self):
            self.document = TextualDocument(self)
            self.person_view = PersonView(self.document, person)
            self.person_view.bind_view()

        def on_input_changed(self, message):
            self.document.dispatch(message)

// [LAW:locality-or-seam] Textual coupling isolated in this module — core epoxy stays agnostic.
// [LAW:single-enforcer] NoMatches is translated to "no element" here, not at callsites.
"""

from __future__ import annotations

from typing import Any, Callable

from rich.markup import escape
from textual.css.query import NoMatches

# Widget class name -> element tag. Matched along the MRO so subclasses work.
_TAGS = {
    "Input": "input",
    "Checkbox": "input",
    "Switch": "input",
    "RadioButton": "input",
    "Select": "select",
    "TextArea": "textarea",
}

# Widgets whose editable content is not exposed as ``value``.
_VALUE_ATTRS = {"TextArea": "text"}

# Element property name -> widget attribute.
_PROPS = {"checked": "value", "disabled": "disabled"}


def _lookup(widget, table: dict[str, str]) -> str | None:
    for cls in type(widget).__mro__:
        if cls.__name__ in table:
            return table[cls.__name__]
    return None


class TextualElement:
    """One widget seen through the element interface."""

    __slots__ = ("widget", "document", "tag")

    def __init__(self, widget, document: TextualDocument) -> None:
        self.widget = widget
        self.document = document
        self.tag = _lookup(widget, _TAGS) or type(widget).__name__.lower()

    def get_attr(self, name: str) -> Any:
        return getattr(self.widget, name, None)

    def set_attr(self, name: str, value: Any) -> None:
        setattr(self.widget, name, value)

    def get_prop(self, name: str) -> Any:
        return getattr(self.widget, _PROPS.get(name, name), None)

    def set_prop(self, name: str, value: Any) -> None:
        setattr(self.widget, _PROPS.get(name, name), value)

    def has_class(self, name: str) -> bool:
        return self.widget.has_class(name)

    def toggle_class(self, name: str, enabled: bool) -> None:
        self.widget.set_class(enabled, name)

    def set_css(self, styles: dict[str, Any]) -> None:
        for rule, value in styles.items():
            setattr(self.widget.styles, rule.replace("-", "_"), value)

    def set_visible(self, visible: bool) -> None:
        self.widget.display = visible

    def set_text(self, value: Any) -> None:
        self.widget.update(escape("" if value is None else str(value)))

    def set_html(self, value: Any) -> None:
        # Textual markup plays the part of HTML: rendered, not escaped.
        self.widget.update("" if value is None else str(value))

    def get_value(self) -> Any:
        return getattr(self.widget, _lookup(self.widget, _VALUE_ATTRS) or "value")

    def set_value(self, value: Any) -> None:
        attr = _lookup(self.widget, _VALUE_ATTRS) or "value"
        if self.tag in ("input", "textarea") and not isinstance(value, bool):
            value = "" if value is None else str(value)
        setattr(self.widget, attr, value)

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self.document.add_listener(self.widget, event, handler)

    def off(self, event: str, handler: Callable[..., None] | None = None) -> None:
        self.document.remove_listener(self.widget, event, handler)

    def __repr__(self) -> str:
        return f"TextualElement({self.widget!r})"


class TextualDocument:
    """Selector lookup and native-event routing over a Textual app or widget."""

    def __init__(self, root) -> None:
        self.root = root
        # (id(widget), event) -> handlers. Owned here so widgets are never mutated.
        self._listeners: dict[tuple[int, str], list[Callable[..., None]]] = {}

    def query(self, selector: str) -> TextualElement | None:
        try:
            widget = self.root.query_one(selector)
        except NoMatches:
            return None
        return TextualElement(widget, self)

    def add_listener(self, widget, event: str, handler: Callable[..., None]) -> None:
        self._listeners.setdefault((id(widget), event), []).append(handler)

    def remove_listener(self, widget, event: str, handler: Callable[..., None] | None = None) -> None:
        key = (id(widget), event)
        handlers = self._listeners.get(key, [])
        if handler is None:
            handlers.clear()
        elif handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._listeners.pop(key, None)

    def dispatch(self, message, event: str = "change") -> None:
        """Forward a widget's Changed message to the element listeners.

        Call from the app's on_input_changed / on_checkbox_changed / ...
        handlers.
        """
        widget = getattr(message, "control", None)
        if widget is None:
            return
        element = TextualElement(widget, self)
        for handler in list(self._listeners.get((id(widget), event), ())):
            handler(element)

    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self._listeners.values())
