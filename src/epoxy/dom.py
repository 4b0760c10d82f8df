"""In-memory element tree — the element interface bindings operate on.

Small enough to reason about in tests, complete enough to drive every
built-in operator. Any other adapter (see epoxy.textual) only has to provide
the same methods.

Selectors are simple: ``tag``, ``#id``, ``.class`` and their combinations
(``input#name.wide``). query() returns the first matching descendant or None.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterator

_SELECTOR = re.compile(r"^(?P<tag>[A-Za-z][\w-]*)?(?:#(?P<id>[\w-]+))?(?P<classes>(?:\.[\w-]+)*)$")


def _parse_selector(selector: str) -> tuple[str | None, str | None, list[str]]:
    match = _SELECTOR.match(selector.strip())
    if match is None or not selector.strip():
        raise ValueError(f"Unsupported selector: {selector!r}")
    classes = [c for c in match.group("classes").split(".") if c]
    tag = match.group("tag")
    return (tag.lower() if tag else None), match.group("id"), classes


class Element:
    """A DOM-like node with attributes, properties, classes, style and events."""

    def __init__(
        self,
        tag: str,
        *,
        id: str | None = None,
        classes: tuple[str, ...] | list[str] = (),
        attrs: dict[str, Any] | None = None,
        value: Any = None,
        text: str = "",
        children: list[Element] | None = None,
    ) -> None:
        self.tag = tag.lower()
        self.id = id
        self.classes: set[str] = set(classes)
        self.attrs: dict[str, Any] = dict(attrs or {})
        self.props: dict[str, Any] = {}
        self.style: dict[str, Any] = {}
        self.value = value
        self.text = text
        self.html = ""
        self.visible = True
        self.parent: Element | None = None
        self.children: list[Element] = []
        self._listeners: dict[str, list[Callable[..., None]]] = {}
        for child in children or ():
            self.append(child)

    # --- Tree ---

    def append(self, child: Element) -> Element:
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach from the parent."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def descendants(self) -> Iterator[Element]:
        for child in self.children:
            yield child
            yield from child.descendants()

    def matches(self, selector: str) -> bool:
        tag, id_, classes = _parse_selector(selector)
        return (
            (tag is None or self.tag == tag)
            and (id_ is None or self.id == id_)
            and all(c in self.classes for c in classes)
        )

    def query(self, selector: str) -> Element | None:
        _parse_selector(selector)
        for node in self.descendants():
            if node.matches(selector):
                return node
        return None

    # --- Attributes and properties ---

    def get_attr(self, name: str) -> Any:
        return self.attrs.get(name)

    def set_attr(self, name: str, value: Any) -> None:
        if value is None:
            self.attrs.pop(name, None)
        else:
            self.attrs[name] = value

    def get_prop(self, name: str) -> Any:
        return self.props.get(name)

    def set_prop(self, name: str, value: Any) -> None:
        self.props[name] = value

    # --- Classes and style ---

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def toggle_class(self, name: str, enabled: bool) -> None:
        if enabled:
            self.classes.add(name)
        else:
            self.classes.discard(name)

    def set_css(self, styles: dict[str, Any]) -> None:
        self.style.update(styles)

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    # --- Content ---

    def set_text(self, value: Any) -> None:
        self.text = "" if value is None else str(value)
        self.html = ""

    def set_html(self, value: Any) -> None:
        self.html = "" if value is None else str(value)
        self.text = ""

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        self.value = value

    # --- Native events ---

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Callable[..., None] | None = None) -> None:
        handlers = self._listeners.get(event, [])
        if handler is None:
            handlers.clear()
        elif handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._listeners.pop(event, None)

    def fire(self, event: str) -> None:
        """Simulate a native event, e.g. the user editing an input."""
        for handler in list(self._listeners.get(event, ())):
            handler(self)

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, ()))
        return sum(len(handlers) for handlers in self._listeners.values())

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        classes = "".join(f".{c}" for c in sorted(self.classes))
        return f"<{self.tag}{ident}{classes}>"
