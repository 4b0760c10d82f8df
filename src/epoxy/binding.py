"""Bindings — one element wired to a model through a binding expression.

For each operator in the expression, the binding compiles and reads the
value under a dependency probe, applies the operator, and subscribes to the
model events the probe recorded. Those subscriptions are fixed after the
initial pass.

An operator whose value contained a literal is dirty: its compiled form has
the literal baked in, so on every dependency change it is recompiled rather
than re-read. Clean operators keep their compiled accessor for life.

Editable elements get the reverse path too: a native "change" listener
writes the operator's extracted value back through the accessor.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from epoxy._tracking import DependencyCollector, capture, untracked
from epoxy.errors import UnknownOperator
from epoxy.events import Events
from epoxy.expression import AccessorKind, BindingExpression, Leaf, read
from epoxy.operators import EDITABLE_TAGS, Operator


class Binding(Events):
    """A live binding between one element and one model."""

    def __init__(
        self,
        element: Any,
        expression: BindingExpression,
        accessors: Mapping[str, Callable[..., Any]],
        operators: Mapping[str, Operator],
        selector: str | None = None,
    ) -> None:
        super().__init__()
        self.element = element
        self.expression = expression
        self.selector = selector
        self.accessors: dict[str, AccessorKind] = {}
        self.dirty_operators: set[str] = set()
        self.events: set[str] = set()
        self._env = accessors
        self._native: list[tuple[str, Callable[..., None]]] = []
        self._disposed = False
        self._met_constant = False

        # Validate the whole declaration before touching the element.
        for name in expression:
            if name not in operators:
                raise UnknownOperator(name, selector=selector)

        try:
            for name in expression:
                self._bind_operator(name, operators[name])
        except Exception:
            self.dispose()
            raise

    @property
    def dirty(self) -> bool:
        return bool(self.dirty_operators)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def native_count(self) -> int:
        return len(self._native)

    def _bind_operator(self, name: str, operator: Operator) -> None:
        collector = DependencyCollector()
        with capture(collector):
            kind = self.expression.compile_operator(name, self._env)
            value = self._read(kind)
            operator.set(self.element, value)
        self.accessors[name] = kind
        if self._met_constant:
            self.dirty_operators.add(name)

        if self._is_editable() and operator.readable and isinstance(kind, Leaf):
            self._listen_native("change", self._make_writer(kind, operator))

        for source, events in collector.by_source():
            self.events.update(events)
            self.listen_to(source, " ".join(events), self._make_reapply(name, operator))

    def _make_writer(self, kind: Leaf, operator: Operator) -> Callable[..., None]:
        def _on_element_change(*args) -> None:
            if not self._disposed:
                kind.accessor(operator.get(self.element))

        return _on_element_change

    def _make_reapply(self, name: str, operator: Operator) -> Callable[..., None]:
        def _on_model_change(*args) -> None:
            self.reapply(name, operator)

        return _on_model_change

    def reapply(self, name: str, operator: Operator) -> None:
        """Re-run one operator: recompile if dirty, else re-read the accessor."""
        if self._disposed:
            return
        with untracked():
            if name in self.dirty_operators:
                self.accessors[name] = self.expression.compile_operator(name, self._env)
            operator.set(self.element, self._read(self.accessors[name]))

    def _read(self, kind: AccessorKind) -> Any:
        """Read an accessor kind, noting whether a literal escaped the accessors."""
        self._met_constant = False
        return read(kind, self._on_constant)

    def _on_constant(self) -> None:
        self._met_constant = True

    def _is_editable(self) -> bool:
        return str(getattr(self.element, "tag", "")).lower() in EDITABLE_TAGS

    def _listen_native(self, event: str, handler: Callable[..., None]) -> None:
        self.element.on(event, handler)
        self._native.append((event, handler))

    def dispose(self) -> None:
        """Release the element listeners and every model subscription."""
        for event, handler in self._native:
            self.element.off(event, handler)
        self._native.clear()
        self.stop_listening()
        self._disposed = True

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else ("dirty" if self.dirty else "clean")
        return f"Binding({self.selector!r}, {self.expression.text!r}, {state})"
