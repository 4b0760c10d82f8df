"""View — declarative bindings between an element tree and a model.

A View declares ``bindings`` as a mapping of selector -> binding text:

    class PersonView(View):
        bindings = {
            "#name": "value: first_name",
            ".greeting": "text: full_name, toggle: visible",
        }

    view = PersonView(root, person)
    view.bind_view()

Model -> view relationships are fixed when bind_view() runs: the accessor
environment holds one accessor per attribute the model knows at that moment.
If the model gains attributes or the view gains bindings, call bind_view()
again.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from epoxy.binding import Binding
from epoxy.expression import parse
from epoxy.model import Model
from epoxy.operators import merged_operators

logger = logging.getLogger("epoxy.view")

_UNSET = object()


class Accessor:
    """Read or write one model attribute.

    ``accessor()`` reads (recording a dependency inside a probe),
    ``accessor(value)`` writes, ``accessor({...})`` writes several attributes.
    """

    __slots__ = ("model", "name")

    def __init__(self, model: Model, name: str) -> None:
        self.model = model
        self.name = name

    def __call__(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self.model.get(self.name)
        if isinstance(value, Mapping):
            return self.model.set(value)
        return self.model.set(self.name, value)

    def __repr__(self) -> str:
        return f"Accessor({self.name})"


def make_accessors(model: Model) -> dict[str, Accessor]:
    """One accessor per attribute currently known to the model."""
    return {name: Accessor(model, name) for name in model.keys()}


class View:
    """Owns an element, a model, and the bindings between them."""

    bindings: Mapping[str, str] = {}
    operators: Mapping[str, Any] = {}

    def __init__(
        self,
        el: Any,
        model: Model | None = None,
        *,
        bindings: Mapping[str, str] | None = None,
        operators: Mapping[str, Any] | None = None,
    ) -> None:
        self.el = el
        self.model = model
        if bindings is not None:
            self.bindings = bindings
        if operators is not None:
            self.operators = operators
        self._bindings: list[Binding] = []

    @property
    def active_bindings(self) -> list[Binding]:
        return list(self._bindings)

    def query(self, selector: str) -> Any:
        """First element under el matching selector, or None."""
        return self.el.query(selector)

    def bind_view(self) -> None:
        """Compile accessors and apply every declared binding.

        Selectors matching nothing are skipped. Any other failure unbinds the
        whole view and propagates.
        """
        self.unbind_view()
        if self.model is None or not self.bindings:
            return

        operators = merged_operators(self.operators)
        accessors = make_accessors(self.model)
        try:
            for selector, text in self.bindings.items():
                element = self.query(selector)
                if element is None:
                    logger.debug("No element matches %r, binding skipped", selector)
                    continue
                binding = Binding(element, parse(text, selector), accessors, operators, selector)
                self._bindings.append(binding)
        except Exception:
            self.unbind_view()
            raise
        logger.debug("Bound %d of %d declared bindings", len(self._bindings), len(self.bindings))

    def unbind_view(self) -> None:
        """Dispose of all bindings."""
        while self._bindings:
            self._bindings.pop().dispose()

    def listener_count(self) -> int:
        """Model subscriptions plus native element listeners held by the bindings."""
        return sum(binding.listening_count + binding.native_count for binding in self._bindings)

    def remove(self) -> None:
        """Unbind, then detach el from its parent."""
        self.unbind_view()
        detach = getattr(self.el, "remove", None)
        if callable(detach):
            detach()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._bindings)} bindings)"
