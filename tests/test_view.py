"""Tests for View: declarative bindings end to end."""

import logging

import pytest

from epoxy import Element, Model, ParseError, UnknownOperator, View, computed, register_operator, unregister_operator
from epoxy.view import Accessor


class Person(Model):
    defaults = {"first_name": "Ann", "last_name": "Lee", "admin": False}

    @computed
    def full_name(self):
        return f"{self.get('first_name')} {self.get('last_name')}"


class PersonView(View):
    bindings = {
        "input#first": "value: first_name",
        "span.name": "text: full_name",
        "div.badge": "toggle: admin, className: {admin: admin}",
    }


def _page():
    return Element("body", children=[
        Element("input", id="first"),
        Element("span", classes=["name"]),
        Element("div", classes=["badge"]),
    ])


class TestBindView:
    def test_applies_all_bindings(self):
        root = _page()
        view = PersonView(root, Person())
        view.bind_view()
        assert root.query("#first").value == "Ann"
        assert root.query(".name").text == "Ann Lee"
        assert root.query(".badge").visible is False
        assert len(view.active_bindings) == 3

    def test_full_round_trip(self):
        root = _page()
        person = Person()
        PersonView(root, person).bind_view()
        field = root.query("#first")
        field.value = "Amy"
        field.fire("change")
        assert person.get("first_name") == "Amy"
        assert root.query(".name").text == "Amy Lee"
        assert "full_name" not in person.attributes

    def test_constructor_overrides(self):
        root = _page()
        view = View(root, Person(), bindings={".name": "text: last_name"})
        view.bind_view()
        assert root.query(".name").text == "Lee"

    def test_no_model_is_noop(self):
        view = PersonView(_page())
        view.bind_view()
        assert view.active_bindings == []

    def test_rebind_replaces_bindings(self):
        root = _page()
        person = Person()
        view = PersonView(root, person)
        view.bind_view()
        count = person.listener_count()
        view.bind_view()
        assert person.listener_count() == count
        assert root.query("#first").listener_count() == 1


class TestMissingElements:
    def test_missing_selector_is_skipped(self, caplog):
        person = Person()
        before = person.listener_count()
        view = View(Element("body"), person, bindings={".nowhere": "text: full_name"})
        with caplog.at_level(logging.DEBUG, logger="epoxy.view"):
            view.bind_view()
        assert view.active_bindings == []
        assert person.listener_count() == before
        assert "binding skipped" in caplog.text


class TestErrors:
    def test_unknown_operator_names_selector(self):
        root = _page()
        view = View(root, Person(), bindings={".name": "glow: full_name"})
        with pytest.raises(UnknownOperator, match=r"\.name") as info:
            view.bind_view()
        assert info.value.selector == ".name"
        assert root.query(".name").text == ""

    def test_parse_error_names_selector(self):
        view = View(_page(), Person(), bindings={"#first": "value first_name"})
        with pytest.raises(ParseError) as info:
            view.bind_view()
        assert info.value.selector == "#first"

    def test_failure_unbinds_earlier_bindings(self):
        root = _page()
        person = Person()
        before = person.listener_count()
        view = View(root, person, bindings={
            "#first": "value: first_name",
            ".name": "text: nobody",
        })
        with pytest.raises(ParseError):
            view.bind_view()
        assert view.active_bindings == []
        assert person.listener_count() == before
        assert root.query("#first").listener_count() == 0


class TestOperators:
    def test_view_operators(self):
        class ShoutView(View):
            operators = {"shout": {"set": lambda el, v: el.set_text(str(v).upper())}}
            bindings = {".name": "shout: full_name"}

        root = _page()
        ShoutView(root, Person()).bind_view()
        assert root.query(".name").text == "ANN LEE"

    def test_registered_operator(self):
        register_operator("glow", {"set": lambda el, v: el.toggle_class("glow", bool(v))})
        try:
            root = _page()
            person = Person()
            View(root, person, bindings={".badge": "glow: admin"}).bind_view()
            person.set("admin", True)
            assert root.query(".badge").has_class("glow")
        finally:
            unregister_operator("glow")


class TestDispose:
    def test_unbind_leaves_zero_listeners(self):
        root = _page()
        person = Person()
        before = person.listener_count()
        view = PersonView(root, person)
        view.bind_view()
        # four model subscriptions, one per operator, plus the input's "change"
        assert view.listener_count() == 5
        view.unbind_view()
        assert view.listener_count() == 0
        assert person.listener_count() == before
        assert all(el.listener_count() == 0 for el in root.descendants())
        assert view.active_bindings == []

    def test_listener_count_without_bindings(self):
        view = View(Element("body"), Model(a=1), bindings={})
        view.bind_view()
        assert view.listener_count() == 0

    def test_remove_detaches_element(self):
        page = _page()
        container = page.query(".badge")
        container.append(Element("span", classes=["inner"]))
        person = Person()
        view = View(container, person, bindings={".inner": "text: first_name"})
        view.bind_view()
        view.remove()
        assert page.query(".badge") is None
        assert person.listener_count("change:first_name") == 1  # full_name only


class TestAccessor:
    def test_read_write(self):
        person = Person()
        accessor = Accessor(person, "first_name")
        assert accessor() == "Ann"
        accessor("Bea")
        assert person.get("first_name") == "Bea"

    def test_write_none(self):
        person = Person()
        Accessor(person, "first_name")(None)
        assert person.get("first_name") is None

    def test_write_mapping(self):
        person = Person()
        Accessor(person, "first_name")({"first_name": "Cy", "last_name": "Po"})
        assert person.get("full_name") == "Cy Po"
