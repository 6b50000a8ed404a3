"""Tests for field discovery and binding."""

import logging

import pytest

from formguard.diagnostics import (
    FALLBACK_ERROR_TARGET,
    REQUIRED_CONFLICT,
    UNKNOWN_FIELD,
    UNNAMED_WIDGET,
    Diagnostics,
)
from formguard.memory import ERROR_CLASS, MemoryAdapter, element, form
from formguard.registry import FieldRegistry
from formguard.types import RuleSet


@pytest.fixture
def adapter():
    return MemoryAdapter()


@pytest.fixture
def diagnostics():
    return Diagnostics()


def error_elements(root):
    return [node for node in root.iter() if node.get("class") == ERROR_CLASS]


class TestWidgetNames:
    def test_unnamed_widget_skipped_with_warning(self, adapter, diagnostics, caplog):
        root = form(
            element("input", id="no-name"),
            element("input", name="email"),
            element("div", data_formguard_error_for="email"),
        )

        with caplog.at_level(logging.WARNING):
            registry = FieldRegistry(root, adapter, diagnostics)

        assert registry.names() == ["email"]
        assert "no-name" not in registry
        assert diagnostics.codes() == [UNNAMED_WIDGET]
        assert "without a name" in caplog.text

    def test_empty_name_is_unnamed(self, adapter, diagnostics):
        root = form(element("input", name=""), element("span"))
        registry = FieldRegistry(root, adapter, diagnostics)
        assert len(registry) == 0
        assert diagnostics.codes() == [UNNAMED_WIDGET]

    def test_suppressed_warnings(self, adapter, caplog):
        diagnostics = Diagnostics(suppressed=True)
        root = form(element("input"), element("input", name="solo"))

        with caplog.at_level(logging.WARNING):
            FieldRegistry(root, adapter, diagnostics)

        assert diagnostics.issues == []
        assert caplog.text == ""

    def test_document_order(self, adapter):
        root = form(
            element("textarea", name="bio"),
            element("div"),
            element("select", name="country"),
            element("div"),
            element("input", name="age"),
            element("div"),
        )
        assert FieldRegistry(root, adapter).names() == ["bio", "country", "age"]


class TestLabels:
    def test_label_for_id(self, adapter):
        label = element("label", for_="email", text="Email")
        root = form(element("input", name="email", id="email"), label, element("small"))
        record = FieldRegistry(root, adapter).get("email")
        assert record.label is label

    def test_wrapping_label(self, adapter):
        widget = element("input", name="email")
        label = element("label", widget, text="Email")
        root = form(label, element("div"))
        assert FieldRegistry(root, adapter).get("email").label is label

    def test_for_label_wins_over_wrapping(self, adapter):
        explicit = element("label", for_="x", text="Explicit")
        wrapping = element("label", element("input", name="x", id="x"))
        root = form(wrapping, element("div"), explicit)
        assert FieldRegistry(root, adapter).get("x").label is explicit

    def test_no_label(self, adapter):
        root = form(element("input", name="plain"), element("div"))
        assert FieldRegistry(root, adapter).get("plain").label is None


class TestErrorTargets:
    def test_bound_error_target(self, adapter):
        bound = element("div", data_formguard_error_for="email")
        root = form(element("input", name="email"), element("span"), bound)
        assert FieldRegistry(root, adapter).get("email").error_target is bound

    def test_sibling_after_label(self, adapter):
        hint = element("small")
        root = form(element("label", element("input", name="email")), hint)
        assert FieldRegistry(root, adapter).get("email").error_target is hint

    def test_sibling_after_widget(self, adapter):
        hint = element("small")
        root = form(element("input", name="email"), hint)
        assert FieldRegistry(root, adapter).get("email").error_target is hint

    def test_fallback_created_after_widget(self, adapter, diagnostics):
        widget = element("input", name="username")
        root = form(widget)

        record = FieldRegistry(root, adapter, diagnostics).get("username")

        assert record.error_target is widget.next_sibling()
        assert record.error_target.get("class") == ERROR_CLASS
        assert record.error_target.get("aria-live") == "polite"
        assert diagnostics.codes() == [FALLBACK_ERROR_TARGET]


class TestGroups:
    def test_checkbox_group_merged(self, adapter):
        first = element("input", type="checkbox", name="skills", value="js")
        second = element("input", type="checkbox", name="skills", value="ts")
        third = element("input", type="checkbox", name="skills", value="py")
        root = form(
            element("label", first),
            element("label", second),
            element("label", third),
            element("div", data_formguard_error_for="skills"),
        )

        registry = FieldRegistry(root, adapter)

        assert len(registry) == 1
        assert registry.get("skills").widgets == [first, second, third]

    def test_first_label_and_target_win(self, adapter):
        first_label = element("label", element("input", type="radio", name="plan", value="a"))
        second_label = element("label", element("input", type="radio", name="plan", value="b"))
        tail = element("div")
        root = form(first_label, second_label, tail)

        record = FieldRegistry(root, adapter).get("plan")

        assert record.label is first_label
        # next sibling of the first label
        assert record.error_target is second_label


class TestIdempotence:
    def test_rediscovery_is_identical(self, adapter):
        root = form(
            element("input", type="checkbox", name="b", value="1"),
            element("input", type="checkbox", name="b", value="2"),
            element("div", data_formguard_error_for="b"),
            element("label", element("input", name="a")),
        )
        registry = FieldRegistry(root, adapter)
        assert len(error_elements(root)) == 1
        before = {r.name: (list(r.widgets), r.label, r.error_target) for r in registry}

        registry.discover()
        after = {r.name: (list(r.widgets), r.label, r.error_target) for r in registry}

        assert before == after
        assert len(error_elements(root)) == 1

    def test_rediscovery_keeps_rules(self, adapter):
        root = form(element("input", name="a"), element("div"))
        registry = FieldRegistry(root, adapter)
        rules = RuleSet(required=True)
        registry.attach("a", rules)

        registry.discover()

        assert registry.get("a").rules is rules


class TestAttach:
    def test_attach_sets_rules(self, adapter):
        root = form(element("input", name="email"), element("div"))
        registry = FieldRegistry(root, adapter)
        rules = RuleSet(required=True)

        record = registry.attach("email", rules)

        assert record is registry.get("email")
        assert record.rules is rules

    def test_reattach_replaces(self, adapter):
        root = form(element("input", name="email"), element("div"))
        registry = FieldRegistry(root, adapter)
        registry.attach("email", RuleSet(min_length=1))
        replacement = RuleSet(min_length=2)

        registry.attach("email", replacement)

        assert registry.get("email").rules is replacement

    def test_unknown_field_warns(self, adapter, diagnostics, caplog):
        root = form(element("input", name="email"), element("div"))
        registry = FieldRegistry(root, adapter, diagnostics)

        with caplog.at_level(logging.WARNING):
            assert registry.attach("missing", RuleSet(required=True)) is None

        assert diagnostics.codes() == [UNKNOWN_FIELD]
        assert '"missing"' in caplog.text
        assert registry.get("missing") is None

    def test_required_conflict_warns(self, adapter, diagnostics):
        root = form(element("input", name="age", required=True), element("div"))
        registry = FieldRegistry(root, adapter, diagnostics)

        registry.attach("age", RuleSet(required=False))

        assert diagnostics.codes() == [REQUIRED_CONFLICT]
        assert registry.get("age").rules.required is False

    def test_no_conflict_when_required_unset(self, adapter, diagnostics):
        root = form(element("input", name="age", required=True), element("div"))
        registry = FieldRegistry(root, adapter, diagnostics)

        registry.attach("age", RuleSet(min=3, type="number"))

        assert diagnostics.issues == []
