"""Field registry: discovery and binding of widgets to logical fields.

Discovery walks the container's widgets once, in document order, and binds
each named widget to a FieldRecord together with its label and the element
that displays its error text. Widgets sharing a name (checkbox and radio
groups) are merged into one record; the first resolved label and error
target are kept for the whole group.
"""

from typing import Any, Iterator

from formguard.adapter import PresentationAdapter
from formguard.diagnostics import (
    FALLBACK_ERROR_TARGET,
    REQUIRED_CONFLICT,
    UNKNOWN_FIELD,
    UNNAMED_WIDGET,
    Diagnostics,
)
from formguard.types import FieldRecord, RuleSet


class FieldRegistry:
    """Mapping of field name -> FieldRecord for one form container."""

    def __init__(
        self,
        container: Any,
        adapter: PresentationAdapter,
        diagnostics: Diagnostics | None = None,
    ):
        self.container = container
        self.adapter = adapter
        self.diagnostics = diagnostics or Diagnostics()
        self._fields: dict[str, FieldRecord] = {}
        self.discover()

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def discover(self) -> None:
        """(Re)build the registry from the container's widgets.

        Rule sets already attached survive for names that are still present.
        """
        previous = self._fields
        self._fields = {}

        for widget in self.adapter.widgets(self.container):
            name = self.adapter.name_of(widget)
            if not name:
                self.diagnostics.warn(
                    UNNAMED_WIDGET,
                    "widget without a name attribute is skipped (id=%s)",
                    self.adapter.id_of(widget),
                )
                continue

            existing = self._fields.get(name)
            if existing is not None:
                existing.widgets.append(widget)
                continue

            label = self._resolve_label(widget)
            error_target = self._resolve_error_target(name, widget, label)
            carried = previous.get(name)
            self._fields[name] = FieldRecord(
                name=name,
                widgets=[widget],
                label=label,
                error_target=error_target,
                rules=carried.rules if carried else None,
            )

    def _resolve_label(self, widget: Any) -> Any | None:
        widget_id = self.adapter.id_of(widget)
        if widget_id:
            label = self.adapter.label_for_id(self.container, widget_id)
            if label is not None:
                return label
        return self.adapter.wrapping_label(widget)

    def _resolve_error_target(self, name: str, widget: Any, label: Any | None) -> Any:
        target = self.adapter.bound_error_target(self.container, name)
        if target is not None:
            return target

        base = label if label is not None else widget
        target = self.adapter.next_sibling(base)
        if target is not None:
            return target

        self.diagnostics.warn(
            FALLBACK_ERROR_TARGET,
            'no error container found for field "%s", one was created',
            name,
        )
        return self.adapter.create_error_target(widget, name)

    # -------------------------------------------------------------------------
    # Lookup and mutation
    # -------------------------------------------------------------------------

    def get(self, name: str) -> FieldRecord | None:
        return self._fields.get(name)

    def names(self) -> list[str]:
        return list(self._fields.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldRecord]:
        return iter(list(self._fields.values()))

    def __len__(self) -> int:
        return len(self._fields)

    def is_platform_required(self, record: FieldRecord) -> bool:
        return any(self.adapter.constraints_of(w).required for w in record.widgets)

    def attach(self, name: str, rules: RuleSet) -> FieldRecord | None:
        """Attach (or replace) the rule set of a field.

        Unknown names are a caller mistake, reported as a warning rather than
        raised. Returns the updated record, or None when the name is unknown.
        """
        record = self._fields.get(name)
        if record is None:
            self.diagnostics.warn(
                UNKNOWN_FIELD,
                'rules attached for unknown field "%s"',
                name,
            )
            return None

        if rules.required is False and self.is_platform_required(record):
            self.diagnostics.warn(
                REQUIRED_CONFLICT,
                'required conflict for field "%s": the widget declares required, '
                "the rule set says required=False; the widget declaration wins",
                name,
            )

        record.rules = rules
        return record
