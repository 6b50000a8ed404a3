"""Rule evaluation engine.

Evaluates one field value against its rule set and returns at most one
message. Checks run in a fixed order and the first failure wins:

1. required (platform-declared OR rule-declared)
2. scalar values: minLength/maxLength, pattern, numeric coercion and bounds
3. checkbox groups: minItems/maxItems
4. custom check
"""

import math
from typing import Any

from formguard.adapter import PresentationAdapter
from formguard.types import (
    CheckContext,
    FailureKind,
    FieldRecord,
    FieldValue,
    RuleSet,
    ValidationOutcome,
    WidgetConstraints,
    WidgetKind,
)

DEFAULT_MESSAGES: dict[FailureKind, str] = {
    FailureKind.REQUIRED: 'Field "{name}" is required',
    FailureKind.MIN_LENGTH: 'Field "{name}" must be at least {bound} characters',
    FailureKind.MAX_LENGTH: 'Field "{name}" must be at most {bound} characters',
    FailureKind.PATTERN: 'Field "{name}" has an invalid format',
    FailureKind.NUMBER: 'Field "{name}" must be a number',
    FailureKind.MIN: 'Field "{name}" must not be less than {bound}',
    FailureKind.MAX: 'Field "{name}" must not be greater than {bound}',
    FailureKind.MIN_ITEMS: 'Field "{name}": select at least {bound}',
    FailureKind.MAX_ITEMS: 'Field "{name}": select at most {bound}',
    FailureKind.CUSTOM: 'Field "{name}" is invalid',
}

_EMPTY_RULES = RuleSet()


def _format_bound(bound: Any) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def is_empty(value: FieldValue) -> bool:
    """Check if a value is considered empty."""
    if value is None:
        return True
    if isinstance(value, list):
        return len(value) == 0
    return value.strip() == ""


def _to_number(text: str) -> float | None:
    """Coerce decimal text to a float.

    Accepts optional sign, digits, a decimal point and an exponent, plus
    "inf"/"infinity". Digit-group underscores are rejected, and so are hex,
    octal and binary literals. NaN is never a number.
    """
    text = text.strip()
    if "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return number


def resolve_message(
    kind: FailureKind,
    name: str,
    rules: RuleSet,
    bound: Any = None,
) -> str:
    """Return the override for ``kind`` if configured, else the default phrase."""
    override = rules.message_for(kind)
    if override:
        return override
    return DEFAULT_MESSAGES[kind].format(name=name, bound=_format_bound(bound))


def _fail(name: str, kind: FailureKind, rules: RuleSet, bound: Any = None) -> ValidationOutcome:
    return ValidationOutcome(
        name=name,
        message=resolve_message(kind, name, rules, bound),
        kind=kind,
    )


def evaluate_value(
    name: str,
    value: FieldValue,
    rules: RuleSet | None,
    constraints: WidgetConstraints | None = None,
    numeric_widget: bool = False,
    field: FieldRecord | None = None,
) -> ValidationOutcome:
    """Evaluate an already-extracted value against a rule set.

    Args:
        name: Field name, used in default messages and the check context
        value: Scalar text, or the list of checked values of a group
        rules: Attached rule set, or None for platform constraints only
        constraints: Platform-declared constraints (required OR'd across the
            group, min/max taken from the first widget)
        numeric_widget: The first widget is a numeric input
        field: The record being evaluated, handed to the custom check

    Returns:
        A ValidationOutcome carrying at most one message.
    """
    rules = rules or _EMPTY_RULES
    constraints = constraints or WidgetConstraints()
    empty = is_empty(value)

    if (constraints.required or bool(rules.required)) and empty:
        return _fail(name, FailureKind.REQUIRED, rules)

    if isinstance(value, list):
        count = len(value)
        if rules.min_items is not None and count < rules.min_items:
            return _fail(name, FailureKind.MIN_ITEMS, rules, rules.min_items)
        if rules.max_items is not None and count > rules.max_items:
            return _fail(name, FailureKind.MAX_ITEMS, rules, rules.max_items)
    elif not empty:
        # Empty optional scalars skip length, pattern and numeric checks
        text = str(value)

        if rules.min_length is not None and len(text) < rules.min_length:
            return _fail(name, FailureKind.MIN_LENGTH, rules, rules.min_length)
        if rules.max_length is not None and len(text) > rules.max_length:
            return _fail(name, FailureKind.MAX_LENGTH, rules, rules.max_length)

        pattern = rules.compiled_pattern()
        if pattern is not None and pattern.search(text) is None:
            return _fail(name, FailureKind.PATTERN, rules)

        if rules.is_numeric or numeric_widget:
            number = _to_number(text)
            if number is None:
                return _fail(name, FailureKind.NUMBER, rules)

            low = rules.min if rules.min is not None else constraints.min
            high = rules.max if rules.max is not None else constraints.max
            if low is not None and number < low:
                return _fail(name, FailureKind.MIN, rules, low)
            if high is not None and number > high:
                return _fail(name, FailureKind.MAX, rules, high)

    if rules.custom_check is not None:
        result = rules.custom_check(value, CheckContext(name=name, field=field))
        if result is False:
            return _fail(name, FailureKind.CUSTOM, rules)
        if isinstance(result, str) and result:
            # A returned message wins over messages["custom"]
            return ValidationOutcome(name=name, message=result, kind=FailureKind.CUSTOM)

    return ValidationOutcome(name=name)


class RuleEngine:
    """Reads field values through the adapter and evaluates them."""

    def __init__(self, adapter: PresentationAdapter):
        self.adapter = adapter

    def extract_value(self, record: FieldRecord) -> FieldValue:
        """Checkbox groups yield the checked values; anything else the first widget's value."""
        if self.adapter.kind_of(record.primary) == WidgetKind.CHECKBOX:
            return [
                self.adapter.value_of(widget) or ""
                for widget in record.widgets
                if self.adapter.is_checked(widget)
            ]
        return self.adapter.value_of(record.primary)

    def constraints_of(self, record: FieldRecord) -> WidgetConstraints:
        first = self.adapter.constraints_of(record.primary)
        required = first.required or any(
            self.adapter.constraints_of(widget).required for widget in record.widgets[1:]
        )
        return WidgetConstraints(required=required, min=first.min, max=first.max)

    def evaluate(self, name: str, record: FieldRecord) -> ValidationOutcome:
        value = self.extract_value(record)
        return self.evaluate_extracted(name, record, value)

    def evaluate_extracted(
        self, name: str, record: FieldRecord, value: FieldValue
    ) -> ValidationOutcome:
        return evaluate_value(
            name,
            value,
            record.rules,
            constraints=self.constraints_of(record),
            numeric_widget=self.adapter.kind_of(record.primary) == WidgetKind.NUMBER,
            field=record,
        )
