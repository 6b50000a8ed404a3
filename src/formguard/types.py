"""Core types for the formguard validation engine.

This module defines the data model shared by discovery, evaluation and the
validation session:
- RuleSet: declarative rules attached to one logical field
- FieldRecord: a logical field bound to its widgets, label and error target
- ValidationOutcome / FormResult: per-field and whole-form results
- FieldState / PresentationState: presentation feedback states
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union


class FailureKind(Enum):
    """Which check produced a validation failure.

    The value doubles as the key into ``RuleSet.messages``.
    """

    REQUIRED = "required"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    NUMBER = "number"
    MIN = "min"
    MAX = "max"
    MIN_ITEMS = "minItems"
    MAX_ITEMS = "maxItems"
    CUSTOM = "custom"


MESSAGE_KEYS = frozenset(kind.value for kind in FailureKind)


class WidgetKind(Enum):
    """Kind tag of a single input widget."""

    TEXT = "text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    OTHER = "other"


class FieldState(Enum):
    """Presentation state of a logical field.

    PRISTINE: never evaluated
    INVALID: last outcome was an error
    VALID_WITH_CONTENT: last outcome passed and the value is non-empty
    VALID_EMPTY: last outcome passed but the value is empty
    """

    PRISTINE = "pristine"
    INVALID = "invalid"
    VALID_WITH_CONTENT = "valid-with-content"
    VALID_EMPTY = "valid-empty"


class PresentationState(Enum):
    """Styling written to a field's widgets."""

    ERROR = "error"
    SUCCESS = "success"
    NEUTRAL = "neutral"


# Extracted field value: scalar text, or the checked values of a checkbox group
FieldValue = Union[str, None, list[str]]


@dataclass(frozen=True)
class WidgetConstraints:
    """Constraints declared on a widget by the platform itself.

    Attributes:
        required: The widget carries a required flag
        min: Declared numeric lower bound, None when absent or non-numeric
        max: Declared numeric upper bound, None when absent or non-numeric
    """

    required: bool = False
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class CheckContext:
    """Context passed to a custom check alongside the extracted value."""

    name: str
    field: "FieldRecord | None" = None


# Custom check signature: (value, context) -> True | False | message
CustomCheck = Callable[[FieldValue, CheckContext], Union[bool, str, None]]


@dataclass
class RuleSet:
    """Declarative validation rules for one field.

    Attributes:
        required: OR'd with any platform-declared requiredness; None means unset
        type: Type hint; "number" enables numeric coercion and bounds
        min_length / max_length: Bounds on the scalar string length
        pattern: Regex searched in the scalar value; source strings are
            compiled on construction and raise re.error when malformed
        min / max: Numeric bounds, falling back to platform-declared bounds
        min_items / max_items: Bounds on the number of checked values
        custom_check: Caller-supplied check run after every other check passed
        messages: Failure kind value -> override message
    """

    required: bool | None = None
    type: str = "string"
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | str | None = None
    min: float | None = None
    max: float | None = None
    min_items: int | None = None
    max_items: int | None = None
    custom_check: CustomCheck | None = None
    messages: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Compile once here so a malformed regex fails at construction
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)

    @property
    def is_numeric(self) -> bool:
        return self.type == "number"

    def compiled_pattern(self) -> re.Pattern[str] | None:
        return self.pattern

    def message_for(self, kind: FailureKind) -> str | None:
        """Return the configured override for a failure kind, if any."""
        return self.messages.get(kind.value) or None


@dataclass
class FieldRecord:
    """A logical field discovered in a form container.

    Attributes:
        name: Unique field name (the merge key)
        widgets: Bound widgets in document order; never empty
        label: First resolved label element, or None
        error_target: Element that displays this field's error text
        rules: Attached rule set, None until the caller attaches one
    """

    name: str
    widgets: list[Any]
    error_target: Any
    label: Any = None
    rules: RuleSet | None = None

    @property
    def primary(self) -> Any:
        return self.widgets[0]


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of evaluating one field: valid, or exactly one message."""

    name: str
    message: str | None = None
    kind: FailureKind | None = None

    @property
    def valid(self) -> bool:
        return self.message is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "message": self.message,
            "kind": self.kind.value if self.kind else None,
        }


@dataclass
class FormResult:
    """Result of validating a whole form.

    Attributes:
        is_valid: True iff every field passed
        outcomes: Field name -> outcome, in registry order
    """

    is_valid: bool
    outcomes: dict[str, ValidationOutcome] = field(default_factory=dict)

    @property
    def errors(self) -> dict[str, str | None]:
        return {name: outcome.message for name, outcome in self.outcomes.items()}

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": self.errors}
