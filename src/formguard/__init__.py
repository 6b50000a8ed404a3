"""formguard: declarative validation for flat forms.

The engine has three parts:
- FieldRegistry: discovers a container's widgets and binds them to logical
  fields, labels and error targets
- evaluate_value / RuleEngine: ordered, short-circuiting rule evaluation
- ValidationSession: full-form and live validation with presentation feedback

Widget trees are reached only through a PresentationAdapter;
formguard.memory ships an in-memory implementation.

Usage:
    from formguard import RuleSet, ValidationSession
    from formguard.memory import MemoryAdapter, element, form

    root = form(element("input", name="age", type="number"))
    session = ValidationSession(root, MemoryAdapter())
    session.attach("age", RuleSet(type="number", min=18, max=120))
    result = session.run_all()
"""

from formguard.adapter import PresentationAdapter
from formguard.checks import CheckRegistry, UnknownCheckError, check, register_builtin_checks
from formguard.config import FormConfigurationError, FormDefinitionError, GuardOptions
from formguard.diagnostics import Diagnostic, Diagnostics
from formguard.engine import DEFAULT_MESSAGES, RuleEngine, evaluate_value, resolve_message
from formguard.loader import FormDefinition, load_definition, rule_set_from_dict
from formguard.registry import FieldRegistry
from formguard.session import ValidationSession
from formguard.types import (
    CheckContext,
    CustomCheck,
    FailureKind,
    FieldRecord,
    FieldState,
    FormResult,
    PresentationState,
    RuleSet,
    ValidationOutcome,
    WidgetConstraints,
    WidgetKind,
)

__all__ = [
    # Types
    "CheckContext",
    "CustomCheck",
    "FailureKind",
    "FieldRecord",
    "FieldState",
    "FormResult",
    "PresentationState",
    "RuleSet",
    "ValidationOutcome",
    "WidgetConstraints",
    "WidgetKind",
    # Configuration and errors
    "FormConfigurationError",
    "FormDefinitionError",
    "GuardOptions",
    "Diagnostic",
    "Diagnostics",
    # Engine
    "DEFAULT_MESSAGES",
    "RuleEngine",
    "evaluate_value",
    "resolve_message",
    # Discovery and session
    "FieldRegistry",
    "PresentationAdapter",
    "ValidationSession",
    # Checks
    "CheckRegistry",
    "UnknownCheckError",
    "check",
    "register_builtin_checks",
    # Definitions
    "FormDefinition",
    "load_definition",
    "rule_set_from_dict",
]
