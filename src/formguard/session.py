"""Validation session: discovery + evaluation + presentation for one form.

Usage:
    from formguard import GuardOptions, RuleSet, ValidationSession
    from formguard.memory import MemoryAdapter

    session = ValidationSession(container, MemoryAdapter())
    session.attach("email", RuleSet(required=True, pattern=r"@"))
    result = session.run_all()
    if not result.is_valid:
        ...
"""

import logging
from typing import Any

from formguard.adapter import PresentationAdapter
from formguard.config import FormConfigurationError, GuardOptions
from formguard.diagnostics import Diagnostics
from formguard.engine import RuleEngine, is_empty
from formguard.registry import FieldRegistry
from formguard.types import (
    FieldRecord,
    FieldState,
    FormResult,
    PresentationState,
    RuleSet,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)

_WIDGET_STATE = {
    FieldState.INVALID: PresentationState.ERROR,
    FieldState.VALID_WITH_CONTENT: PresentationState.SUCCESS,
    FieldState.VALID_EMPTY: PresentationState.NEUTRAL,
}


class ValidationSession:
    """Validates one form container and drives its error feedback.

    Construction discovers the fields once. Rule sets are attached per field
    name; attaching also subscribes to the field's change notifications so
    the field is re-validated live.
    """

    def __init__(
        self,
        container: Any,
        adapter: PresentationAdapter,
        options: GuardOptions | None = None,
    ):
        if not adapter.is_container(container):
            raise FormConfigurationError(
                f"formguard: expected a form container, got {type(container).__name__}"
            )

        self.container = container
        self.adapter = adapter
        self.options = options or GuardOptions()
        self.diagnostics = Diagnostics(suppressed=self.options.suppress_warnings)
        self.registry = FieldRegistry(container, adapter, self.diagnostics)
        self.engine = RuleEngine(adapter)
        self._states: dict[str, FieldState] = {
            name: FieldState.PRISTINE for name in self.registry.names()
        }
        self._wired: set[str] = set()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def attach(self, name: str, rules: RuleSet) -> None:
        """Attach rules to a field and enable live validation for it.

        Re-attaching replaces the rule set; listeners are only wired once.
        """
        record = self.registry.attach(name, rules)
        if record is None or name in self._wired:
            return

        for widget in record.widgets:
            self.adapter.on_change(widget, self._live_callback(name))
        self._wired.add(name)

    def attach_all(self, rules: dict[str, RuleSet]) -> None:
        for name, rule_set in rules.items():
            self.attach(name, rule_set)

    def _live_callback(self, name: str):
        def callback() -> None:
            self.run_one(name)

        return callback

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def run_all(self) -> FormResult:
        """Validate every field in registry order and update its feedback."""
        outcomes: dict[str, ValidationOutcome] = {}
        for record in self.registry:
            outcomes[record.name] = self._run(record)

        is_valid = all(outcome.valid for outcome in outcomes.values())
        logger.debug(
            "validated %d field(s), %d invalid",
            len(outcomes),
            sum(1 for outcome in outcomes.values() if not outcome.valid),
        )
        return FormResult(is_valid=is_valid, outcomes=outcomes)

    def run_one(self, name: str) -> ValidationOutcome | None:
        """Validate a single field; unknown names are a no-op returning None."""
        record = self.registry.get(name)
        if record is None:
            return None
        return self._run(record)

    def state_of(self, name: str) -> FieldState | None:
        return self._states.get(name)

    def _run(self, record: FieldRecord) -> ValidationOutcome:
        value = self.engine.extract_value(record)
        outcome = self.engine.evaluate_extracted(record.name, record, value)

        if not outcome.valid:
            state = FieldState.INVALID
        elif is_empty(value):
            state = FieldState.VALID_EMPTY
        else:
            state = FieldState.VALID_WITH_CONTENT

        self._present(record, outcome, state)
        self._states[record.name] = state
        return outcome

    def _present(self, record: FieldRecord, outcome: ValidationOutcome, state: FieldState) -> None:
        self.adapter.write_message(record.error_target, outcome.message or "")
        widget_state = _WIDGET_STATE[state]
        for widget in record.widgets:
            self.adapter.set_state(widget, widget_state)
