"""Suppressible, non-fatal diagnostics for discovery and rule attachment."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

UNNAMED_WIDGET = "unnamed-widget"
FALLBACK_ERROR_TARGET = "fallback-error-target"
UNKNOWN_FIELD = "unknown-field"
REQUIRED_CONFLICT = "required-conflict"


@dataclass(frozen=True)
class Diagnostic:
    """A single usage warning."""

    code: str
    message: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class Diagnostics:
    """Diagnostic channel owned by one session.

    Warnings are logged through the module logger and kept in ``issues``.
    With ``suppressed`` set, nothing is logged or kept.
    """

    suppressed: bool = False
    issues: list[Diagnostic] = field(default_factory=list)

    def warn(self, code: str, message: str, *args: object) -> None:
        if self.suppressed:
            return
        text = message % args if args else message
        self.issues.append(Diagnostic(code=code, message=text))
        logger.warning("[formguard] %s", text)

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]
