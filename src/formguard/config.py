"""Engine configuration and error types."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


class FormConfigurationError(ValueError):
    """The engine was constructed with something that is not a form container."""
    pass


class FormDefinitionError(ValueError):
    """A declarative form definition (YAML) is malformed."""
    pass


@dataclass(frozen=True)
class GuardOptions:
    """Per-session engine options.

    Passed explicitly at construction so that two sessions never share
    diagnostic settings.

    Attributes:
        suppress_warnings: Silence usage warnings (unnamed widgets, unknown
            fields, requiredness conflicts, synthesized error targets)
    """

    suppress_warnings: bool = False

    @classmethod
    def from_env(cls) -> GuardOptions:
        """Create options from environment variables.

        FORMGUARD_SUPPRESS_WARNINGS accepts 1/true/yes/on (case-insensitive).
        """
        raw = os.environ.get("FORMGUARD_SUPPRESS_WARNINGS", "")
        return cls(suppress_warnings=raw.strip().lower() in _TRUTHY)
