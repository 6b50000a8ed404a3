"""Named custom checks.

Custom checks are plain callables ``(value, CheckContext) -> bool | str``.
Registering one by name lets declarative (YAML) rule sets reference it via
``customCheck: <name>``.

Usage:
    from formguard.checks import check

    @check("evenLength")
    def even_length(value, ctx):
        return len(value or "") % 2 == 0 or "Length must be even"
"""

import re
from typing import Callable

from formguard.types import CheckContext, CustomCheck, FieldValue

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

# Phone: Flexible pattern supporting international formats
PHONE_PATTERN = re.compile(
    r"^[\+]?[(]?[0-9]{1,3}[)]?[-\s\.]?[(]?[0-9]{1,4}[)]?[-\s\.]?[0-9]{1,4}[-\s\.]?[0-9]{1,9}$"
)

# URL: Basic URL pattern
URL_PATTERN = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*$",
    re.IGNORECASE
)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE
)


class UnknownCheckError(ValueError):
    """A rule set references a custom check name nobody registered."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        available = ", ".join(known) if known else "none"
        super().__init__(f"Custom check '{name}' is not registered (available: {available})")


class CheckRegistry:
    """Name -> custom check lookup used by declarative rule sets.

    A name is bound once: registering the same callable again is a no-op,
    binding a different callable needs ``replace=True``.

    Example:
        CheckRegistry.register("postcode", postcode_check)
        rules = RuleSet(custom_check=CheckRegistry.get("postcode"))
    """

    _checks: dict[str, CustomCheck] = {}

    @classmethod
    def register(cls, name: str, fn: CustomCheck, replace: bool = False) -> None:
        """Bind ``name`` to a check callable.

        Raises:
            TypeError: If ``fn`` is not callable
            ValueError: If ``name`` is bound to another check and not ``replace``
        """
        if not callable(fn):
            raise TypeError(f"Custom check '{name}' must be callable, got {type(fn).__name__}")
        current = cls._checks.get(name)
        if current is not None and current is not fn and not replace:
            raise ValueError(f"Custom check '{name}' is already registered")
        cls._checks[name] = fn

    @classmethod
    def get(cls, name: str) -> CustomCheck:
        """Resolve a check by name.

        Raises:
            UnknownCheckError: If no check is registered under ``name``
        """
        try:
            return cls._checks[name]
        except KeyError:
            raise UnknownCheckError(name, cls.names()) from None

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._checks

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._checks)

    @classmethod
    def clear(cls) -> None:
        cls._checks.clear()


def check(name: str, replace: bool = False) -> Callable[[CustomCheck], CustomCheck]:
    """Register the decorated function as the custom check ``name``."""

    def decorator(fn: CustomCheck) -> CustomCheck:
        CheckRegistry.register(name, fn, replace=replace)
        return fn

    return decorator


def pattern_check(pattern: re.Pattern[str]) -> CustomCheck:
    """Build a check passing when every non-empty value matches ``pattern``.

    Empty values pass; requiredness is the job of the required rule.
    """

    def run(value: FieldValue, ctx: CheckContext) -> bool:
        values = value if isinstance(value, list) else [value or ""]
        return all(not item.strip() or pattern.match(item) is not None for item in values)

    return run


_BUILTIN_PATTERNS = {
    "email": EMAIL_PATTERN,
    "phone": PHONE_PATTERN,
    "url": URL_PATTERN,
    "uuid": UUID_PATTERN,
}


def register_builtin_checks() -> None:
    """Register the format checks shipped with formguard.

    Names the caller already bound keep their own check.
    """
    for name, pattern in _BUILTIN_PATTERNS.items():
        if not CheckRegistry.is_registered(name):
            CheckRegistry.register(name, pattern_check(pattern))
