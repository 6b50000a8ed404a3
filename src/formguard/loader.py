"""Load form definitions (widget tree + rule sets) from YAML.

A definition document looks like:

    form:
      children:
        - tag: label
          for: email
          text: Email
        - tag: input
          name: email
          id: email
          value: someone@example.com
        - tag: div
          data-formguard-error-for: email
    rules:
      email:
        required: true
        pattern: "^[^@]+@[^@]+$"
        messages:
          pattern: Email is invalid

Node keys other than ``tag``, ``children``, ``text``, ``value`` and
``checked`` are element attributes; ``true`` marks a boolean attribute.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from formguard.checks import CheckRegistry
from formguard.config import FormDefinitionError
from formguard.memory import MemoryElement
from formguard.types import MESSAGE_KEYS, RuleSet

_NODE_KEYS = {"tag", "children", "text", "value", "checked"}

# YAML key -> RuleSet attribute
_RULE_KEYS = {
    "required": "required",
    "type": "type",
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "min": "min",
    "max": "max",
    "minItems": "min_items",
    "maxItems": "max_items",
    "customCheck": "custom_check",
    "messages": "messages",
}

# YAML key -> (accepted types, description); bool is excluded from the numbers
_RULE_TYPES: dict[str, tuple[tuple[type, ...], str]] = {
    "required": ((bool,), "a boolean"),
    "type": ((str,), "a string"),
    "minLength": ((int,), "an integer"),
    "maxLength": ((int,), "an integer"),
    "pattern": ((str,), "a string"),
    "min": ((int, float), "a number"),
    "max": ((int, float), "a number"),
    "minItems": ((int,), "an integer"),
    "maxItems": ((int,), "an integer"),
    "customCheck": ((str,), "a string"),
}


@dataclass
class FormDefinition:
    """A parsed definition document."""

    root: MemoryElement
    rules: dict[str, RuleSet] = field(default_factory=dict)
    source: Path | None = None


def build_element(data: dict[str, Any], tag: str | None = None) -> MemoryElement:
    """Convert a node mapping (and its children) to a MemoryElement."""
    if not isinstance(data, dict):
        raise FormDefinitionError(f"Element must be a mapping, got {type(data).__name__}")

    tag = str(data.get("tag", tag or "")).lower()
    if not tag:
        raise FormDefinitionError(f"Element is missing 'tag': {data!r}")

    attrs: dict[str, str] = {}
    for key, raw in data.items():
        if key in _NODE_KEYS or raw is None or raw is False:
            continue
        attrs[str(key)] = "" if raw is True else str(raw)

    value = data.get("value")
    if value is None and tag in ("input", "textarea", "select"):
        kind = attrs.get("type", "").lower()
        value = "on" if kind in ("checkbox", "radio") else ""

    children = [build_element(child) for child in data.get("children") or []]
    return MemoryElement(
        tag=tag,
        attrs=attrs,
        children=children,
        text=str(data.get("text", "")),
        value=None if value is None else str(value),
        checked=bool(data.get("checked", False)),
    )


def _check_type(name: str, key: str, raw: Any) -> Any:
    if key not in _RULE_TYPES:
        return raw
    types, expected = _RULE_TYPES[key]
    if not isinstance(raw, types) or (isinstance(raw, bool) and bool not in types):
        raise FormDefinitionError(
            f"Rule '{key}' for '{name}' must be {expected}, got {raw!r}"
        )
    return raw


def rule_set_from_dict(name: str, data: dict[str, Any] | None) -> RuleSet:
    """Convert one YAML rules mapping to a RuleSet."""
    data = data or {}
    if not isinstance(data, dict):
        raise FormDefinitionError(f"Rules for '{name}' must be a mapping")

    unknown = sorted(set(data) - set(_RULE_KEYS))
    if unknown:
        raise FormDefinitionError(
            f"Unknown rule key(s) for '{name}': {', '.join(map(str, unknown))}"
        )

    kwargs: dict[str, Any] = {}
    for key, attr in _RULE_KEYS.items():
        if key in data and data[key] is not None:
            kwargs[attr] = _check_type(name, key, data[key])

    if "pattern" in kwargs:
        try:
            kwargs["pattern"] = re.compile(str(kwargs["pattern"]))
        except re.error as exc:
            raise FormDefinitionError(f"Invalid pattern for '{name}': {exc}") from exc

    if "custom_check" in kwargs:
        try:
            kwargs["custom_check"] = CheckRegistry.get(str(kwargs["custom_check"]))
        except ValueError as exc:
            raise FormDefinitionError(f"Field '{name}': {exc}") from exc

    messages = kwargs.get("messages", {})
    if not isinstance(messages, dict):
        raise FormDefinitionError(f"Messages for '{name}' must be a mapping")
    bad_kinds = sorted(set(messages) - MESSAGE_KEYS)
    if bad_kinds:
        raise FormDefinitionError(
            f"Unknown message kind(s) for '{name}': {', '.join(map(str, bad_kinds))}"
        )
    kwargs["messages"] = {str(k): str(v) for k, v in messages.items()}

    if "type" in kwargs:
        kwargs["type"] = str(kwargs["type"])

    return RuleSet(**kwargs)


def definition_from_dict(data: dict[str, Any], source: Path | None = None) -> FormDefinition:
    """Build a FormDefinition from an already-parsed document."""
    if not isinstance(data, dict) or "form" not in data:
        raise FormDefinitionError("Definition must be a mapping with a 'form' key")

    root = build_element(data["form"] or {}, tag="form")
    rules = {
        str(name): rule_set_from_dict(str(name), body)
        for name, body in (data.get("rules") or {}).items()
    }
    return FormDefinition(root=root, rules=rules, source=source)


def load_definition(path: Path) -> FormDefinition:
    """Load a definition YAML file.

    Raises:
        FormDefinitionError: If the file is not valid YAML or not a definition
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise FormDefinitionError(f"YAML parse error in {path}: {exc}") from exc

    return definition_from_dict(data, source=path)
