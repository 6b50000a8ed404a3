"""
schema.py — JSON Schema validation for formguard definition files.

Usage:
    from formguard.schema import validate_definition_file

    for issue in validate_definition_file(Path("signup.yaml")):
        print(issue)
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "form.schema.json"


@dataclass
class DefinitionIssue:
    """A single finding for a definition file."""

    file: Path
    message: str
    path: str = ""           # location within the document, e.g. "rules/age/min"
    severity: str = "error"  # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    with _SCHEMA_PATH.open() as fh:
        schema = json.load(fh)
    return Draft202012Validator(schema)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema error path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_definition(document: Any, source: Path) -> list[DefinitionIssue]:
    """Validate an already-parsed definition document."""
    return [
        DefinitionIssue(file=source, message=error.message, path=_json_path(error))
        for error in sorted(_validator().iter_errors(document), key=_json_path)
    ]


def validate_definition_file(yaml_path: Path) -> list[DefinitionIssue]:
    """
    Validate a definition YAML file against the bundled schema.

    Returns:
        A list of :class:`DefinitionIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [DefinitionIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            DefinitionIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    return validate_definition(raw, yaml_path)
