"""Form CLI commands — lint and check definition files."""

import json
from pathlib import Path

import click

from formguard.checks import register_builtin_checks
from formguard.config import FormConfigurationError, FormDefinitionError, GuardOptions
from formguard.loader import FormDefinition, load_definition
from formguard.memory import MemoryAdapter
from formguard.schema import validate_definition_file
from formguard.session import ValidationSession


def _load(path: Path) -> FormDefinition:
    register_builtin_checks()
    try:
        return load_definition(path)
    except FormDefinitionError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


def _session(definition: FormDefinition, options: GuardOptions) -> ValidationSession:
    try:
        session = ValidationSession(definition.root, MemoryAdapter(), options)
    except FormConfigurationError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    session.attach_all(definition.rules)
    return session


@click.group()
def form():
    """Form definition commands."""
    pass


@form.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat discovery and attachment warnings as errors.",
)
def lint(path: Path, strict: bool):
    """Validate a form definition file and report discovery warnings."""
    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    schema_issues = validate_definition_file(path)
    for issue in schema_issues:
        click.echo(click.style(str(issue), fg="red"))
    if schema_issues:
        click.echo(
            click.style(f"\n{len(schema_issues)} schema error(s) found", fg="red", bold=True)
        )
        raise SystemExit(1)

    # ── Semantic validation: load, discover, attach ─────────────────────────
    definition = _load(path)
    session = _session(definition, GuardOptions())

    warnings = session.diagnostics.issues
    for warning in warnings:
        click.echo(click.style(f"[WARNING] {warning}", fg="yellow"))

    click.echo(f"\nDiscovered {len(session.registry)} field(s):")
    for record in session.registry:
        rules = "rules" if record.rules is not None else "no rules"
        click.echo(f"  ✓ {record.name} ({len(record.widgets)} widget(s), {rules})")

    if warnings:
        colour = "red" if strict else "yellow"
        click.echo(click.style(f"\n{len(warnings)} warning(s) found.", fg=colour))
        if strict:
            raise SystemExit(1)

    click.echo(click.style("\nDefinition is valid.", fg="green", bold=True))


@form.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--field", "field_name", default=None, help="Validate a single field.")
@click.option("--quiet", is_flag=True, default=False, help="Suppress usage warnings.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def check(path: Path, field_name: str | None, quiet: bool, as_json: bool):
    """Validate the values stored in a form definition against its rules."""
    definition = _load(path)
    options = GuardOptions(suppress_warnings=True) if quiet else GuardOptions.from_env()
    session = _session(definition, options)

    if field_name is not None:
        outcome = session.run_one(field_name)
        if outcome is None:
            click.echo(click.style(f"Error: no field named '{field_name}'", fg="red"), err=True)
            raise SystemExit(1)
        outcomes = {field_name: outcome}
    else:
        outcomes = session.run_all().outcomes

    is_valid = all(outcome.valid for outcome in outcomes.values())

    if as_json:
        errors = {name: outcome.message for name, outcome in outcomes.items()}
        click.echo(json.dumps({"isValid": is_valid, "errors": errors}, indent=2))
    else:
        for name, outcome in outcomes.items():
            if outcome.valid:
                click.echo(click.style(f"  ✓ {name}", fg="green"))
            else:
                click.echo(click.style(f"  ✗ {name}: {outcome.message}", fg="red"))

        invalid = sum(1 for outcome in outcomes.values() if not outcome.valid)
        if is_valid:
            click.echo(click.style("\nForm is valid.", fg="green", bold=True))
        else:
            click.echo(
                click.style(f"\nForm is invalid: {invalid} field(s) failed.", fg="red", bold=True)
            )

    if not is_valid:
        raise SystemExit(1)
