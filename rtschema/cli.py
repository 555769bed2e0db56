"""rtschema CLI — validate resource type schemas and inspect the registry."""

import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rtschema import __version__
from rtschema.config import EngineConfig
from rtschema.exceptions import RtSchemaError

console = Console()

_registry_option = click.option(
    "--registry", "-r", "registry_path", default=None, help="Registry YAML file (default: built-in)"
)
_namespace_option = click.option(
    "--namespace", "-n", multiple=True, help="Allowed reference namespace (repeatable)"
)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """rtschema — resource type schema validator.

    Checks resource type schemas against the restricted schema grammar,
    resolves references against the platform registry, and prints the
    canonical type model.
    """
    config = EngineConfig.from_env()
    try:
        config.set_logging(verbose=verbose)
    except RtSchemaError as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        sys.exit(2)
    ctx.obj = config


def _build_registry(ctx: click.Context, registry_path: str | None, namespace: tuple):
    config: EngineConfig = ctx.obj.with_overrides(allowed_namespaces=namespace, registry_path=registry_path)
    try:
        return config.build_registry()
    except RtSchemaError as e:
        console.print(f"[red]Registry error:[/] {escape(str(e))}")
        sys.exit(2)


def _load(manifest_path: str):
    from rtschema.manifest import load_manifest

    try:
        return load_manifest(manifest_path)
    except RtSchemaError as e:
        console.print(f"  [red]Failed to load manifest:[/] {escape(str(e))}")
        sys.exit(2)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest_path")
@_registry_option
@_namespace_option
@click.pass_context
def validate(ctx: click.Context, manifest_path: str, registry_path: str | None, namespace: tuple):
    """Validate every schema in a resource type manifest.

    Exits with status 1 when any schema is rejected.
    """
    from rtschema.schema.engine import SchemaEngine
    from rtschema.utils.source_location import lookup_source

    registry = _build_registry(ctx, registry_path, namespace)
    manifest = _load(manifest_path)
    engine = SchemaEngine(registry)

    console.print(f"\n[bold blue]rtschema[/] — Validating: {manifest_path}\n")

    rejected = 0
    for doc in manifest.documents:
        result = engine.validate(doc.schema, document_id=doc.document_id)
        if result.passed:
            console.print(f"  [green]v[/] {doc.document_id}")
            continue

        rejected += 1
        console.print(f"  [red]x[/] {doc.document_id}")
        for failure in result.failures:
            location = lookup_source(
                manifest.source_map, doc.base_path + failure.path, manifest.file_path
            )
            console.print(f"      [red]{failure.rule}[/] {escape(failure.dotted_path)}: {escape(failure.message)}")
            console.print(f"        [dim]at {escape(str(location))}[/]")

    total = len(manifest.documents)
    if rejected:
        console.print(f"\n[red]FAIL[/] {rejected} of {total} schema(s) rejected")
        sys.exit(1)
    console.print(f"\n[green]Valid![/] {total} schema(s) accepted")


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest_path")
@click.argument("type_name")
@click.argument("api_version")
@_registry_option
@_namespace_option
@click.option("--expand", is_flag=True, help="Inline referenced registry types")
@click.pass_context
def show(
    ctx: click.Context,
    manifest_path: str,
    type_name: str,
    api_version: str,
    registry_path: str | None,
    namespace: tuple,
    expand: bool,
):
    """Print the canonical type model of one schema as JSON."""
    from rtschema.schema.engine import validate_schema

    registry = _build_registry(ctx, registry_path, namespace)
    manifest = _load(manifest_path)

    doc = manifest.find(type_name, api_version)
    if doc is None:
        console.print(f"[red]No schema for {type_name}@{api_version} in {manifest_path}[/]")
        sys.exit(2)

    result = validate_schema(doc.schema, registry, document_id=doc.document_id)
    if not result.passed:
        for failure in result.failures:
            console.print(f"  [red]x[/] {escape(str(failure))}")
        sys.exit(1)

    click.echo(json.dumps(result.descriptor.to_dict(expand_references=expand), indent=2))


# ── Registry ─────────────────────────────────────────────────────────


@main.group()
def registry():
    """Inspect the reference registry."""


@registry.command(name="list")
@_registry_option
@_namespace_option
@click.pass_context
def list_entries(ctx: click.Context, registry_path: str | None, namespace: tuple):
    """List all types in the registry."""
    reg = _build_registry(ctx, registry_path, namespace)
    entries = reg.entries()

    if not entries:
        console.print("[yellow]Registry is empty.[/]")
        return

    table = Table(title=f"Registry ({len(entries)} types)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Id")
    table.add_column("Description")

    for entry in entries:
        table.add_row(entry.name, entry.resolved_type.kind.value, entry.id, entry.description[:50])

    console.print(table)
    console.print(f"Allowed namespaces: {', '.join(reg.allowed_namespaces)}")


# ── Rules ────────────────────────────────────────────────────────────


@main.command()
def rules():
    """List the validation rules."""
    from rtschema.schema.failures import RULE_DESCRIPTIONS

    table = Table(title="Validation Rules")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Description")
    for rule, description in RULE_DESCRIPTIONS.items():
        table.add_row(str(rule), description)
    console.print(table)


if __name__ == "__main__":
    main()
