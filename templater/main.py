"""
Templater — CLI entrypoint.

Usage:
    templater --help
    templater list
    templater describe model
    templater generate model widget -o parent=Base
    templater config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from templater import __version__
from templater.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)

_STATUS_STYLE = {
    "created": ("+", "green"),
    "identical": ("=", "cyan"),
    "overwritten": ("✓", "yellow"),
    "merged": ("✓", "yellow"),
    "skipped": ("⊘", "yellow"),
    "conflict": ("!", "red"),
    "aborted": ("✗", "red"),
}


@click.group()
@click.version_option(version=__version__, prog_name="templater")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to templater.yml (default: search upward).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Templater — generate project files from declarative generators."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _load_manifest(ctx: click.Context):
    """Load the manifest once per process, exiting on config errors."""
    from templater.core.config.loader import load_manifest
    from templater.core.errors import ConfigError

    if "manifest" not in ctx.obj:
        try:
            ctx.obj["manifest"] = load_manifest(ctx.obj.get("config_path"))
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
    return ctx.obj["manifest"]


def _parse_options(raw_options: tuple[str, ...]) -> dict[str, str]:
    options: dict[str, str] = {}
    for raw in raw_options:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{raw}'", param_hint="--option")
        options[key.strip()] = value
    return options


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_generators(ctx: click.Context, as_json: bool) -> None:
    """List the generators declared in templater.yml."""
    manifest = _load_manifest(ctx)

    if as_json:
        click.echo(json.dumps(
            {
                name: {
                    "description": gen.description,
                    "usage": gen.usage,
                    "dependencies": gen.dependencies,
                }
                for name, gen in manifest.generators.items()
            },
            indent=2,
        ))
        return

    if not manifest.generators:
        click.secho("No generators declared.", fg="yellow")
        return

    click.secho(f"\n📦 Generators ({len(manifest.generators)}):", fg="cyan", bold=True)
    width = max(len(name) for name in manifest.generators)
    for name, gen in manifest.generators.items():
        click.echo(f"   {name:<{width}}  {gen.description}")
    click.echo()


@cli.command()
@click.argument("name")
@click.pass_context
def describe(ctx: click.Context, name: str) -> None:
    """Show the arguments, options and actions of a generator."""
    manifest = _load_manifest(ctx)
    gen = manifest.generators.get(name)
    if gen is None:
        click.secho(f"❌ Unknown generator '{name}'", fg="red", err=True)
        sys.exit(1)

    click.secho(f"\n{gen.name}", fg="cyan", bold=True)
    if gen.description:
        click.echo(f"   {gen.description}")
    click.echo(f"\n   Usage: templater generate {gen.usage}")

    if gen.arguments or gen.options:
        click.echo()
        click.secho("   Arguments:", bold=True)
        labelled = [(s.name, s) for s in gen.arguments] + [(f"--{s.name}", s) for s in gen.options]
        for label, spec in labelled:
            default = f" (default: {spec.default})" if spec.default is not None else ""
            click.echo(f"     {label:<16} {spec.arity:<9} {spec.description}{default}")

    click.echo()
    click.secho("   Actions:", bold=True)
    for action in gen.actions:
        click.echo(f"     • {action.kind:<16} {action.label}")
    click.echo()


@cli.command()
@click.argument("name")
@click.argument("args", nargs=-1)
@click.option("--option", "-o", "raw_options", multiple=True, help="Named option as KEY=VALUE.")
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False),
    default=None,
    help="Destination root (default: manifest 'destination' or cwd).",
)
@click.option("--force", is_flag=True, help="Overwrite every conflicting file.")
@click.option("--skip", is_flag=True, help="Keep every conflicting file.")
@click.option("--dry-run", is_flag=True, help="Report what would happen; write nothing.")
@click.option("--audit-log", type=click.Path(dir_okay=False), default=None, help="Append a run entry to this NDJSON ledger.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    name: str,
    args: tuple[str, ...],
    raw_options: tuple[str, ...],
    destination: str | None,
    force: bool,
    skip: bool,
    dry_run: bool,
    audit_log: str | None,
    as_json: bool,
) -> None:
    """Run a generator (and its dependencies) against the destination.

    Examples:

        templater generate model widget

        templater generate model widget name:string -o parent=Record

        templater generate model widget --dry-run
    """
    from templater.adapters.policies import AlwaysPrompt
    from templater.core.engine.manifold import Manifold
    from templater.core.errors import ArgumentError, TemplaterError
    from templater.core.models.decision import DecisionKind
    from templater.core.persistence.audit import AuditWriter
    from templater.ui.cli.prompt import ClickConflictPrompt

    if force and skip:
        raise click.UsageError("--force and --skip are mutually exclusive")
    options = _parse_options(raw_options)
    manifest = _load_manifest(ctx)

    if destination:
        root = Path(destination).resolve()
    elif manifest.destination is not None:
        root = manifest.destination
    else:
        root = Path.cwd()

    if force:
        prompt = AlwaysPrompt(DecisionKind.OVERWRITE)
    elif skip:
        prompt = AlwaysPrompt(DecisionKind.SKIP)
    else:
        prompt = ClickConflictPrompt(root)

    ledger = Path(audit_log) if audit_log else manifest.audit_log
    manifold = Manifold(
        root,
        prompt,
        dry_run=dry_run,
        audit_writer=AuditWriter(ledger) if ledger else None,
    )
    for gen_name, gen in manifest.generators.items():
        manifold.register(gen_name, gen)

    try:
        summary = manifold.invoke(name, list(args), options)
    except ArgumentError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        gen = manifold.get(name)
        if gen is not None:
            click.echo(f"   Usage: templater generate {gen.usage}", err=True)
        sys.exit(1)
    except TemplaterError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        if summary.aborted:
            _report_abort(summary, name)
            sys.exit(1)
        return

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        mode_label = "[dry-run] " if dry_run else ""
        click.secho(f"\n⚡ {mode_label}{name} → {root}", fg="cyan", bold=True)
        for receipt in summary.receipts:
            marker, color = _STATUS_STYLE[receipt.status]
            shown = _relative(Path(receipt.destination), root)
            click.secho(f"   {marker} {receipt.status:<11}", fg=color, nl=False)
            click.echo(f" {shown}")
        click.echo()

    if summary.aborted:
        _report_abort(summary, name)
        sys.exit(1)

    if not quiet:
        click.secho(
            f"   Result: {len(summary.applied)} applied, {len(summary.skipped)} skipped"
            + (f", {len(summary.conflicts)} conflict(s)" if summary.conflicts else ""),
            fg="green",
            bold=True,
        )
        click.echo()


def _report_abort(summary, name: str) -> None:
    where = summary.aborted_at.destination if summary.aborted_at else name
    click.secho(f"❌ Aborted at {where}: {summary.error}", fg="red", err=True)


def _relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


# ── Register sub-command groups from templater/ui/cli/ ──────────

from templater.ui.cli.config import config  # noqa: E402

cli.add_command(config)


if __name__ == "__main__":
    cli()
