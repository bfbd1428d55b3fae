"""
ibmpkg — CLI entrypoint.

Usage:
    python -m ibmpkg.main --help
    python -m ibmpkg.main status
    python -m ibmpkg.main apply --dry-run
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from ibmpkg import __version__
from ibmpkg.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="ibmpkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ibmpkg — reconcile IBM Installation Manager packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("IBMPKG_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("IBMPKG_LOG_FILE"),
        log_file_level=os.environ.get("IBMPKG_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show which declared packages are installed."""
    from ibmpkg.core.use_cases.status import get_status

    result = get_status(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📦 Packages: {len(result.outcomes)}", fg="cyan", bold=True)
    for outcome in result.outcomes:
        spec = outcome.spec
        if outcome.failed:
            click.secho(f"   ✗ {spec.display_name}", fg="red", nl=False)
            click.echo(f"  ({outcome.error})")
        elif outcome.exists:
            click.secho(f"   ✓ {spec.display_name}", fg="green", nl=False)
            click.echo(f"  {spec.package} {spec.version} → {spec.target}")
        else:
            click.secho(f"   ○ {spec.display_name}", fg="yellow", nl=False)
            click.echo(f"  {spec.package} {spec.version} → {spec.target} (not installed)")
        for note in outcome.notes:
            click.echo(f"     ℹ️  {note}")
    click.echo()
    click.echo(f"   Installed: {result.present}/{len(result.outcomes)}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.option("--mock", is_flag=True, help="Use the mock runner (no real execution).")
@click.pass_context
def apply(ctx: click.Context, as_json: bool, dry_run: bool, mock: bool) -> None:
    """Install or remove packages until the host matches packages.yml.

    Examples:

        ibmpkg apply --dry-run

        ibmpkg --config /etc/ibmpkg/packages.yml apply
    """
    from ibmpkg.core.use_cases.reconcile import run_reconcile

    if mock:
        from ibmpkg.adapters.mock import MockRunner

        runner = MockRunner()
    else:
        from ibmpkg.adapters.shell.command import SubprocessRunner

        runner = SubprocessRunner()

    result = run_reconcile(
        config_path=ctx.obj.get("config_path"),
        runner=runner,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    click.secho(f"\n⚡ {mode_label}apply", fg="cyan", bold=True)
    click.echo()

    for outcome in result.outcomes:
        name = outcome.spec.display_name
        if outcome.failed:
            click.secho(f"   ✗ {name}", fg="red", nl=False)
            click.echo(f"  {outcome.action}")
            for line in (outcome.error or "").split("\n")[:10]:
                click.echo(f"     │ {line}")
        elif outcome.action == "none":
            click.secho(f"   ⊘ {name}", fg="white", nl=False)
            click.echo("  (in sync)")
        else:
            colour = "yellow" if outcome.status == "planned" else "green"
            click.secho(f"   ✓ {name}", fg=colour, nl=False)
            click.echo(f"  {outcome.action}")
            if dry_run or ctx.obj.get("verbose"):
                click.echo(f"     │ {outcome.command}")

    click.echo()
    status_color = "green" if result.ok else "red"
    click.secho(
        f"   Result: {result.changed} changed, {result.failed} failed",
        fg=status_color,
        bold=True,
    )
    click.echo()

    if not result.ok:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Manifest configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate packages.yml."""
    from ibmpkg.core.config.loader import ConfigError, load_manifest

    try:
        manifest = load_manifest(ctx.obj.get("config_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"valid": False, "errors": [str(e)]}, indent=2))
        else:
            click.secho("❌ Configuration errors:", fg="red", bold=True)
            click.echo(f"   • {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "valid": True,
            "packages": [s.display_name for s in manifest.packages],
        }, indent=2))
        return

    click.secho("✅ Configuration is valid", fg="green", bold=True)
    click.echo(f"   Packages: {len(manifest.packages)}")
    click.echo(f"   Data dir: {manifest.settings.data_dir}")


# ── Register sub-command groups from ibmpkg/ui/cli/ ──────────────

from ibmpkg.ui.cli.registry import registry  # noqa: E402

cli.add_command(registry)


if __name__ == "__main__":
    cli()
