"""
CLI commands for the installation registry.

Thin wrappers over ``ibmpkg.core.use_cases.status``.
"""

from __future__ import annotations

import json
import sys

import click


def _settings(ctx: click.Context):
    """Manifest settings when a manifest is available, defaults otherwise."""
    from ibmpkg.core.config.loader import ConfigError, load_manifest
    from ibmpkg.core.models.manifest import Settings

    try:
        return load_manifest(ctx.obj.get("config_path")).settings
    except ConfigError:
        return Settings()


@click.group()
def registry() -> None:
    """Registry — list what Installation Manager has installed."""


@registry.command("list")
@click.option("--user", "-u", default="root", help="Acting user (default: root).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, user: str, as_json: bool) -> None:
    """List installed offerings and fixes."""
    from ibmpkg.core.use_cases.status import list_inventory

    result = list_inventory(user=user, settings=_settings(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not result.packages:
        click.secho(f"⚠️  No packages recorded in {result.registry}", fg="yellow")
        return

    click.secho(f"📦 Installed ({len(result.packages)}, {result.registry}):", fg="cyan", bold=True)
    current = None
    for p in result.packages:
        if p.installation_path != current:
            current = p.installation_path
            click.secho(f"   {current}", bold=True)
        click.echo(f"     {p.package_id:<40} {p.version}")
    click.echo()


@registry.command("path")
@click.option("--user", "-u", default="root", help="Acting user (default: root).")
@click.pass_context
def path_cmd(ctx: click.Context, user: str) -> None:
    """Print the registry path used for a user."""
    from ibmpkg.core.context import InstallContext
    from ibmpkg.core.errors import IbmPkgError
    from ibmpkg.core.services.imcl.processes import detect_os_family

    try:
        context = InstallContext.for_user(user, _settings(ctx), detect_os_family())
    except IbmPkgError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    click.echo(str(context.registry_path))
