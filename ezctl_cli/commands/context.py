"""Context management commands: checkout, current, list, save, install, destroy."""

from __future__ import annotations

import sys

import click
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .. import snapshot
from ..app_context import AppContext
from ..app_context import pass_app
from ..console import console
from ..destroyer import destroy
from ..errors import EzctlError
from ..lister import list_contexts
from ..switcher import checkout
from ..ui.error_display import display_engine_failure
from ..ui.error_display import exit_with_error
from ..ui.error_display import warn


@click.command("checkout")
@click.argument("name")
@pass_app
def checkout_cmd(app: AppContext, name: str):
    """Switch to context NAME, creating it from 'default' if it is new."""
    try:
        result = checkout(app.store, name)
    except EzctlError as exc:
        exit_with_error(exc)

    if not result.changed:
        console.print(f"[yellow]Context '{name}' is already current[/yellow]")
        return

    if result.save_warning:
        warn(result.save_warning)
    if result.created:
        console.print(f"[green]✓[/green] Created context '{name}' from 'default'")
    console.print(f"[green]✓ Switched to context '{name}'[/green]")
    if not app.store.paths.inventory.is_file():
        console.print(f"[dim]No inventory yet; create {app.store.paths.inventory} before 'ezctl setup'[/dim]")


@click.command("current")
@pass_app
def current_cmd(app: AppContext):
    """Show the current context."""
    current = app.store.read_current()
    if current is None:
        console.print("[yellow]No current context set[/yellow]")
        console.print("Set one with: [cyan]ezctl checkout <name>[/cyan]")
        sys.exit(1)
    console.print(current)


@click.command("list")
@click.option("--no-nodes", is_flag=True, help="Skip querying each cluster's nodes")
@pass_app
def list_cmd(app: AppContext, no_nodes: bool):
    """List managed contexts and the nodes of each deployed cluster."""
    listings = list_contexts(app.store, None if no_nodes else app.engine)
    if not listings:
        console.print("[yellow]No contexts found.[/yellow]")
        console.print("Create one with: [cyan]ezctl checkout <name>[/cyan]")
        return

    table = Table(title="Managed Contexts", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Inventory")
    table.add_column("Credentials")
    table.add_column("Status")
    for listing in listings:
        table.add_row(
            listing.name,
            "yes" if listing.has_inventory else "[dim]-[/dim]",
            "yes" if listing.has_credentials else "[dim]-[/dim]",
            "[bold green]current[/bold green]" if listing.current else "",
        )
    console.print(table)

    for listing in listings:
        if listing.nodes is None:
            continue
        if listing.nodes.ok:
            console.print(Panel(Text(listing.nodes.output.rstrip()), title=f"Nodes: {listing.name}", expand=False))
        else:
            display_engine_failure(f"Listing nodes of '{listing.name}'", listing.nodes)


@click.command("save")
@pass_app
def save_cmd(app: AppContext):
    """Save the live workspace into the current context."""
    try:
        saved = snapshot.save_current(app.store)
    except EzctlError as exc:
        exit_with_error(exc)
    if saved is None:
        warn("No current context; nothing saved")
        return
    console.print(f"[green]✓[/green] Saved live workspace into '{saved}'")


@click.command("install")
@click.argument("name")
@pass_app
def install_cmd(app: AppContext, name: str):
    """Overwrite the live workspace with context NAME's snapshot.

    This does not move the current-context pointer; use 'checkout' to switch.
    """
    try:
        with app.store.lock():
            snapshot.install(app.store, name)
    except EzctlError as exc:
        exit_with_error(exc)
    console.print(f"[green]✓[/green] Installed '{name}' into the live workspace")


@click.command("destroy")
@click.option("--purge", is_flag=True, help="Also delete the stored context and switch back to 'default'")
@pass_app
def destroy_cmd(app: AppContext, purge: bool):
    """Tear down the current context's cluster."""
    try:
        result = destroy(app.store, app.engine, app.confirm, purge=purge)
    except EzctlError as exc:
        exit_with_error(exc)

    if not result.confirmed:
        console.print("[yellow]Aborted.[/yellow]")
        sys.exit(1)

    if result.teardown is None:
        console.print(f"[yellow]Teardown of '{result.profile}' skipped, no inventory[/yellow]")
    elif not result.teardown.ok:
        display_engine_failure(f"Teardown of '{result.profile}'", result.teardown)
    else:
        console.print(f"[green]✓[/green] Destroyed cluster '{result.profile}'")
    if result.purged:
        console.print(f"[green]✓[/green] Purged context '{result.profile}', now on 'default'")
    if not result.ok:
        sys.exit(1)


__all__ = ["checkout_cmd", "current_cmd", "destroy_cmd", "install_cmd", "list_cmd", "save_cmd"]
