"""In-cluster operations: setup, upgrade and node membership changes.

Every successful operation ends by saving the live workspace into the current
context so the store never lags behind the cluster.
"""

from __future__ import annotations

import logging
import sys

import click

from .. import snapshot
from ..app_context import AppContext
from ..app_context import pass_app
from ..console import console
from ..engine import SETUP_PLAYBOOK
from ..engine import UPGRADE_PLAYBOOK
from ..errors import EzctlError
from ..errors import InventoryError
from ..inventory import ROLE_GROUPS
from ..inventory import Inventory
from ..inventory import validate_address
from ..ui.error_display import display_engine_failure
from ..ui.error_display import exit_with_error
from ..ui.error_display import warn

logger = logging.getLogger(__name__)

ADD_PLAYBOOKS = {
    "node": "22.addnode.yml",
    "master": "23.addmaster.yml",
    "etcd": "21.addetcd.yml",
}

DEL_PLAYBOOKS = {
    "node": "32.delnode.yml",
    "master": "33.delmaster.yml",
    "etcd": "31.deletcd.yml",
}


def _require_inventory(app: AppContext) -> Inventory:
    inventory = app.store.paths.inventory
    if not inventory.is_file():
        raise InventoryError(f"Inventory not found: {inventory}")
    return Inventory(inventory)


def _save_after(app: AppContext) -> None:
    try:
        saved = snapshot.save_current(app.store)
    except EzctlError as exc:
        warn(f"Live workspace not saved: {exc}")
        return
    if saved is None:
        warn("No current context; live workspace not saved")
    else:
        console.print(f"[dim]Saved live workspace into '{saved}'[/dim]")


def _run_confirmed(app: AppContext, playbook: str, question: str, action: str) -> None:
    try:
        inventory = _require_inventory(app)
    except EzctlError as exc:
        exit_with_error(exc)

    if not app.confirm(question):
        console.print("[yellow]Aborted.[/yellow]")
        sys.exit(1)

    result = app.engine.run(playbook, inventory.path)
    if not result.ok:
        display_engine_failure(action, result)
        sys.exit(1)
    console.print(f"[green]✓[/green] {action} succeeded")
    _save_after(app)


@click.command("setup")
@pass_app
def setup_cmd(app: AppContext):
    """Install the cluster described by the live inventory."""
    current = app.store.read_current() or "(none)"
    _run_confirmed(app, SETUP_PLAYBOOK, f"Set up cluster for context '{current}'?", "Setup")


@click.command("upgrade")
@pass_app
def upgrade_cmd(app: AppContext):
    """Upgrade the cluster described by the live inventory."""
    current = app.store.read_current() or "(none)"
    _run_confirmed(app, UPGRADE_PLAYBOOK, f"Upgrade cluster for context '{current}'?", "Upgrade")


def _add_member(app: AppContext, role: str, address: str, host_vars: str) -> None:
    group = ROLE_GROUPS[role]
    try:
        address = validate_address(address)
        inventory = _require_inventory(app)
        original = inventory.read()
        inventory.add_host(group, address, host_vars)
    except EzctlError as exc:
        exit_with_error(exc)

    result = app.engine.run(ADD_PLAYBOOKS[role], inventory.path, {"NODE_TO_ADD": address})
    if not result.ok:
        inventory.write(original)
        logger.info(f"Rolled back inventory edit for {address} in [{group}]")
        display_engine_failure(f"Adding {role} {address}", result)
        sys.exit(1)

    console.print(f"[green]✓[/green] Added {role} {address}")
    _save_after(app)


def _del_member(app: AppContext, role: str, address: str) -> None:
    group = ROLE_GROUPS[role]
    try:
        address = validate_address(address)
        inventory = _require_inventory(app)
        if address not in inventory.hosts(group):
            raise InventoryError(f"{address} is not in [{group}]")
    except EzctlError as exc:
        exit_with_error(exc)

    result = app.engine.run(DEL_PLAYBOOKS[role], inventory.path, {"NODE_TO_DEL": address})
    if not result.ok:
        display_engine_failure(f"Removing {role} {address}", result)
        sys.exit(1)

    inventory.remove_host(group, address)
    console.print(f"[green]✓[/green] Removed {role} {address}")
    _save_after(app)


def _make_add_command(role: str) -> click.Command:
    @click.command(f"add-{role}", help=f"Add a {role} host to the cluster and the inventory.")
    @click.argument("address")
    @click.argument("host_vars", nargs=-1)
    @pass_app
    def command(app: AppContext, address: str, host_vars: tuple[str, ...]):
        _add_member(app, role, address, " ".join(host_vars))

    return command


def _make_del_command(role: str) -> click.Command:
    @click.command(f"del-{role}", help=f"Remove a {role} host from the cluster and the inventory.")
    @click.argument("address")
    @pass_app
    def command(app: AppContext, address: str):
        _del_member(app, role, address)

    return command


add_node_cmd = _make_add_command("node")
add_master_cmd = _make_add_command("master")
add_etcd_cmd = _make_add_command("etcd")
del_node_cmd = _make_del_command("node")
del_master_cmd = _make_del_command("master")
del_etcd_cmd = _make_del_command("etcd")

NODE_COMMANDS = [add_node_cmd, add_master_cmd, add_etcd_cmd, del_node_cmd, del_master_cmd, del_etcd_cmd]

__all__ = ["NODE_COMMANDS", "setup_cmd", "upgrade_cmd"]
