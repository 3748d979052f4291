"""Cluster engine: the playbook runner and node lister ezctl delegates to.

Philosophy: Orchestrate, don't reimplement. Provisioning, teardown and node
listing are child processes; ezctl only looks at whether they succeeded.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)

SETUP_PLAYBOOK = "90.setup.yml"
UPGRADE_PLAYBOOK = "22.upgrade.yml"
CLEAN_PLAYBOOK = "99.clean.yml"


@dataclass
class EngineResult:
    """Outcome of one engine invocation."""

    ok: bool
    returncode: int | None = None
    output: str = ""
    error: str | None = None


class ClusterEngine(Protocol):
    """What the context commands need from the automation engine."""

    def run(self, selector: str, inventory: Path, variables: Mapping[str, str] | None = None) -> EngineResult:
        """Run playbook ``selector`` against ``inventory``."""
        ...

    def list_nodes(self, credentials: Path) -> EngineResult:
        """List the nodes of the cluster reachable with ``credentials``."""
        ...


class AnsibleEngine:
    """``ClusterEngine`` backed by ansible-playbook and kubectl.

    Playbook runs stream to the terminal and wait for completion unless a
    timeout is configured. Node listings are captured for display.
    """

    def __init__(
        self,
        playbooks_dir: Path,
        *,
        ansible_bin: str = "ansible-playbook",
        kubectl_bin: str = "kubectl",
        timeout: float | None = None,
        cwd: Path | None = None,
    ):
        self.playbooks_dir = playbooks_dir
        self.ansible_bin = ansible_bin
        self.kubectl_bin = kubectl_bin
        self.timeout = timeout
        self.cwd = cwd

    def playbook_command(
        self, selector: str, inventory: Path, variables: Mapping[str, str] | None = None
    ) -> list[str]:
        command = [self.ansible_bin, "-i", str(inventory)]
        for key, value in (variables or {}).items():
            command.extend(["-e", f"{key}={value}"])
        command.append(str(self.playbooks_dir / selector))
        return command

    def nodes_command(self, credentials: Path) -> list[str]:
        return [self.kubectl_bin, "--kubeconfig", str(credentials), "get", "node", "-o", "wide"]

    def run(self, selector: str, inventory: Path, variables: Mapping[str, str] | None = None) -> EngineResult:
        command = self.playbook_command(selector, inventory, variables)
        return self._execute(command, capture=False, timeout=self.timeout)

    def list_nodes(self, credentials: Path) -> EngineResult:
        return self._execute(self.nodes_command(credentials), capture=True, timeout=self.timeout)

    def _execute(self, command: Sequence[str], *, capture: bool, timeout: float | None) -> EngineResult:
        logger.info(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                list(command),
                capture_output=capture,
                text=True,
                timeout=timeout,
                cwd=self.cwd,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Timed out after {timeout} seconds: {command[0]}")
            return EngineResult(ok=False, error=f"Timeout after {timeout} seconds")
        except FileNotFoundError:
            logger.error(f"Executable not found: {command[0]}")
            return EngineResult(ok=False, error=f"{command[0]} not found")
        except OSError as exc:
            logger.error(f"Could not start {command[0]}: {format_error_message(exc)}")
            return EngineResult(ok=False, error=format_error_message(exc, include_type=False))

        if result.returncode == 0:
            return EngineResult(ok=True, returncode=0, output=result.stdout or "")

        error_msg = (result.stderr or "").strip() or f"exited with status {result.returncode}"
        logger.error(f"{command[0]} failed: {error_msg}")
        return EngineResult(ok=False, returncode=result.returncode, output=result.stdout or "", error=error_msg)


__all__ = [
    "CLEAN_PLAYBOOK",
    "SETUP_PLAYBOOK",
    "UPGRADE_PLAYBOOK",
    "AnsibleEngine",
    "ClusterEngine",
    "EngineResult",
]
