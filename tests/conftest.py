"""Shared fixtures for ezctl tests."""

from pathlib import Path

import pytest

from ezctl_cli.context_store import ContextStore
from ezctl_cli.engine import EngineResult
from ezctl_cli.paths import StorePaths

SAMPLE_INVENTORY = """\
[etcd]
192.168.1.1

[kube_master]
192.168.1.1

[kube_node]
192.168.1.2
192.168.1.3

[all:vars]
CLUSTER_NETWORK="calico"
"""

COMPONENT_DEFAULTS = {
    "kube-master": "SECURE_PORT: 6443\n",
    "kube-node": "MAX_PODS: 110\n",
    "calico": "CALICO_IPV4POOL_IPIP: Always\n",
}


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep logs, settings and ~/.kube/config of the test run inside tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("EZCTL_LOG_PATH", str(tmp_path / "logs" / "ezctl.log.jsonl"))
    monkeypatch.setenv("EZCTL_SETTINGS", str(tmp_path / "settings.yaml"))
    monkeypatch.delenv("EZCTL_BASE_DIR", raising=False)
    monkeypatch.delenv("EZCTL_KUBECONFIG", raising=False)


class FakeEngine:
    """In-memory ClusterEngine recording every call."""

    def __init__(self):
        self.runs: list[tuple[str, Path, dict[str, str]]] = []
        self.node_queries: list[Path] = []
        self.run_results: dict[str, EngineResult] = {}
        self.node_results: dict[str, EngineResult] = {}

    def run(self, selector, inventory, variables=None):
        self.runs.append((selector, Path(inventory), dict(variables or {})))
        return self.run_results.get(selector, EngineResult(ok=True, returncode=0))

    def list_nodes(self, credentials):
        credentials = Path(credentials)
        self.node_queries.append(credentials)
        profile = credentials.parent.name
        return self.node_results.get(profile, EngineResult(ok=True, returncode=0, output=f"node-of-{profile}\n"))

    @property
    def selectors(self) -> list[str]:
        return [selector for selector, _, _ in self.runs]


class LiveWorkspace:
    """Helpers to read and write the live files of a workspace."""

    def __init__(self, paths: StorePaths):
        self.paths = paths

    def write_inventory(self, content: str = SAMPLE_INVENTORY) -> None:
        self.paths.inventory.write_text(content)

    def write_credentials(self, content: str) -> None:
        self.paths.credentials.parent.mkdir(parents=True, exist_ok=True)
        self.paths.credentials.write_text(content)

    def write_default(self, component: str, content: str, filename: str = "main.yml") -> None:
        target = self.paths.live_component_defaults(component) / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def state(self) -> dict[str, bytes | None]:
        """Everything a context snapshot covers, keyed by a readable label."""
        result: dict[str, bytes | None] = {
            "hosts": self.paths.inventory.read_bytes() if self.paths.inventory.is_file() else None,
            "config": self.paths.credentials.read_bytes() if self.paths.credentials.is_file() else None,
        }
        root = self.paths.live_components
        for path in sorted(root.rglob("*")):
            if path.is_file():
                result[str(path.relative_to(root))] = path.read_bytes()
        return result


def tree_state(root: Path) -> dict[str, tuple[bytes, int]]:
    """Contents and mtimes of every file under ``root``."""
    return {
        str(path.relative_to(root)): (path.read_bytes(), path.stat().st_mtime_ns)
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def workspace(tmp_path) -> StorePaths:
    base = tmp_path / "kubeasz"
    for component, content in COMPONENT_DEFAULTS.items():
        defaults = base / "roles" / component / "defaults"
        defaults.mkdir(parents=True)
        (defaults / "main.yml").write_text(content)
    # Components without a defaults directory are not snapshotted
    (base / "roles" / "prepare" / "tasks").mkdir(parents=True)
    return StorePaths(base_dir=base, credentials=tmp_path / "home" / ".kube" / "config")


@pytest.fixture
def store(workspace) -> ContextStore:
    return ContextStore(workspace)


@pytest.fixture
def live(workspace) -> LiveWorkspace:
    return LiveWorkspace(workspace)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def read_tree():
    return tree_state


@pytest.fixture
def unrunnable_binary(tmp_path) -> Path:
    """A file that exists but cannot be executed."""
    path = tmp_path / "bin" / "not-executable"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o644)
    return path
