"""Settings for the ezctl CLI.

Resolution order (most specific wins):
1. Command-line options (``--base-dir``)
2. Environment (``EZCTL_BASE_DIR``, ``EZCTL_KUBECONFIG``)
3. Settings file (``$EZCTL_SETTINGS`` or ``~/.ezctl/settings.yaml``)
4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .errors import SettingsError
from .paths import StorePaths
from .paths import default_credentials_path

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "EZCTL_SETTINGS"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "EZCTL_BASE_DIR": "base_dir",
    "EZCTL_KUBECONFIG": "credentials_path",
}


class EzctlSettings(BaseModel):
    """Effective ezctl configuration."""

    base_dir: Path = Field(default=Path("/etc/kubeasz"), description="Workspace holding hosts, roles and .cluster")
    component_root: str = Field(default="roles", description="Directory under base_dir holding components")
    credentials_path: Path = Field(
        default_factory=default_credentials_path, description="Live cluster credentials (kubeconfig)"
    )
    playbooks_dir: Path = Field(default=Path("playbooks"), description="Playbook directory, relative to base_dir")
    ansible_bin: str = Field(default="ansible-playbook", description="Playbook runner executable")
    kubectl_bin: str = Field(default="kubectl", description="kubectl executable used to list nodes")
    confirm_timeout: float = Field(default=10.0, gt=0, description="Seconds to wait for destructive confirmations")
    engine_timeout: float | None = Field(default=None, gt=0, description="Playbook timeout; unset waits forever")
    prune_snapshots: bool = Field(default=True, description="Mirror component defaults exactly on save/install")

    @field_validator("base_dir", "credentials_path", "playbooks_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("component_root")
    @classmethod
    def _plain_directory_name(cls, value: str) -> str:
        if not value or "/" in value or value in (".", ".."):
            raise ValueError(f"component_root must be a plain directory name, got {value!r}")
        return value

    def store_paths(self) -> StorePaths:
        return StorePaths(
            base_dir=self.base_dir,
            credentials=self.credentials_path,
            component_root=self.component_root,
        )

    def resolved_playbooks_dir(self) -> Path:
        if self.playbooks_dir.is_absolute():
            return self.playbooks_dir
        return self.base_dir / self.playbooks_dir


def default_settings_path() -> Path:
    """Settings file location, honoring ``$EZCTL_SETTINGS``."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ezctl" / "settings.yaml"


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise SettingsError(path, str(exc)) from exc
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise SettingsError(path, "top level must be a mapping")
    return content


def load_settings(
    path: Path | None = None,
    *,
    base_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> EzctlSettings:
    """Load settings from file, environment and explicit overrides.

    Args:
        path: Settings file (defaults to ``default_settings_path()``)
        base_dir: Explicit workspace override (highest precedence)
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        SettingsError: If the file is malformed or a value fails validation
    """
    path = path or default_settings_path()
    environ = os.environ if environ is None else environ

    data = _read_settings_file(path)
    for env_var, field_name in ENV_OVERRIDES.items():
        if environ.get(env_var):
            data[field_name] = environ[env_var]
    if base_dir is not None:
        data["base_dir"] = base_dir

    try:
        settings = EzctlSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(path, str(exc)) from exc

    logger.debug(f"Loaded settings from {path}: base_dir={settings.base_dir}")
    return settings


__all__ = ["EzctlSettings", "default_settings_path", "load_settings"]
