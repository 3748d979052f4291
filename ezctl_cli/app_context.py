"""Shared state handed to every command through ``click.Context.obj``."""

from __future__ import annotations

from functools import cached_property

import click

from .context_store import ContextStore
from .destroyer import Confirm
from .engine import AnsibleEngine
from .engine import ClusterEngine
from .settings import EzctlSettings
from .ui.prompt import timed_confirm


class AppContext:
    """Settings plus lazily built store, engine and confirmation prompt.

    Tests pass their own ``engine`` and ``confirm``; the CLI uses the
    ansible/kubectl engine and a bounded-wait terminal prompt.
    """

    def __init__(
        self,
        settings: EzctlSettings,
        *,
        engine: ClusterEngine | None = None,
        confirm: Confirm | None = None,
    ):
        self.settings = settings
        self._engine = engine
        self._confirm = confirm

    @cached_property
    def store(self) -> ContextStore:
        return ContextStore(self.settings.store_paths(), prune_snapshots=self.settings.prune_snapshots)

    @property
    def engine(self) -> ClusterEngine:
        if self._engine is None:
            self._engine = AnsibleEngine(
                self.settings.resolved_playbooks_dir(),
                ansible_bin=self.settings.ansible_bin,
                kubectl_bin=self.settings.kubectl_bin,
                timeout=self.settings.engine_timeout,
                cwd=self.settings.base_dir,
            )
        return self._engine

    def confirm(self, message: str) -> bool:
        if self._confirm is not None:
            return self._confirm(message)
        return timed_confirm(message, self.settings.confirm_timeout)


pass_app = click.make_pass_decorator(AppContext)
