"""Tests for settings loading and precedence."""

from pathlib import Path

import pytest

from ezctl_cli.errors import SettingsError
from ezctl_cli.settings import EzctlSettings
from ezctl_cli.settings import default_settings_path
from ezctl_cli.settings import load_settings


class TestLoadSettings:
    def test_defaults_when_file_missing(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml", environ={})

        assert settings == EzctlSettings()
        assert settings.base_dir == Path("/etc/kubeasz")
        assert settings.credentials_path == Path.home() / ".kube" / "config"
        assert settings.prune_snapshots is True
        assert settings.engine_timeout is None

    def test_reads_yaml_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("base_dir: /srv/kubeasz\nconfirm_timeout: 3\nprune_snapshots: false\n")

        settings = load_settings(path, environ={})

        assert settings.base_dir == Path("/srv/kubeasz")
        assert settings.confirm_timeout == 3
        assert settings.prune_snapshots is False

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("base_dir: /srv/kubeasz\n")

        settings = load_settings(
            path, environ={"EZCTL_BASE_DIR": "/opt/kubeasz", "EZCTL_KUBECONFIG": "/tmp/kubeconfig"}
        )

        assert settings.base_dir == Path("/opt/kubeasz")
        assert settings.credentials_path == Path("/tmp/kubeconfig")

    def test_explicit_base_dir_wins(self, tmp_path):
        settings = load_settings(tmp_path / "x.yaml", base_dir=tmp_path, environ={"EZCTL_BASE_DIR": "/opt/kubeasz"})
        assert settings.base_dir == tmp_path

    def test_user_paths_are_expanded(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("credentials_path: ~/clusters/config\n")

        settings = load_settings(path, environ={})

        assert settings.credentials_path == Path.home() / "clusters" / "config"

    def test_settings_path_from_environment(self, tmp_path):
        assert default_settings_path() == tmp_path / "settings.yaml"

    @pytest.mark.parametrize(
        "content",
        [
            "base_dir: [unclosed\n",
            "- just\n- a list\n",
            "confirm_timeout: -1\n",
            "component_root: ../roles\n",
            "prune_snapshots: maybe\n",
        ],
    )
    def test_invalid_settings_raise(self, tmp_path, content):
        path = tmp_path / "settings.yaml"
        path.write_text(content)

        with pytest.raises(SettingsError):
            load_settings(path, environ={})


class TestDerivedPaths:
    def test_store_paths(self, tmp_path):
        settings = EzctlSettings(base_dir=tmp_path, credentials_path=tmp_path / "kubeconfig")

        paths = settings.store_paths()

        assert paths.inventory == tmp_path / "hosts"
        assert paths.pointer_file == tmp_path / ".cluster" / "current_cluster"
        assert paths.profile_credentials("prod") == tmp_path / ".cluster" / "prod" / "config"
        assert paths.credentials == tmp_path / "kubeconfig"

    def test_playbooks_dir_relative_to_base(self, tmp_path):
        assert EzctlSettings(base_dir=tmp_path).resolved_playbooks_dir() == tmp_path / "playbooks"
        assert EzctlSettings(playbooks_dir=Path("/pb")).resolved_playbooks_dir() == Path("/pb")
