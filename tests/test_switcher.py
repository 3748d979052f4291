"""Tests for checkout: switching contexts on a shared live workspace."""

import pytest

from ezctl_cli import snapshot
from ezctl_cli.context_store import DEFAULT_PROFILE
from ezctl_cli.errors import CheckoutError
from ezctl_cli.errors import InvalidProfileNameError
from ezctl_cli.switcher import checkout


class TestCheckout:
    def test_uninitialized_store_checkout_new_context(self, store, workspace):
        result = checkout(store, "prod")

        assert store.list_names() == ["default", "prod"]
        assert store.read_current() == "prod"
        assert not workspace.inventory.exists()
        assert result.previous == DEFAULT_PROFILE
        assert result.created is True
        assert result.changed is True

    def test_checkout_current_context_touches_nothing(self, store, live, workspace, tmp_path, read_tree):
        checkout(store, "prod")
        live.write_inventory()
        before = read_tree(tmp_path / "kubeasz")

        result = checkout(store, "prod")

        assert result.changed is False
        assert read_tree(tmp_path / "kubeasz") == before

    def test_new_context_clones_default_defaults_without_inventory(self, store, live, workspace):
        store.ensure_initialized()
        live.write_inventory()
        live.write_credentials("default-creds\n")

        checkout(store, "staging")

        for component in ("kube-master", "kube-node", "calico"):
            stored = workspace.profile_components("staging") / component / "defaults" / "main.yml"
            default = workspace.profile_components(DEFAULT_PROFILE) / component / "defaults" / "main.yml"
            assert stored.read_bytes() == default.read_bytes()
        assert not workspace.profile_inventory("staging").exists()
        assert not workspace.profile_credentials("staging").exists()
        assert not workspace.inventory.exists()
        assert not workspace.credentials.exists()

    def test_outgoing_context_is_saved(self, store, live, workspace):
        checkout(store, "a")
        live.write_inventory("[kube_node]\n10.0.0.5\n")

        checkout(store, "b")

        assert workspace.profile_inventory("a").read_text() == "[kube_node]\n10.0.0.5\n"

    def test_switch_away_and_back_restores_workspace(self, store, live, workspace):
        checkout(store, "a")
        live.write_inventory("[kube_node]\n10.0.0.1\n")
        live.write_credentials("creds-a\n")
        live.write_default("kube-node", "MAX_PODS: 200\n")
        live.write_default("calico", "a-only\n", filename="a.yml")
        state_a = live.state()

        checkout(store, "b")
        assert live.state() != state_a
        live.write_inventory("[kube_node]\n10.9.9.9\n")
        live.write_credentials("creds-b\n")
        live.write_default("kube-node", "MAX_PODS: 50\n")

        checkout(store, "a")

        assert live.state() == state_a
        assert workspace.profile_credentials("b").read_text() == "creds-b\n"

    def test_component_added_in_one_context_stays_there(self, store, live, workspace):
        checkout(store, "a")
        checkout(store, "b")
        checkout(store, "a")
        live.write_default("newcomp", "A_ONLY: true\n")

        checkout(store, "b")
        assert not workspace.live_component_defaults("newcomp").exists()
        checkout(store, "a")
        assert (workspace.live_component_defaults("newcomp") / "main.yml").read_text() == "A_ONLY: true\n"
        checkout(store, "b")

        assert not (workspace.profile_components("b") / "newcomp").exists()
        assert (workspace.profile_components("a") / "newcomp" / "defaults" / "main.yml").exists()

    def test_invalid_name_is_rejected_before_any_change(self, store, workspace):
        with pytest.raises(InvalidProfileNameError):
            checkout(store, "../escape")
        assert not workspace.store_dir.exists()


class TestCheckoutFailure:
    def test_failed_install_rolls_back(self, store, live, workspace, monkeypatch):
        checkout(store, "a")
        live.write_inventory("[kube_node]\n10.0.0.1\n")
        live.write_credentials("creds-a\n")
        state_a = live.state()

        def broken_install(store_, name):
            live.write_default("kube-node", "half-written\n")
            raise OSError("disk full")

        monkeypatch.setattr(snapshot, "install", broken_install)

        with pytest.raises(CheckoutError) as excinfo:
            checkout(store, "b")

        assert excinfo.value.current == "a"
        assert store.read_current() == "a"
        assert live.state() == state_a
        assert not store.exists("b")
        assert not any(p.name.startswith(".staging-") for p in workspace.store_dir.iterdir())

    def test_failed_restore_still_raises_checkout_error(self, store, live, workspace, monkeypatch):
        checkout(store, "a")
        live.write_inventory()

        def broken_install(store_, name):
            raise OSError("disk full")

        def broken_restore(store_, staging):
            raise OSError("still full")

        monkeypatch.setattr(snapshot, "install", broken_install)
        monkeypatch.setattr(snapshot, "restore_live", broken_restore)

        with pytest.raises(CheckoutError) as excinfo:
            checkout(store, "b")

        error = excinfo.value
        assert str(error.__cause__) == "disk full"
        assert error.staging is not None
        assert (error.staging / "hosts").is_file()
        assert str(error.staging) in str(error)
        assert not store.exists("b")
        assert store.read_current() == "a"

    def test_save_failure_is_a_warning(self, store, live, monkeypatch):
        checkout(store, "a")

        def broken_save(store_, name):
            raise PermissionError("read-only store")

        monkeypatch.setattr(snapshot, "save", broken_save)

        result = checkout(store, "b")

        assert store.read_current() == "b"
        assert result.save_warning is not None
        assert "'a'" in result.save_warning
