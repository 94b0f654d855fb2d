"""Tests for the account registry and its YAML store."""

from __future__ import annotations

import threading

import pytest
import yaml

from cloudbees_publisher.accounts import AccountRegistry, AccountStore, AccountStoreError
from cloudbees_publisher.models import Account


def _accounts(*names: str) -> list[Account]:
    return [Account(name=n, api_key=f"{n}-key", secret_key=f"{n}-secret") for n in names]


def test_empty_registry_never_resolves():
    registry = AccountRegistry()
    assert registry.lookup(None) is None
    assert registry.lookup("acme") is None
    assert registry.lookup("") is None


def test_lookup_without_name_returns_first_account():
    accounts = _accounts("first", "second")
    registry = AccountRegistry(accounts)
    assert registry.lookup(None) == registry.all()[0] == accounts[0]


def test_lookup_by_name_is_exact_and_case_sensitive():
    registry = AccountRegistry(_accounts("acme", "other"))
    assert registry.lookup("other").name == "other"
    assert registry.lookup("ACME") is None
    assert registry.lookup("acm") is None


def test_lookup_with_duplicate_names_returns_first_in_order():
    first = Account(name="dup", api_key="k1", secret_key="s1")
    second = Account(name="dup", api_key="k2", secret_key="s2")
    registry = AccountRegistry([first, second])
    assert registry.lookup("dup") is first


def test_add_appends_and_replace_all_substitutes():
    registry = AccountRegistry(_accounts("a"))
    registry.add(_accounts("b")[0])
    assert registry.names() == ["a", "b"]

    registry.replace_all(_accounts("x", "y", "z"))
    assert registry.names() == ["x", "y", "z"]
    assert len(registry) == 3


def test_all_is_a_snapshot():
    registry = AccountRegistry(_accounts("a"))
    snapshot = registry.all()
    registry.replace_all(_accounts("b"))
    assert [a.name for a in snapshot] == ["a"]


def test_concurrent_replace_never_exposes_partial_list():
    old = tuple(_accounts(*[f"old{i}" for i in range(50)]))
    new = tuple(_accounts(*[f"new{i}" for i in range(80)]))
    registry = AccountRegistry(old)
    stop = threading.Event()
    torn: list[tuple] = []

    def reader():
        while not stop.is_set():
            seen = registry.all()
            if seen != old and seen != new:
                torn.append(seen)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    for i in range(500):
        registry.replace_all(new if i % 2 == 0 else old)
    stop.set()
    for t in readers:
        t.join()

    assert torn == []


def test_store_round_trip(tmp_path):
    path = tmp_path / "accounts.yaml"
    store = AccountStore(str(path))
    store.save(_accounts("acme", "demo"))

    data = yaml.safe_load(path.read_text())
    assert data["accounts"][0] == {"name": "acme", "apiKey": "acme-key", "secretKey": "acme-secret"}
    assert [a.name for a in store.load()] == ["acme", "demo"]


def test_store_missing_file_is_empty(tmp_path):
    assert AccountStore(str(tmp_path / "missing.yaml")).load() == []


def test_store_rejects_malformed_file(tmp_path):
    path = tmp_path / "accounts.yaml"
    path.write_text("accounts: not-a-list\n")
    with pytest.raises(AccountStoreError):
        AccountStore(str(path)).load()


def test_configure_replaces_and_persists(tmp_path):
    store = AccountStore(str(tmp_path / "accounts.yaml"))
    registry = AccountRegistry.from_store(store)
    assert len(registry) == 0

    registry.configure(_accounts("acme"))

    reloaded = AccountRegistry.from_store(store)
    assert reloaded.names() == ["acme"]
    assert reloaded.lookup(None).secret_key == "acme-secret"


def test_account_repr_hides_keys():
    account = Account(name="acme", api_key="visible?", secret_key="hush")
    assert "hush" not in repr(account)
    assert "visible?" not in repr(account)


def test_configure_saves_the_accounts_it_installed(tmp_path):
    saved = []

    class RecordingStore(AccountStore):
        def save(self, accounts):
            saved.append(list(accounts))

    registry = AccountRegistry(store=RecordingStore(str(tmp_path / "accounts.yaml")))
    original_replace_all = registry.replace_all

    def replace_then_add(accounts):
        original_replace_all(accounts)
        # Another writer lands between the swap and the save
        registry.add(_accounts("late")[0])

    registry.replace_all = replace_then_add
    registry.configure(_accounts("acme", "demo"))

    assert [[a.name for a in batch] for batch in saved] == [["acme", "demo"]]


def test_failed_save_leaves_no_temp_file(tmp_path, monkeypatch):
    path = tmp_path / "accounts.yaml"

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("cloudbees_publisher.accounts.os.replace", failing_replace)

    with pytest.raises(AccountStoreError) as excinfo:
        AccountStore(str(path)).save(_accounts("acme"))

    assert "disk full" in str(excinfo.value)
    assert not (tmp_path / "accounts.yaml.tmp").exists()
    assert not path.exists()
