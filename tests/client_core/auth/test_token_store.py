"""Tests for the two-tier credential store and the logout flag."""

import json
import threading

import pytest

from client_core.auth.storage import JsonFileStorage, MemoryStorage
from client_core.auth.token_store import (
    LOGOUT_FLAG_KEY,
    RETURN_URL_KEY,
    TOKEN_KEY,
    LogoutFlag,
    TokenStore,
)


class TestMemoryStorage:
    def test_get_set_remove(self):
        storage = MemoryStorage()
        assert storage.get("a") is None
        storage.set("a", "1")
        assert storage.get("a") == "1"
        assert "a" in storage
        storage.remove("a")
        assert storage.get("a") is None

    def test_remove_missing_key_is_noop(self):
        storage = MemoryStorage()
        storage.remove("missing")

    def test_initial_values_are_copied(self):
        initial = {"a": "1"}
        storage = MemoryStorage(initial)
        initial["a"] = "2"
        assert storage.get("a") == "1"


class TestJsonFileStorage:
    def test_missing_file_reads_empty(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "state.json")
        assert storage.get(TOKEN_KEY) is None

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        JsonFileStorage(path).set(TOKEN_KEY, "tok-1")

        assert JsonFileStorage(path).get(TOKEN_KEY) == "tok-1"
        assert json.loads(path.read_text()) == {TOKEN_KEY: "tok-1"}

    def test_remove_rewrites_file(self, tmp_path):
        path = tmp_path / "state.json"
        storage = JsonFileStorage(path)
        storage.set(TOKEN_KEY, "tok-1")
        storage.set("other", "x")
        storage.remove(TOKEN_KEY)
        assert json.loads(path.read_text()) == {"other": "x"}

    def test_corrupt_file_reads_empty_and_is_replaced(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)

        assert storage.get(TOKEN_KEY) is None
        storage.set(TOKEN_KEY, "tok-2")
        assert storage.get(TOKEN_KEY) == "tok-2"

    def test_non_object_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        assert JsonFileStorage(path).get(TOKEN_KEY) is None

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "state.json")
        storage.set(TOKEN_KEY, "tok")
        storage.remove(TOKEN_KEY)
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


class TestTokenStore:
    def test_read_empty_returns_none(self):
        assert TokenStore().read() is None

    def test_write_updates_both_tiers(self):
        durable = MemoryStorage()
        store = TokenStore(durable=durable)
        store.write("tok-1")
        assert store.read() == "tok-1"
        assert durable.get(TOKEN_KEY) == "tok-1"

    def test_read_prefers_primary_tier(self):
        durable = MemoryStorage()
        store = TokenStore(durable=durable)
        store.write("tok-primary")
        durable.set(TOKEN_KEY, "tok-stale")
        assert store.read() == "tok-primary"

    def test_read_falls_back_to_durable_tier(self):
        durable = MemoryStorage({TOKEN_KEY: "tok-durable"})
        store = TokenStore(durable=durable)
        assert store.read() == "tok-durable"

        # Primary is repopulated from the fallback
        durable.remove(TOKEN_KEY)
        assert store.read() == "tok-durable"

    def test_restart_reads_durable_file(self, tmp_path):
        path = tmp_path / "state.json"
        TokenStore(durable=JsonFileStorage(path)).write("tok-file")
        assert TokenStore(durable=JsonFileStorage(path)).read() == "tok-file"

    def test_write_rejects_empty_token(self):
        with pytest.raises(ValueError):
            TokenStore().write("")

    def test_clear_empties_tiers_and_return_url(self):
        durable = MemoryStorage()
        session = MemoryStorage()
        store = TokenStore(durable=durable, session=session)
        store.write("tok-1")
        store.remember_return_url("/admin/users?page=2")
        assert store.return_url() == "/admin/users?page=2"

        store.clear()

        assert store.read() is None
        assert durable.get(TOKEN_KEY) is None
        assert session.get(RETURN_URL_KEY) is None
        assert store.return_url() is None

    def test_concurrent_writes_leave_tiers_consistent(self):
        durable = MemoryStorage()
        store = TokenStore(durable=durable)

        def writer(n):
            for i in range(200):
                store.write(f"tok-{n}-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.read() == durable.get(TOKEN_KEY)


class TestLogoutFlag:
    def test_set_and_clear(self):
        session = MemoryStorage()
        flag = LogoutFlag(session)
        assert flag.is_set() is False

        flag.set()
        assert flag.is_set() is True
        assert session.get(LOGOUT_FLAG_KEY) == "1"

        flag.clear()
        assert flag.is_set() is False

    def test_flag_survives_token_clear(self):
        session = MemoryStorage()
        flag = LogoutFlag(session)
        store = TokenStore(session=session)
        flag.set()
        store.clear()
        assert flag.is_set() is True

    def test_flag_shared_through_session_tier(self):
        session = MemoryStorage()
        LogoutFlag(session).set()
        assert LogoutFlag(session).is_set() is True
