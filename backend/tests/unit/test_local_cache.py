"""
Unit tests for the local active-session cache.
"""

import json

from chatapp.client.local_cache import CACHE_VERSION, LocalSessionCache

SESSION_ID = "3f2b8c1e-0d4a-4e6f-9b7a-2c1d0e9f8a7b"


def test_missing_file(tmp_path):
    assert LocalSessionCache(tmp_path / "state.json").load_active_session_id() is None


def test_save_then_load(tmp_path):
    cache = LocalSessionCache(tmp_path / "nested" / "state.json")

    cache.save_active_session_id(SESSION_ID)

    assert cache.load_active_session_id() == SESSION_ID
    stored = json.loads((tmp_path / "nested" / "state.json").read_text())
    assert stored == {"version": CACHE_VERSION, "active_session_id": SESSION_ID}


def test_corrupt_file_discarded(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")

    assert LocalSessionCache(path).load_active_session_id() is None
    assert not path.exists()


def test_unknown_version_discarded(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": 99, "active_session_id": SESSION_ID}))

    assert LocalSessionCache(path).load_active_session_id() is None
    assert not path.exists()


def test_unversioned_legacy_value_discarded(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps(SESSION_ID))

    assert LocalSessionCache(path).load_active_session_id() is None


def test_invalid_session_id_discarded(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": CACHE_VERSION, "active_session_id": "../../etc"}))

    assert LocalSessionCache(path).load_active_session_id() is None


def test_clear_is_idempotent(tmp_path):
    cache = LocalSessionCache(tmp_path / "state.json")
    cache.clear()
    cache.save_active_session_id(None)

    assert cache.load_active_session_id() is None
    cache.clear()
    cache.clear()
