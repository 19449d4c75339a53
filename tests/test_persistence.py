from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from attention_trainer import persistence
from attention_trainer.persistence import (
    DB_PATH_ENV,
    SCHEMA_VERSION,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    default_db_path,
)


def test_sqlite_store_get_set_and_overwrite(tmp_path: Path) -> None:
    store = SqliteKeyValueStore(tmp_path / "nested" / "kv.sqlite3")
    assert store.get("missing") is None

    store.set("game-settings", '{"duration": 60}')
    store.set("game-settings", '{"duration": 90}')
    assert store.get("game-settings") == '{"duration": 90}'


def test_sqlite_store_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "kv.sqlite3"
    SqliteKeyValueStore(path).set("k", "v")
    assert SqliteKeyValueStore(path).get("k") == "v"

    conn = sqlite3.connect(path)
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == SCHEMA_VERSION
        assert conn.execute("SELECT COUNT(*) FROM kv").fetchone()[0] == 1
    finally:
        conn.close()


def test_memory_store() -> None:
    store = MemoryKeyValueStore({"a": "1"})
    assert store.get("a") == "1"
    store.set("b", "2")
    assert store.get("b") == "2"
    assert store.get("c") is None


def test_default_path_honours_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "custom.sqlite3"))
    assert default_db_path() == tmp_path / "custom.sqlite3"

    monkeypatch.delenv(DB_PATH_ENV)
    assert default_db_path() == Path.home() / ".attention_trainer.sqlite3"


def test_open_db_closes_connection_when_migration_fails(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    opened: list[sqlite3.Connection] = []
    real_connect = sqlite3.connect

    def recording_connect(*args: object, **kwargs: object) -> sqlite3.Connection:
        conn = real_connect(*args, **kwargs)  # type: ignore[arg-type]
        opened.append(conn)
        return conn

    def failing_migrate(conn: sqlite3.Connection) -> None:
        raise sqlite3.DatabaseError("file is not a database")

    monkeypatch.setattr(persistence.sqlite3, "connect", recording_connect)
    monkeypatch.setattr(persistence, "_migrate", failing_migrate)

    with pytest.raises(sqlite3.DatabaseError):
        SqliteKeyValueStore(tmp_path / "kv.sqlite3").get("game-settings")

    assert len(opened) == 1
    with pytest.raises(sqlite3.ProgrammingError):
        opened[0].execute("SELECT 1")


def test_corrupt_database_file_raises_database_error(tmp_path: Path) -> None:
    path = tmp_path / "kv.sqlite3"
    path.write_bytes(b"this is not an sqlite database, just some bytes" * 20)
    with pytest.raises(sqlite3.DatabaseError):
        persistence.open_db(path)
