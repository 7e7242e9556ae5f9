"""Tests for database initialization and connection management."""
from prep_ace.db import init_db, get_connection


def test_init_db_creates_kv_table(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in cursor.fetchall()}
    assert "kv_store" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO kv_store (key, value) VALUES ('user_points', '40')")
    conn.commit()
    conn.close()
    init_db(tmp_db)  # should not raise or drop rows
    conn = get_connection(tmp_db)
    row = conn.execute("SELECT value FROM kv_store WHERE key='user_points'").fetchone()
    assert row["value"] == "40"
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "prep_ace.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "prep_ace.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO kv_store (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM kv_store WHERE key='test'").fetchone()
    assert row["key"] == "test"
    assert row["value"] == "val"
    conn.close()
