from kindergarten.database.bootstrap import (
    SCHEMA_PATH,
    SEED_PATH,
    _strip_create_db_and_use,
    _strip_line_comments,
    iter_sql_statements,
)
from kindergarten.database.connection import DBConfig


def test_split_on_semicolons():
    sql = "CREATE TABLE a(id INT);\n\nINSERT INTO a VALUES(1);  \n"

    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a(id INT)", "INSERT INTO a VALUES(1)"]


def test_quoted_semicolons_are_kept():
    sql = "INSERT INTO posts(title) VALUES('a;b');INSERT INTO posts(title) VALUES(\"c;d\")"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO posts(title) VALUES('a;b')",
        'INSERT INTO posts(title) VALUES("c;d")',
    ]


def test_escaped_quote_inside_string():
    sql = "INSERT INTO t VALUES('it\\'s; fine');SELECT 1"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES('it\\'s; fine')", "SELECT 1"]


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS other;\nUSE other;\nCREATE TABLE x(id INT);"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE x(id INT)"]


def test_line_comments_are_dropped():
    sql = "-- header; with semicolon\nSELECT 1;\n  -- trailing"

    assert list(iter_sql_statements(_strip_line_comments(sql))) == ["SELECT 1"]


def test_bundled_schema_creates_every_table():
    sql = _strip_line_comments(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8")))
    statements = list(iter_sql_statements(sql))
    created = " ".join(s for s in statements if s.upper().startswith("CREATE TABLE"))

    for table in (
        "schools",
        "users",
        "classes",
        "students",
        "parents",
        "attendance",
        "posts",
        "comments",
        "physical_development_records",
        "conversations",
        "chat_messages",
    ):
        assert f" {table}" in created


def test_bundled_seed_is_parseable():
    sql = _strip_line_comments(_strip_create_db_and_use(SEED_PATH.read_text(encoding="utf-8")))
    statements = list(iter_sql_statements(sql))

    assert statements
    assert all(s.upper().startswith("INSERT") for s in statements)


def test_db_config_defaults():
    config = DBConfig.from_dict({"host": "db", "user": "kg", "password": "pw"})

    assert config.port == 3306
    assert config.database == "kindergarten_db"
