import pytest

from pocketsql.commands import CommandKind, classify, normalize_db_name, normalize_identifier
from pocketsql.errors import InvalidNameError


@pytest.mark.parametrize(
    "raw, kind, argument",
    [
        ("CREATE DATABASE shop;", CommandKind.CREATE_DATABASE, "shop;"),
        ("  create database shop", CommandKind.CREATE_DATABASE, "shop"),
        ("CREATE DATABASE IF NOT EXISTS shop;", CommandKind.CREATE_DATABASE, "shop;"),
        ("DROP DATABASE shop", CommandKind.DROP_DATABASE, "shop"),
        ("use shop;", CommandKind.USE_DATABASE, "shop;"),
        ("SHOW DATABASES", CommandKind.SHOW_DATABASES, None),
        ("show databases;", CommandKind.SHOW_DATABASES, None),
        ("SHOW TABLES;", CommandKind.SHOW_TABLES, None),
        ("SHOW COLUMNS FROM users;", CommandKind.SHOW_COLUMNS, "users;"),
        ("desc users", CommandKind.SHOW_COLUMNS, "users"),
        ("DESCRIBE `users`;", CommandKind.SHOW_COLUMNS, "`users`;"),
        ("help;", CommandKind.HELP, None),
        ("EXIT;", CommandKind.EXIT, None),
        ("quit", CommandKind.EXIT, None),
        ("\\q", CommandKind.EXIT, None),
        ("SELECT 1", CommandKind.QUERY, None),
        ("  pragma table_info(t)", CommandKind.QUERY, None),
        ("explain select 1", CommandKind.QUERY, None),
        ("INSERT INTO t VALUES (1)", CommandKind.ACTION, None),
        ("CREATE TABLE t (id INT)", CommandKind.ACTION, None),
        ("SHOW TABLES FROM other", CommandKind.ACTION, None),
        ("SELECTED nothing", CommandKind.ACTION, None),
        ("DESCENDING", CommandKind.ACTION, None),
        ("", CommandKind.EMPTY, None),
        ("   \n\t", CommandKind.EMPTY, None),
    ],
)
def test_classify(raw, kind, argument):
    cmd = classify(raw)
    assert cmd.kind is kind
    assert cmd.argument == argument
    assert cmd.text == raw.strip()


def test_drop_if_exists_flag():
    cmd = classify("DROP DATABASE IF EXISTS shop;")
    assert cmd.kind is CommandKind.DROP_DATABASE
    assert cmd.if_exists
    assert cmd.argument == "shop;"
    assert not classify("DROP DATABASE shop;").if_exists


def test_custom_exit_token():
    assert classify(":q", exit_token=":q").kind is CommandKind.EXIT
    assert classify(":q").kind is CommandKind.ACTION


def test_meta_kinds():
    assert CommandKind.USE_DATABASE.is_meta
    assert CommandKind.EXIT.is_meta
    assert not CommandKind.QUERY.is_meta
    assert not CommandKind.ACTION.is_meta
    assert not CommandKind.EMPTY.is_meta


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("shop", "shop.db"),
        ("shop;", "shop.db"),
        ("'shop'", "shop.db"),
        ('"shop";', "shop.db"),
        ("`shop`", "shop.db"),
        ("shop.db", "shop.db"),
        ("SHOP.DB", "SHOP.DB"),
        ("my shop", "my shop.db"),
    ],
)
def test_normalize_db_name(raw, expected):
    assert normalize_db_name(raw) == expected


@pytest.mark.parametrize("raw", ["", ";", ".db", "''", "../evil", "a/b", "a\\b", None])
def test_normalize_db_name_rejects(raw):
    with pytest.raises(InvalidNameError) as exc:
        normalize_db_name(raw)
    assert str(exc.value) == "Invalid database name"


def test_normalize_identifier():
    assert normalize_identifier("`users`;") == "users"
    assert normalize_identifier("'order items'") == "order items"
    assert normalize_identifier(None) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "-- note\nSELECT 1;",
        "# note\nselect 1;",
        "/* a\nb */ PRAGMA table_info(t)",
        "-- one\n  -- two\nEXPLAIN SELECT 1",
    ],
)
def test_query_after_leading_comments(raw):
    assert classify(raw).kind is CommandKind.QUERY


def test_comment_only_input_is_action():
    assert classify("-- SELECT 1").kind is CommandKind.ACTION
