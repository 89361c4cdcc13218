from pocketsql import Session
from pocketsql.session import NO_DATABASE_MESSAGE


def test_empty_command(session):
    res = session.process("")
    assert not res.success
    assert "Empty SQL command" in res.message
    assert not session.process("   ").success


def test_exit_without_database(session):
    res = session.process("EXIT;")
    assert res.success
    assert res.exit_requested
    assert res.message == "Bye"
    assert session.process("quit").exit_requested
    assert session.process("\\q").exit_requested


def test_exit_with_database(shop):
    assert shop.process("exit").exit_requested


def test_commands_need_open_database(session):
    for sql in ("SELECT 1;", "CREATE TABLE t (id INT);", "SHOW TABLES;", "DESC t;"):
        res = session.process(sql)
        assert not res.success
        assert res.message == "ERROR: " + NO_DATABASE_MESSAGE


def test_open_or_create_normalizes(session, tmp_path):
    assert session.open_or_create("shop")
    assert session.is_open
    assert session.current_database_name == "shop.db"
    assert (tmp_path / "shop.db").is_file()
    assert not session.open_or_create("")


def test_create_database_then_show_tables(session):
    res = session.process("CREATE DATABASE shop;")
    assert res.success
    assert res.message == "Database 'shop.db' created and opened successfully"

    res = session.process("SHOW TABLES;")
    assert res.success
    assert res.rows == []
    assert res.rows_affected == 0
    assert res.columns == ["Tables_in_shop.db"]
    assert res.message == "Found 0 table(s)"


def test_select_literal(shop):
    res = shop.process("SELECT 1 as x;")
    assert res.success
    assert res.columns == ["x"]
    assert res.rows == [["1"]]
    assert res.rows_affected == 1
    assert res.message == "Query returned 1 row(s)"
    assert res.elapsed >= 0.0


def test_mysql_table_roundtrip(shop):
    res = shop.process(
        "CREATE TABLE users ("
        "id INT AUTO_INCREMENT PRIMARY KEY, "
        "name VARCHAR(50) NOT NULL, "
        "role ENUM('admin', 'user'), "
        "age INT UNSIGNED"
        ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;"
    )
    assert res.success, res.message
    assert res.message == "Command executed successfully"

    res = shop.process("INSERT INTO users (name, role) VALUES ('ann', 'admin'), ('bob', NULL);")
    assert res.success, res.message
    assert res.rows_affected == 2

    res = shop.process("INSERT IGNORE INTO users (id, name) VALUES (1, 'dup');")
    assert res.success, res.message
    assert res.rows_affected == 0

    res = shop.process("SELECT id, name, role, age FROM users ORDER BY id;")
    assert res.rows == [["1", "ann", "admin", "NULL"], ["2", "bob", "NULL", "NULL"]]
    assert res.rows_affected == 2

    res = shop.process("TRUNCATE TABLE users;")
    assert res.success, res.message
    assert shop.process("SELECT COUNT(*) FROM users;").rows == [["0"]]


def test_text_values_are_stored_as_typed(shop):
    assert shop.process("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT);").success
    bodies = [
        "Quick delivery, delayed NOW() unsigned",
        "see PARTITION BY docs",
        "ENGINE=InnoDB # not a comment",
    ]
    for body in bodies:
        res = shop.process(f"INSERT INTO notes (body) VALUES ('{body}');")
        assert res.success, res.message
    assert shop.process("SELECT body FROM notes ORDER BY id;").rows == [[b] for b in bodies]


def test_hint_named_columns_survive(shop):
    assert shop.process("CREATE TABLE t (id INTEGER, quick INTEGER, delayed TEXT);").success
    res = shop.process("DESC t;")
    assert [r[1] for r in res.rows] == ["id", "quick", "delayed"]


def test_unsigned_auto_increment_primary_key(shop):
    for i, column in enumerate(
        (
            "id INT UNSIGNED AUTO_INCREMENT PRIMARY KEY",
            "id INT NOT NULL AUTO_INCREMENT PRIMARY KEY",
            "id INT(11) UNSIGNED NOT NULL PRIMARY KEY AUTO_INCREMENT",
        )
    ):
        res = shop.process(f"CREATE TABLE t{i} ({column}, n TEXT);")
        assert res.success, res.message
        assert shop.process(f"INSERT INTO t{i} (n) VALUES ('a'), ('b');").rows_affected == 2
        assert shop.process(f"SELECT id FROM t{i} ORDER BY id;").rows == [["1"], ["2"]]


def test_query_after_leading_comment(shop):
    for sql in ("-- note\nSELECT 1 AS x;", "# note\nSELECT 1 AS x;"):
        res = shop.process(sql)
        assert res.success, res.message
        assert res.columns == ["x"]
        assert res.rows == [["1"]]
        assert res.message == "Query returned 1 row(s)"


def test_show_tables_lists_user_tables(shop):
    shop.process("CREATE TABLE b (id INTEGER PRIMARY KEY AUTOINCREMENT);")
    shop.process("CREATE TABLE a (id INTEGER);")
    res = shop.process("show tables")
    assert res.rows == [["a"], ["b"]]
    assert res.rows_affected == 2
    assert shop.list_tables() == ["a", "b"]


def test_describe(shop):
    shop.process("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT);")
    for sql in ("DESC users;", "DESCRIBE users", "SHOW COLUMNS FROM `users`;"):
        res = shop.process(sql)
        assert res.success, res.message
        assert "name" in res.columns
        assert [r[1] for r in res.rows] == ["id", "email"]

    res = shop.process("DESC ghost;")
    assert not res.success
    assert "no such table" in res.message


def test_engine_errors_are_reported(shop):
    res = shop.process("SELECT * FROM missing;")
    assert not res.success
    assert res.message == "ERROR: no such table: missing"

    res = shop.process("CREAT TABLE t (id INT);")
    assert not res.success
    assert res.message.startswith("ERROR: ")
    assert "syntax error" in res.message

    shop.process("CREATE TABLE t (id INT);")
    res = shop.process("CREATE TABLE t (id INT);")
    assert "already exists" in res.message


def test_foreign_keys_enforced(shop):
    shop.process("CREATE TABLE parent (id INTEGER PRIMARY KEY);")
    shop.process("CREATE TABLE child (pid INTEGER REFERENCES parent(id));")
    res = shop.process("INSERT INTO child VALUES (42);")
    assert not res.success
    assert "FOREIGN KEY constraint failed" in res.message


def test_use_and_show_databases(session):
    session.process("CREATE DATABASE a;")
    session.process("CREATE DATABASE 'b';")
    res = session.process("USE a;")
    assert res.success
    assert res.message == "Switched to database 'a.db'"
    assert session.current_database_name == "a.db"

    res = session.process("SHOW DATABASES;")
    assert res.columns == ["Database"]
    assert res.rows == [["a"], ["b"]]
    assert res.message == "Found 2 database(s)"
    assert session.list_databases() == ["a", "b"]


def test_invalid_database_names(session):
    for sql in ("CREATE DATABASE ;", "USE '';", "DROP DATABASE .db;", "CREATE DATABASE ../x;"):
        res = session.process(sql)
        assert not res.success
        assert res.message == "ERROR: Invalid database name"


def test_drop_missing_database(session):
    res = session.process("DROP DATABASE ghost;")
    assert not res.success
    assert "does not exist" in res.message

    res = session.process("DROP DATABASE IF EXISTS ghost;")
    assert res.success


def test_drop_active_database(session, tmp_path):
    session.process("CREATE DATABASE shop;")
    res = session.process("DROP DATABASE shop;")
    assert res.success
    assert res.message == "Database 'shop.db' dropped successfully"
    assert not session.is_open
    assert session.current_database_name is None
    assert not (tmp_path / "shop.db").exists()


def test_help_needs_no_database(session):
    res = session.process("HELP;")
    assert res.success
    assert res.columns == ["Category", "Command", "Description"]
    assert res.rows_affected == len(res.rows) > 0


def test_lock_and_partition_are_accepted(shop):
    assert shop.process("LOCK TABLES t WRITE;").success
    assert shop.process("UNLOCK TABLES;").success
    res = shop.process("CREATE TABLE sales (id INT, y INT) PARTITION BY RANGE (y) (PARTITION p0 VALUES LESS THAN (2000));")
    assert res.success, res.message
    assert shop.list_tables() == ["sales"]


def test_meta_commands_have_no_elapsed_time(shop):
    assert shop.process("SHOW DATABASES;").elapsed == 0.0


def test_process_never_raises(session):
    res = session.process(None)
    assert not res.success
    assert res.message.startswith("ERROR: ")


def test_process_script(session):
    results = session.process_script(
        "CREATE DATABASE s; CREATE TABLE t (id INT); INSERT INTO t VALUES (1);\nSELECT * FROM t;"
    )
    assert [r.success for r in results] == [True, True, True, True]
    assert results[-1].rows == [["1"]]


def test_process_script_stops_at_exit(shop):
    results = shop.process_script("SELECT 1; EXIT; SELECT 2;")
    assert len(results) == 2
    assert results[-1].exit_requested


def test_submit_runs_in_order(shop):
    shop.process("CREATE TABLE t (n INTEGER);")
    futures = [shop.submit(f"INSERT INTO t VALUES ({i});") for i in range(50)]
    futures.append(shop.submit("SELECT COUNT(*), MAX(n) FROM t;"))
    assert all(f.result().success for f in futures)
    assert futures[-1].result().rows == [["50", "49"]]


def test_sessions_are_independent(tmp_path):
    with Session.open(tmp_path / "one") as one, Session.open(tmp_path / "two") as two:
        one.process("CREATE DATABASE a;")
        assert one.is_open
        assert not two.is_open
        assert two.list_databases() == []
    assert not one.is_open


def test_export(shop, tmp_path):
    shop.process("CREATE TABLE t (v TEXT);")
    data = shop.export_bytes()
    assert data.startswith(b"SQLite format 3\x00")
    dest = tmp_path / "out" / "shop-copy.db"
    assert shop.export_to(dest)
    assert dest.read_bytes() == data
