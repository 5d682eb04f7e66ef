from pathlib import Path

from src.team_portal.team_portal.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use


def test_semicolons_inside_literals_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]


def test_line_comments_are_dropped_even_with_quotes():
    sql = "-- the employee's open entry; keep one\nCREATE TABLE a (id INT); -- trailing\nCREATE TABLE b (x VARCHAR(4) DEFAULT '--');"
    assert list(_iter_sql_statements(sql)) == [
        "CREATE TABLE a (id INT)",
        "CREATE TABLE b (x VARCHAR(4) DEFAULT '--')",
    ]


def test_escaped_quote_stays_inside_literal():
    assert list(_iter_sql_statements(r"SELECT 'it\'s; fine'")) == [r"SELECT 'it\'s; fine'"]


def test_schema_file_splits_into_create_statements():
    schema = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
    statements = list(_iter_sql_statements(_strip_create_db_and_use(schema.read_text(encoding="utf-8"))))

    assert statements
    assert all(s.upper().startswith("CREATE TABLE") for s in statements)
