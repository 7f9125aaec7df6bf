from attendance_engine.database.bootstrap import SCHEMA_PATH, clean_schema_sql, iter_sql_statements, to_db_config


def test_semicolons_inside_literals_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b', \"c;d\");\nSELECT 'it\\'s; fine';\n"
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b', \"c;d\")",
        "SELECT 'it\\'s; fine'",
    ]


def test_database_statements_and_comments_are_removed():
    sql = "-- header\nCREATE DATABASE foo;\nUSE foo;\nCREATE TABLE x (id INT);\n"
    assert list(iter_sql_statements(clean_schema_sql(sql))) == ["CREATE TABLE x (id INT)"]


def test_bundled_schema_creates_every_table():
    statements = list(iter_sql_statements(clean_schema_sql(SCHEMA_PATH.read_text(encoding="utf-8"))))
    created = {s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE IF NOT EXISTS")}
    assert {
        "employees",
        "attendance_settings",
        "attendance_holidays",
        "attendance_records",
        "attendance_breaks",
        "attendance_corrections",
        "attendance_audit",
        "leave_policies",
        "leave_balances",
        "leave_requests",
        "leave_accruals",
    } <= created
    assert all(s.upper().startswith(("CREATE TABLE IF NOT EXISTS", "INSERT IGNORE")) for s in statements)


def test_db_config_defaults():
    config = to_db_config({"user": "app", "port": "3307"})
    assert (config.host, config.port, config.user, config.database) == ("localhost", 3307, "app", "attendance_engine")
