from __future__ import annotations

from typing import List, Tuple

import pytest

from sqlcatcher.catalog import Exceptions, FakeResponse, ResponseCatalog
from sqlcatcher.connection import Connection, connect
from sqlcatcher.errors import BadConnectionError, InterfaceError, StatementClosedError, UnimplementedCommandError
from sqlcatcher.faults import FaultPolicy
from sqlcatcher.statement import command_of, count_placeholders, substitute_args


def test_update_with_bound_argument_reports_rows_affected(
    sql_catcher: ResponseCatalog, sql_connection: Connection
) -> None:
    sql_catcher.register("UPDATE users SET name=?", FakeResponse(rows_affected=3))

    result = sql_connection.prepare("UPDATE users SET name=?").exec(("bob",))

    assert result.rows_affected == 3
    assert result.last_insert_id is None


@pytest.mark.parametrize("command", ["DELETE FROM users", "MERGE INTO users USING staged ON true"])
def test_delete_and_merge_report_rows_affected(
    sql_catcher: ResponseCatalog, sql_connection: Connection, command: str
) -> None:
    sql_catcher.register("users", FakeResponse(rows_affected=7))

    assert sql_connection.prepare(command).exec().rows_affected == 7


def test_unmatched_exec_returns_zero_rows(sql_connection: Connection) -> None:
    assert sql_connection.prepare("UPDATE nothing SET x = 1").exec().rows_affected == 0


def test_insert_uses_registered_id(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    sql_catcher.new_mock().with_query("INSERT INTO users").with_id(99)
    statement = sql_connection.prepare("INSERT INTO users (name) VALUES (?)")

    results = [statement.exec(("a",)) for _ in range(3)]

    assert [result.last_insert_id for result in results] == [99, 99, 99]
    assert all(result.rows_affected == 1 for result in results)


def test_insert_without_registered_id_generates_fresh_ids(sql_connection: Connection) -> None:
    statement = sql_connection.prepare("INSERT INTO users (name) VALUES (?)")

    first = statement.exec(("a",)).last_insert_id
    second = statement.exec(("b",)).last_insert_id

    assert first and second
    assert first > 0 and second > 0
    assert first != second


def test_exec_rejects_unknown_command(sql_connection: Connection) -> None:
    with pytest.raises(UnimplementedCommandError) as excinfo:
        sql_connection.prepare("CREATE TABLE users (id int)").exec()

    assert excinfo.value.command == "CREATE"
    assert "'CREATE'" in str(excinfo.value)


def test_closed_statement_fails_without_lookup(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    calls: List[str] = []
    sql_catcher.new_mock().with_query("SELECT").with_callback(lambda sql, args: calls.append(sql))
    statement = sql_connection.prepare("SELECT 1")

    statement.close()
    statement.close()

    with pytest.raises(StatementClosedError):
        statement.query()
    with pytest.raises(StatementClosedError):
        statement.exec()
    assert calls == []
    assert sql_catcher.miss_count == 0


def test_close_cascades_through_chain(sql_connection: Connection) -> None:
    first = sql_connection.prepare("SELECT 1")
    second = first.chain(sql_connection.prepare("SELECT 2"))
    third = first.chain(sql_connection.prepare("SELECT 3"))

    assert first.next is second
    assert second.next is third

    first.close()

    assert second.closed and third.closed
    with pytest.raises(StatementClosedError):
        third.query()


def test_bad_connection_hook_beats_registered_error(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    sql_catcher.register(
        "users",
        FakeResponse(
            error=ValueError("registered"),
            exceptions=Exceptions(
                hook_exec_bad_connection=lambda: True,
                hook_query_bad_connection=lambda: True,
            ),
        ),
    )

    with pytest.raises(BadConnectionError):
        sql_connection.prepare("UPDATE users SET x = 1").exec()
    with pytest.raises(BadConnectionError):
        sql_connection.prepare("SELECT * FROM users").query()


def test_hook_applies_only_to_its_direction(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    sql_catcher.new_mock().with_query("users").with_query_exception().with_rows_num(2)

    assert sql_connection.prepare("UPDATE users SET x = 1").exec().rows_affected == 2
    with pytest.raises(BadConnectionError):
        sql_connection.prepare("SELECT * FROM users").query()


def test_registered_error_skips_callback(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    calls: List[str] = []
    error = LookupError("no such user")
    sql_catcher.new_mock().with_query("users").with_error(error).with_callback(lambda sql, args: calls.append(sql))

    with pytest.raises(LookupError) as excinfo:
        sql_connection.prepare("SELECT * FROM users").query()

    assert excinfo.value is error
    assert calls == []


def test_callback_receives_rendered_sql_and_args(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    calls: List[Tuple[str, tuple]] = []
    sql_catcher.new_mock().with_query("FROM users").with_callback(lambda sql, args: calls.append((sql, args)))

    sql_connection.prepare("SELECT * FROM users WHERE id = ?").query((5,))
    sql_connection.prepare("DELETE FROM users WHERE id = ?").exec((6,))

    assert calls == [
        ("SELECT * FROM users WHERE id = 5", (5,)),
        ("DELETE FROM users WHERE id = ?", (6,)),
    ]


def test_template_is_reusable_across_arguments(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    sql_catcher.register("WHERE id = 1", FakeResponse(response=[{"name": "one"}]))
    sql_catcher.register("WHERE id = 2", FakeResponse(response=[{"name": "two"}]))
    statement = sql_connection.prepare("SELECT name FROM users WHERE id = ?")

    assert list(statement.query((1,))) == [("one",)]
    assert list(statement.query((2,))) == [("two",)]
    assert statement.sql == "SELECT name FROM users WHERE id = ?"


def test_fault_policy_runs_before_lookup(sql_catcher: ResponseCatalog) -> None:
    sql_catcher.new_mock().with_query("SELECT").one_time()
    connection = connect(sql_catcher, faults=FaultPolicy(bad_query=lambda: True))

    with pytest.raises(BadConnectionError):
        connection.prepare("SELECT 1").query()

    assert sql_catcher.responses[0].triggered is False


def test_num_input_counts_placeholders(sql_connection: Connection) -> None:
    assert sql_connection.prepare("SELECT * FROM t WHERE a = ? AND b = ?").num_input() == 2
    assert connect(paramstyle="format").prepare("SELECT %s, %s, %s").num_input() == 3


def test_prepare_on_closed_connection(sql_connection: Connection) -> None:
    sql_connection.close()

    with pytest.raises(InterfaceError):
        sql_connection.prepare("SELECT 1")


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("select * from users", "SELECT"),
        ("  \n insert into t values (1)", "INSERT"),
        ("(SELECT 1) UNION (SELECT 2)", "SELECT"),
        ("COMMIT;", "COMMIT"),
        ("", ""),
    ],
)
def test_command_of(sql: str, expected: str) -> None:
    assert command_of(sql) == expected


def test_substitute_args() -> None:
    assert substitute_args("a = ? AND b = ?", (1, "x")) == "a = 1 AND b = x"
    assert substitute_args("a = ? AND b = ?", (1,)) == "a = 1 AND b = ?"
    assert substitute_args("a = ?", (1, 2)) == "a = 1"
    assert substitute_args("a = ? AND b = ?", ("?", 2)) == "a = ? AND b = 2"
    assert substitute_args("a = %s", (None,), "format") == "a = None"
    assert count_placeholders("a = %s AND b = %s", "format") == 2


def test_format_style_keeps_escaped_percent() -> None:
    sql = "SELECT * FROM t WHERE name LIKE '%%s%%' AND id = %s"

    assert count_placeholders(sql, "format") == 1
    assert substitute_args(sql, (7,), "format") == "SELECT * FROM t WHERE name LIKE '%%s%%' AND id = 7"
    assert substitute_args("a = %s AND b = '100%%'", (1, 2), "format") == "a = 1 AND b = '100%%'"
    assert count_placeholders("SELECT '%%%s'", "format") == 1
    assert substitute_args("SELECT '%%%s'", ("x",), "format") == "SELECT '%%x'"


def test_like_query_with_escaped_percent_matches(sql_catcher: ResponseCatalog) -> None:
    sql_catcher.new_mock().with_query("AND id = 7").with_reply([{"id": 7, "name": "son"}])
    connection = connect(sql_catcher, paramstyle="format")

    statement = connection.prepare("SELECT * FROM t WHERE name LIKE '%%s%%' AND id = %s")
    rows = connection.execute("SELECT * FROM t WHERE name LIKE '%%s%%' AND id = %s", (7,)).fetchall()

    assert statement.num_input() == 1
    assert rows == [(7, "son")]
    assert sql_catcher.misses == []


def test_unmatched_insert_still_reports_one_row(sql_catcher: ResponseCatalog, sql_connection: Connection) -> None:
    result = sql_connection.prepare("INSERT INTO audit (event) VALUES (?)").exec(("login",))

    assert result.rows_affected == 1
    assert result.last_insert_id is not None and result.last_insert_id > 0
    assert sql_catcher.miss_count == 1


def test_response_exception_hooks_check_by_direction() -> None:
    hooks = Exceptions(hook_exec_bad_connection=lambda: False, hook_query_bad_connection=lambda: True)

    hooks.check("exec")
    with pytest.raises(BadConnectionError, match="during query"):
        hooks.check("query")
    Exceptions().check("exec")
