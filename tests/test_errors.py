import sqlite3

from appsupport.storage.sqlite.errors import (
    ErrorKind,
    ErrorSink,
    QueryError,
    SchemaError,
    classify_driver_error,
)


def test_classification():
    assert classify_driver_error(sqlite3.OperationalError('near "SELEC": syntax error')) is ErrorKind.QUERY
    assert classify_driver_error(sqlite3.OperationalError("no such table: missing")) is ErrorKind.QUERY
    assert classify_driver_error(sqlite3.OperationalError("database is locked")) is ErrorKind.DRIVER
    assert classify_driver_error(sqlite3.IntegrityError("NOT NULL constraint failed")) is ErrorKind.DRIVER
    assert classify_driver_error(ValueError("bad")) is ErrorKind.QUERY


def test_sink_holds_only_latest_record():
    sink = ErrorSink()
    assert not sink
    assert sink.last is None

    first = sink.record(ErrorKind.SCHEMA, "CREATE TABLE t", "boom")
    assert sink.last is first
    second = sink.record(ErrorKind.QUERY, "SELECT 1", "again", params=[1])
    assert sink.last is second
    assert second.params == (1,)
    assert sink

    sink.clear()
    assert sink.last is None


def test_record_exception_classifies():
    sink = ErrorSink()
    record = sink.record_exception(sqlite3.OperationalError("no such column: x"), "SELECT x FROM t")
    assert record.kind is ErrorKind.QUERY
    assert record.message == "no such column: x"

    forced = sink.record_exception(OSError("denied"), "OPEN /x", kind=ErrorKind.CONNECTION)
    assert forced.kind is ErrorKind.CONNECTION


def test_record_string_and_exception():
    sink = ErrorSink()
    record = sink.record(ErrorKind.SCHEMA, "DROP TABLE t", "no such table: t", code=1)
    assert str(record) == "Sqlite Error: no such table: t\nQuery: DROP TABLE t"

    exc = record.to_exception()
    assert isinstance(exc, SchemaError)
    assert isinstance(exc, RuntimeError)
    assert exc.query == "DROP TABLE t"
    assert exc.code == 1
    assert ErrorKind.QUERY.exception_type is QueryError


def test_overflow_is_a_query_error():
    assert classify_driver_error(OverflowError("Python int too large to convert to SQLite INTEGER")) is ErrorKind.QUERY
