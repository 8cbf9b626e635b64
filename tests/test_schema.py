import pytest

from appsupport.storage.sqlite.schema import (
    ColumnDefinition,
    ColumnType,
    Schema,
    column_type,
    column_type_name,
    is_identifier,
)


def test_column_sql_rendering():
    assert ColumnDefinition("name").to_sql() == '"name" TEXT NOT NULL'
    assert ColumnDefinition("note", ColumnType.TEXT, nullable=True).to_sql() == '"note" TEXT'
    assert (
        ColumnDefinition("id", ColumnType.PK_AUTOINCREMENT).to_sql()
        == '"id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL'
    )


def test_type_names_map_both_ways():
    for kind in ColumnType:
        if kind is ColumnType.NONE:
            continue
        assert column_type(column_type_name(kind)) is kind
    assert column_type(" integer   primary key ") is ColumnType.PK_INTEGER
    assert column_type("VARCHAR(20)") is ColumnType.NONE
    assert column_type("") is ColumnType.NONE


def test_invalid_columns_are_rejected():
    with pytest.raises(ValueError):
        ColumnDefinition("1abc")
    with pytest.raises(ValueError):
        ColumnDefinition("ok", ColumnType.NONE)


def test_schema_rejects_duplicates_and_empty():
    with pytest.raises(ValueError):
        Schema([ColumnDefinition("a"), ColumnDefinition("a", ColumnType.INTEGER)])
    with pytest.raises(ValueError):
        Schema([])


def test_schema_is_ordered_and_comparable():
    cols = [ColumnDefinition("b", ColumnType.INTEGER), ColumnDefinition("a")]
    schema = Schema(cols)
    assert schema.names == ["b", "a"]
    assert len(schema) == 2
    assert list(schema) == cols
    assert schema == Schema(list(cols))
    assert hash(schema) == hash(Schema(list(cols)))
    assert schema.to_sql() == '"b" INTEGER NOT NULL, "a" TEXT NOT NULL'


def test_is_identifier():
    assert is_identifier("setting_name")
    assert is_identifier("_x1")
    assert not is_identifier("with space")
    assert not is_identifier("")
    assert not is_identifier(None)
