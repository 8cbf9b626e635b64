import math

import pytest

from appsupport.storage.settings.values import SettingValue, TypeTag, UnsupportedValueError


def test_tags_follow_python_types():
    assert SettingValue.of(None).tag is TypeTag.INVALID
    assert SettingValue.of(True).tag is TypeTag.BOOL
    assert SettingValue.of(75).tag is TypeTag.INT
    assert SettingValue.of(2**40).tag is TypeTag.LONG_LONG
    assert SettingValue.of(0.5).tag is TypeTag.DOUBLE
    assert SettingValue.of("Ada").tag is TypeTag.STRING
    assert SettingValue.of(b"\x00\x01").tag is TypeTag.BYTE_ARRAY
    assert SettingValue.of([1, 2]).tag is TypeTag.LIST
    assert SettingValue.of({"a": 1}).tag is TypeTag.MAP


def test_scalar_payloads_match_qt_byte_array_rendering():
    assert SettingValue.of(75).encode_with_tag() == (b"75", 2)
    assert SettingValue.of(True).encode() == b"true"
    assert SettingValue.of(False).encode() == b"false"
    assert SettingValue.of(1.5).encode() == b"1.5"
    assert SettingValue.of("Ünïcode").encode() == "Ünïcode".encode("utf-8")
    assert SettingValue.of(None).encode() == b""


def test_containers_encode_as_compact_json():
    assert SettingValue.of([1, "a", None]).encode() == b'[1,"a",null]'
    assert SettingValue.of({"k": [True]}).encode() == b'{"k":[true]}'


def test_tuples_become_lists():
    value = SettingValue.of((1, 2))
    assert value.value == [1, 2]
    assert SettingValue.decode(*value.encode_with_tag()).value == [1, 2]


def test_decode_restores_values():
    for original in [75, 2**40, -3, 0.1, "dark", b"\xff\x00", True, [1, [2]], {"a": {"b": 1}}]:
        value = SettingValue.of(original)
        decoded = SettingValue.decode(*value.encode_with_tag())
        assert decoded == value


def test_decode_qt_written_payloads():
    assert SettingValue.decode(b"false", TypeTag.BOOL).value is False
    assert SettingValue.decode(b"true", 1).value is True
    assert SettingValue.decode(b"42", TypeTag.UINT).value == 42
    assert SettingValue.decode(b"2.5", TypeTag.FLOAT).value == pytest.approx(2.5)
    assert SettingValue.decode("text", TypeTag.STRING).value == "text"
    assert SettingValue.decode(b"", TypeTag.INVALID) == SettingValue(TypeTag.INVALID, None)


def test_non_finite_doubles():
    decoded = SettingValue.decode(*SettingValue.of(float("nan")).encode_with_tag())
    assert math.isnan(decoded.value)
    assert SettingValue.decode(*SettingValue.of(float("-inf")).encode_with_tag()).value == float("-inf")


def test_bad_payloads_raise_value_error():
    with pytest.raises(ValueError):
        SettingValue.decode(b"1", 99)
    with pytest.raises(ValueError):
        SettingValue.decode(b"abc", TypeTag.INT)
    with pytest.raises(ValueError):
        SettingValue.decode(b'{"a": 1}', TypeTag.LIST)


def test_unsupported_values():
    with pytest.raises(UnsupportedValueError):
        SettingValue.of(object())
    with pytest.raises(UnsupportedValueError):
        SettingValue.of([{1, 2}])
    with pytest.raises(UnsupportedValueError):
        SettingValue.of({1: "int key"})


def test_equality_includes_tag():
    assert SettingValue.of(True) != SettingValue.of(1)
    assert SettingValue.of(1) == SettingValue.of(1)
    assert SettingValue.of(None).is_valid is False
    assert SettingValue.of("").is_valid is True


def test_same_as_treats_nan_as_unchanged():
    nan = SettingValue.of(float("nan"))
    decoded = SettingValue.decode(*nan.encode_with_tag())
    assert nan != decoded
    assert nan.same_as(decoded)
    assert SettingValue.of(1.0).same_as(SettingValue.of(1.0))
    assert not SettingValue.of(1.0).same_as(SettingValue.of(2.0))
    assert not nan.same_as(SettingValue.of("nan"))
