import math

import pytest

from datamanager_lib.storage.codec import (
    FLOAT_MAX,
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    ColumnType,
    DecodeError,
    decode,
    encode,
    infer_value_type,
    list_to_string,
    string_to_list,
    value_type_from,
)


def test_list_encoding_escapes_delimiters_and_keeps_empty_elements():
    text = list_to_string(["a,b", "", "c"])
    assert text == "a\\,b,,c,"
    assert string_to_list(text) == ["a,b", "", "c"]


def test_empty_list_and_list_of_empty_string_are_distinct():
    assert list_to_string([]) == ""
    assert list_to_string([""]) == ","
    assert string_to_list("") == []
    assert string_to_list(",") == [""]


def test_list_escapes_backslashes():
    items = ["C:\\path", "\\,", "trailing\\"]
    assert string_to_list(list_to_string(items)) == items


@pytest.mark.parametrize("text", ["a", "a,b", "a\\", "a\\x,"])
def test_malformed_list_text_raises(text):
    with pytest.raises(DecodeError):
        string_to_list(text)


def test_list_rejects_non_string_elements():
    with pytest.raises(TypeError):
        list_to_string(["a", 1])


@pytest.mark.parametrize(
    "value,value_type",
    [
        (INT_MIN, ColumnType.INT),
        (INT_MAX, ColumnType.INT),
        (LONG_MIN, ColumnType.LONG),
        (LONG_MAX, ColumnType.LONG),
        (0, ColumnType.INT),
        (True, ColumnType.BOOLEAN),
        (False, ColumnType.BOOLEAN),
        ("", ColumnType.STRING_VALUE),
        ("ünïcödé", ColumnType.STRING_VALUE),
        (0.1, ColumnType.DOUBLE),
        (-2.5e300, ColumnType.DOUBLE),
        (1.5, ColumnType.FLOAT),
        (["x", ""], ColumnType.STRING_LIST),
    ],
)
def test_boundary_values_survive_encoding(value, value_type):
    assert decode(encode(value, value_type), value_type) == value


def test_special_floats():
    assert decode(encode(float("inf"), ColumnType.FLOAT), ColumnType.FLOAT) == float("inf")
    assert math.isnan(decode(encode(float("nan"), ColumnType.DOUBLE), ColumnType.DOUBLE))


@pytest.mark.parametrize(
    "value,value_type",
    [
        (INT_MAX + 1, ColumnType.INT),
        (INT_MIN - 1, ColumnType.INT),
        (LONG_MAX + 1, ColumnType.LONG),
        (FLOAT_MAX * 2, ColumnType.FLOAT),
    ],
)
def test_out_of_range_values_rejected(value, value_type):
    with pytest.raises(ValueError):
        encode(value, value_type)


@pytest.mark.parametrize(
    "value,value_type",
    [
        ("1", ColumnType.INT),
        (True, ColumnType.INT),
        (1, ColumnType.BOOLEAN),
        (1, ColumnType.STRING_VALUE),
        ("abc", ColumnType.STRING_LIST),
        ("1.0", ColumnType.DOUBLE),
    ],
)
def test_wrong_python_type_rejected(value, value_type):
    with pytest.raises(TypeError):
        encode(value, value_type)


def test_booleans_are_stored_as_digits_and_legacy_words_decode():
    assert encode(True, ColumnType.BOOLEAN) == "1"
    assert encode(False, ColumnType.BOOLEAN) == "0"
    assert decode("true", ColumnType.BOOLEAN) is True
    assert decode("FALSE", ColumnType.BOOLEAN) is False


@pytest.mark.parametrize(
    "text,value_type",
    [
        ("abc", ColumnType.INT),
        ("2147483648", ColumnType.INT),
        ("1.5", ColumnType.LONG),
        ("yes", ColumnType.BOOLEAN),
        ("one", ColumnType.DOUBLE),
        ("1_000", ColumnType.INT),
        (" 1", ColumnType.INT),
        ("1 ", ColumnType.LONG),
        ("\u0661", ColumnType.LONG),
        ("", ColumnType.LONG),
        ("1_0.5", ColumnType.DOUBLE),
        (" 1.5", ColumnType.FLOAT),
        ("1.5\n", ColumnType.DOUBLE),
        ("\u0661.5", ColumnType.DOUBLE),
    ],
)
def test_corrupt_text_raises_decode_error(text, value_type):
    with pytest.raises(DecodeError) as exc:
        decode(text, value_type)
    assert exc.value.text == text
    assert exc.value.value_type is value_type


def test_decode_error_is_a_value_error():
    assert issubclass(DecodeError, ValueError)


def test_infer_value_type():
    assert infer_value_type("s") is ColumnType.STRING_VALUE
    assert infer_value_type(True) is ColumnType.BOOLEAN
    assert infer_value_type(3) is ColumnType.LONG
    assert infer_value_type(3.0) is ColumnType.DOUBLE
    assert infer_value_type(["a"]) is ColumnType.STRING_LIST
    assert infer_value_type(("a",)) is ColumnType.STRING_LIST
    with pytest.raises(TypeError):
        infer_value_type({"a": 1})


def test_value_type_from_accepts_enum_value_and_name():
    assert value_type_from(ColumnType.INT) is ColumnType.INT
    assert value_type_from("int") is ColumnType.INT
    assert value_type_from("STRING_LIST") is ColumnType.STRING_LIST
    assert value_type_from("list") is ColumnType.STRING_LIST
    with pytest.raises(ValueError):
        value_type_from("string_key")
    with pytest.raises(ValueError):
        value_type_from("decimal")


def test_signed_integers_and_float_spellings_decode():
    assert decode("+7", ColumnType.INT) == 7
    assert decode("-0", ColumnType.LONG) == 0
    assert decode("1e3", ColumnType.DOUBLE) == 1000.0
    assert math.copysign(1.0, decode("-0.0", ColumnType.FLOAT)) == -1.0


@pytest.mark.parametrize("value_type", [ColumnType.STRING_VALUE, ColumnType.STRING_KEY])
def test_lone_surrogates_are_rejected(value_type):
    with pytest.raises(ValueError):
        encode("bad\ud800", value_type)


def test_list_with_lone_surrogate_is_rejected():
    with pytest.raises(ValueError):
        encode(["ok", "\udc80"], ColumnType.STRING_LIST)
