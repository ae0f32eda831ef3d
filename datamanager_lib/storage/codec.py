"""Value codec: native values <-> the text stored in every backend.

All values are persisted as text regardless of their declared type, so any
backend that can store a string can store every value type. The type is only
reinterpreted on read, by the table the caller chose.
"""
from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, List, Sequence


class ColumnType(str, Enum):
    STRING_KEY = "string_key"
    STRING_VALUE = "string"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING_LIST = "list"


# Value columns carry one of these; STRING_KEY is reserved for key columns.
VALUE_TYPES = (
    ColumnType.STRING_VALUE,
    ColumnType.INT,
    ColumnType.LONG,
    ColumnType.FLOAT,
    ColumnType.DOUBLE,
    ColumnType.BOOLEAN,
    ColumnType.STRING_LIST,
)

INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1
FLOAT_MAX = 3.4028234663852886e38

LIST_DELIMITER = ","
LIST_ESCAPE = "\\"

_INTEGER = re.compile(r"[+-]?[0-9]+")

_TRUE = ("1", "true")
_FALSE = ("0", "false")


class DecodeError(ValueError):
    """Stored text cannot be parsed as the requested value type."""

    def __init__(self, text: str, value_type: ColumnType, detail: str = "") -> None:
        self.text = text
        self.value_type = value_type
        msg = f"Cannot decode {text!r} as {value_type.value}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


def value_type_from(name: Any) -> ColumnType:
    """Resolve a value type from a ColumnType or its name/value ('int', 'INT').

    Raises ValueError for unknown names and for STRING_KEY.
    """
    if isinstance(name, ColumnType):
        vt = name
    else:
        text = str(name).strip()
        try:
            vt = ColumnType(text.lower())
        except ValueError:
            try:
                vt = ColumnType[text.upper()]
            except KeyError:
                raise ValueError(f"Unknown value type {name!r}") from None
    if vt not in VALUE_TYPES:
        raise ValueError(f"{vt.name} is not a value type")
    return vt


def infer_value_type(value: Any) -> ColumnType:
    """Pick the value type for a native value.

    Python has a single int and a single float type, so INT and FLOAT are
    never inferred; callers must tag those explicitly.
    """
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, str):
        return ColumnType.STRING_VALUE
    if isinstance(value, int):
        return ColumnType.LONG
    if isinstance(value, float):
        return ColumnType.DOUBLE
    if isinstance(value, (list, tuple)):
        return ColumnType.STRING_LIST
    raise TypeError(f"No value type for {type(value).__name__}")


def _check_text(text: str) -> str:
    """Reject strings no backend can persist, such as lone surrogates."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"Text is not valid unicode: {e.reason} at {e.start}") from None
    return text


def list_to_string(items: Sequence[str]) -> str:
    """Join strings so that `string_to_list` recovers the exact sequence.

    Each element is escaped and then terminated by the delimiter, which keeps
    ``[]`` (``""``) and ``[""]`` (``","``) distinct.
    """
    parts = []
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"List elements must be str, got {type(item).__name__}")
        _check_text(item)
        escaped = item.replace(LIST_ESCAPE, LIST_ESCAPE * 2).replace(
            LIST_DELIMITER, LIST_ESCAPE + LIST_DELIMITER
        )
        parts.append(escaped + LIST_DELIMITER)
    return "".join(parts)


def string_to_list(text: str) -> List[str]:
    items: List[str] = []
    current: List[str] = []
    escaped = False
    for ch in text:
        if escaped:
            if ch not in (LIST_ESCAPE, LIST_DELIMITER):
                raise DecodeError(text, ColumnType.STRING_LIST, f"invalid escape {ch!r}")
            current.append(ch)
            escaped = False
        elif ch == LIST_ESCAPE:
            escaped = True
        elif ch == LIST_DELIMITER:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    if escaped:
        raise DecodeError(text, ColumnType.STRING_LIST, "dangling escape")
    if current:
        raise DecodeError(text, ColumnType.STRING_LIST, "unterminated element")
    return items


def _encode_int(value: Any, low: int, high: int, value_type: ColumnType) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{value_type.value} requires int, got {type(value).__name__}")
    if not low <= value <= high:
        raise ValueError(f"{value} out of range for {value_type.value}")
    return str(value)


def _decode_int(text: str, low: int, high: int, value_type: ColumnType) -> int:
    # int() would also take "1_000", padding and non-ASCII digits
    if not _INTEGER.fullmatch(text):
        raise DecodeError(text, value_type)
    value = int(text)
    if not low <= value <= high:
        raise DecodeError(text, value_type, "out of range")
    return value


def _encode_float(value: Any, value_type: ColumnType) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{value_type.value} requires float, got {type(value).__name__}")
    value = float(value)
    if value_type is ColumnType.FLOAT and math.isfinite(value) and abs(value) > FLOAT_MAX:
        raise ValueError(f"{value} out of range for float")
    return repr(value)


def _decode_float(text: str, value_type: ColumnType) -> float:
    if "_" in text or not text.isascii() or text != text.strip():
        raise DecodeError(text, value_type)
    try:
        return float(text)
    except ValueError:
        raise DecodeError(text, value_type) from None


def encode(value: Any, value_type: ColumnType) -> str:
    """Encode `value` as text for a `value_type` column.

    Raises TypeError when the value has the wrong Python type and ValueError
    when it does not fit the column type.
    """
    if value_type in (ColumnType.STRING_VALUE, ColumnType.STRING_KEY):
        if not isinstance(value, str):
            raise TypeError(f"string requires str, got {type(value).__name__}")
        return _check_text(value)
    if value_type is ColumnType.INT:
        return _encode_int(value, INT_MIN, INT_MAX, value_type)
    if value_type is ColumnType.LONG:
        return _encode_int(value, LONG_MIN, LONG_MAX, value_type)
    if value_type in (ColumnType.FLOAT, ColumnType.DOUBLE):
        return _encode_float(value, value_type)
    if value_type is ColumnType.BOOLEAN:
        if not isinstance(value, bool):
            raise TypeError(f"boolean requires bool, got {type(value).__name__}")
        return "1" if value else "0"
    if value_type is ColumnType.STRING_LIST:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise TypeError(f"list requires a list of str, got {type(value).__name__}")
        return list_to_string(value)
    raise ValueError(f"Unsupported value type {value_type!r}")


def decode(text: str, value_type: ColumnType) -> Any:
    """Decode stored `text` as `value_type`; raises DecodeError on bad data."""
    if not isinstance(text, str):
        raise DecodeError(repr(text), value_type, "stored value is not text")
    if value_type in (ColumnType.STRING_VALUE, ColumnType.STRING_KEY):
        return text
    if value_type is ColumnType.INT:
        return _decode_int(text, INT_MIN, INT_MAX, value_type)
    if value_type is ColumnType.LONG:
        return _decode_int(text, LONG_MIN, LONG_MAX, value_type)
    if value_type in (ColumnType.FLOAT, ColumnType.DOUBLE):
        return _decode_float(text, value_type)
    if value_type is ColumnType.BOOLEAN:
        flag = text.strip().lower()
        if flag in _TRUE:
            return True
        if flag in _FALSE:
            return False
        raise DecodeError(text, value_type)
    if value_type is ColumnType.STRING_LIST:
        return string_to_list(text)
    raise ValueError(f"Unsupported value type {value_type!r}")
