"""Column data type vocabulary.

Column types are stored verbatim as strings. The enum below is the catalogue the
editor offers; ``classify_data_type`` maps a stored string back onto it so callers
can tell known types from arbitrary ones without the string ever being rewritten.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional


class DataType(str, Enum):
    INT = "INT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    SMALLINT = "SMALLINT"
    TINYINT = "TINYINT"
    SERIAL = "SERIAL"
    BIGSERIAL = "BIGSERIAL"
    DECIMAL = "DECIMAL"
    NUMERIC = "NUMERIC"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    REAL = "REAL"
    MONEY = "MONEY"
    VARCHAR = "VARCHAR"
    CHAR = "CHAR"
    TEXT = "TEXT"
    MEDIUMTEXT = "MEDIUMTEXT"
    LONGTEXT = "LONGTEXT"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    TIME = "TIME"
    YEAR = "YEAR"
    INTERVAL = "INTERVAL"
    BOOLEAN = "BOOLEAN"
    BLOB = "BLOB"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    BYTEA = "BYTEA"
    JSON = "JSON"
    JSONB = "JSONB"
    UUID = "UUID"
    XML = "XML"
    ENUM = "ENUM"
    INET = "INET"
    CIDR = "CIDR"
    MACADDR = "MACADDR"
    BIT = "BIT"
    GEOMETRY = "GEOMETRY"
    UNKNOWN = "UNKNOWN"


DEFAULT_DATA_TYPE = DataType.VARCHAR.value

# Leading type keyword, ignoring any "(255)" / "(10,2)" parameter list
_BASE_TYPE_RE = re.compile(r"^\s*([A-Za-z]+)\s*(?:\(.*\))?\s*$")


def normalize_data_type(value: Any, default: Optional[str] = None) -> str:
    """Return the string to store for a column type.

    Blank or missing values fall back to ``default`` (VARCHAR); anything else is kept
    exactly as given.
    """
    if value is None:
        return default or DEFAULT_DATA_TYPE
    if isinstance(value, DataType):
        return value.value
    text = str(value)
    if not text.strip():
        return default or DEFAULT_DATA_TYPE
    return text


def classify_data_type(value: Optional[str]) -> DataType:
    """
    Map a stored type string onto the known catalogue.

    Rules (deterministic):
    - Case-insensitive match on the leading keyword ("varchar(255)" -> VARCHAR).
    - Multi-word or unrecognized types ("DOUBLE PRECISION", "CITEXT") -> UNKNOWN.
    """
    match = _BASE_TYPE_RE.match(value or "")
    if not match:
        return DataType.UNKNOWN
    base = match.group(1).upper()
    try:
        return DataType(base)
    except ValueError:
        return DataType.UNKNOWN


def is_known_data_type(value: Optional[str]) -> bool:
    return classify_data_type(value) is not DataType.UNKNOWN
