from typing import Any, Protocol
import json
import yaml

class Serializer(Protocol):
    """Serialize/deserialize table documents for backends that store bytes/text.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    `file_extension` names the on-disk suffix for files written with it.
    """

    file_extension: str

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class YAMLSerializer:
    """Default serializer using YAML (text), readable and hand-editable on disk."""

    file_extension = ".yml"

    def dump(self, value: Any) -> bytes:
        # Non-ASCII is written as double-quoted escapes; raw NEL and U+2028/9
        # would be read back as line breaks.
        return yaml.safe_dump(value, sort_keys=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class JSONSerializer:
    """Serializer using JSON (text). Caller must ensure values are JSON-serializable."""

    file_extension = ".json"

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, indent=1).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


SERIALIZERS = {
    "yaml": YAMLSerializer,
    "json": JSONSerializer,
}


def get_serializer(name: str) -> Serializer:
    try:
        return SERIALIZERS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown serializer {name!r}; expected one of {sorted(SERIALIZERS)}") from None
