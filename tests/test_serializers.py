import sys

import pytest

from fastapi_restkit.exceptions import UnsupportedSerializationModeError
from fastapi_restkit.serializers import JSONSerializer
from fastapi_restkit.serializers import MsgpackSerializer
from fastapi_restkit.serializers import PickleSerializer
from fastapi_restkit.serializers import SerializationMode
from fastapi_restkit.serializers import get_serializer


class StubMsgpackModule:
    def __init__(self) -> None:
        self.packed: list[object] = []

    def packb(self, data: object, use_bin_type: bool) -> bytes:
        self.packed.append(data)
        return b"packed"

    def unpackb(self, payload: bytes, raw: bool) -> object:
        return self.packed[-1]


def test_get_serializer_by_mode() -> None:
    assert isinstance(get_serializer(SerializationMode.RAW), PickleSerializer)
    assert isinstance(get_serializer(SerializationMode.JSON), JSONSerializer)
    assert isinstance(get_serializer(1), JSONSerializer)


def test_get_serializer_unknown_mode() -> None:
    with pytest.raises(UnsupportedSerializationModeError, match="Unknown"):
        get_serializer(7)


def test_pickle_serializer_keeps_python_types() -> None:
    serializer = PickleSerializer()
    data = {"point": (1, 2), "ids": {3, 4}}

    assert serializer.loads(serializer.dumps(data)) == data


def test_json_serializer_output_is_compact_text() -> None:
    serializer = JSONSerializer()

    payload = serializer.dumps({"a": 1, "b": [1, 2]})

    assert payload == '{"a":1,"b":[1,2]}'
    assert serializer.loads(payload) == {"a": 1, "b": [1, 2]}


def test_json_serializer_rejects_non_json_values() -> None:
    with pytest.raises(TypeError):
        JSONSerializer().dumps({"ids": {1, 2}})


def test_msgpack_serializer_uses_injected_module() -> None:
    stub = StubMsgpackModule()
    serializer = MsgpackSerializer(msgpack_module=stub)

    assert serializer.dumps({"a": 1}) == b"packed"
    assert serializer.loads(b"packed") == {"a": 1}
    assert stub.packed == [{"a": 1}]


def test_msgpack_serializer_roundtrip() -> None:
    pytest.importorskip("msgpack")
    serializer = get_serializer(SerializationMode.BINARY)

    payload = serializer.dumps({"name": "item", "data": b"\x01\x02", "n": [1, 2]})

    assert isinstance(payload, bytes)
    assert serializer.loads(payload) == {"name": "item", "data": b"\x01\x02", "n": [1, 2]}


def test_binary_mode_without_msgpack(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "msgpack", None)

    with pytest.raises(UnsupportedSerializationModeError, match="msgpack"):
        get_serializer(SerializationMode.BINARY)
