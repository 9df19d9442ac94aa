"""Serializers used to persist cached endpoint responses."""

import json
import pickle
from abc import ABC
from abc import abstractmethod
from enum import IntEnum
from typing import Any
from typing import Optional
from typing import Union

from fastapi_restkit.exceptions import UnsupportedSerializationModeError

# Errors a corrupt payload can raise while being decoded
DECODE_ERRORS = (
    ValueError,
    TypeError,
    EOFError,
    KeyError,
    IndexError,
    AttributeError,
    ImportError,
    pickle.UnpicklingError,
)


class SerializationMode(IntEnum):
    """Encoding used for cached responses."""

    RAW = 0
    JSON = 1
    BINARY = 2


class Serializer(ABC):
    """Base class for response serializers."""

    mode: SerializationMode

    @abstractmethod
    def dumps(self, data: Any) -> Union[str, bytes]:
        """Encode data for storage."""

    @abstractmethod
    def loads(self, payload: Union[str, bytes]) -> Any:
        """Decode data produced by ``dumps``."""


class PickleSerializer(Serializer):
    """Python-native serialization; round-trips any picklable value."""

    mode = SerializationMode.RAW

    def dumps(self, data: Any) -> bytes:
        return pickle.dumps(data)

    def loads(self, payload: bytes) -> Any:
        return pickle.loads(payload)  # noqa: S301


class JSONSerializer(Serializer):
    """JSON serialization; only JSON-representable values round-trip."""

    mode = SerializationMode.JSON

    def dumps(self, data: Any) -> str:
        return json.dumps(data, separators=(",", ":"))

    def loads(self, payload: Union[str, bytes]) -> Any:
        return json.loads(payload)


class MsgpackSerializer(Serializer):
    """Compact binary serialization backed by the optional ``msgpack`` package."""

    mode = SerializationMode.BINARY

    def __init__(self, msgpack_module: Optional[Any] = None) -> None:
        if msgpack_module is None:
            try:
                import msgpack as msgpack_module  # noqa: PLC0415
            except ImportError as e:
                msg = (
                    "Binary serialization requires msgpack. "
                    "Install it with `pip install fastapi-restkit[binary]`"
                )
                raise UnsupportedSerializationModeError(msg) from e
        self._msgpack = msgpack_module

    def dumps(self, data: Any) -> bytes:
        return self._msgpack.packb(data, use_bin_type=True)

    def loads(self, payload: Union[str, bytes]) -> Any:
        return self._msgpack.unpackb(payload, raw=False)


def get_serializer(mode: Union[SerializationMode, int]) -> Serializer:
    """Return a serializer for the given mode.

    Raises:
        UnsupportedSerializationModeError: If the mode is unknown or its
            dependency is not installed
    """
    try:
        mode = SerializationMode(mode)
    except ValueError as e:
        msg = f"Unknown serialization mode: {mode!r}"
        raise UnsupportedSerializationModeError(msg) from e

    if mode is SerializationMode.RAW:
        return PickleSerializer()
    if mode is SerializationMode.JSON:
        return JSONSerializer()
    return MsgpackSerializer()
