"""JSON serialization utilities for querybridge.

Structured parameter values are bound as JSON text and structured log lines
are emitted as JSON, both through msgspec.
"""

from typing import Any, Literal, Union, overload

import msgspec

from querybridge.exceptions import QueryBridgeError

__all__ = ("SerializationError", "from_json", "to_json")

_encoder = msgspec.json.Encoder()
_decoder = msgspec.json.Decoder()


class SerializationError(QueryBridgeError):
    """Encoding or decoding of an object failed."""

    code = "SERIALIZATION_ERROR"


@overload
def to_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def to_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def to_json(data: Any, *, as_bytes: bool = False) -> Union[str, bytes]:
    """Encode data to JSON string or bytes.

    Args:
        data: Data to encode.
        as_bytes: Whether to return bytes instead of string.

    Raises:
        SerializationError: If the data contains values msgspec cannot encode.

    Returns:
        JSON string or bytes representation based on as_bytes parameter.
    """
    try:
        encoded = _encoder.encode(data)
    except (TypeError, msgspec.EncodeError) as exc:
        raise SerializationError(str(exc)) from exc
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def from_json(data: Union[str, bytes]) -> Any:
    """Decode JSON string or bytes to Python object.

    Args:
        data: JSON string or bytes to decode.

    Raises:
        SerializationError: If the input is not valid JSON.

    Returns:
        Decoded Python object.
    """
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as exc:
        raise SerializationError(str(exc)) from exc
