"""
Attachment payload normalizer.

Converts the ``fileData`` of a legacy attachment into raw bytes. Clients have
shipped the byte data in several shapes over time:

  BASE64            {"encoding": "base64", "data": "JVBERi0x..."}
  TEXT              {"data": "plain text body"}
  RAW_BYTES         bytes / bytearray (only when called in-process)
  SERIALIZED_BUFFER {"data": {"type": "Buffer", "data": [37, 80, ...]}}
  BYTE_ARRAY        {"data": [37, 80, ...]}
  INDEXED_OBJECT    {"data": {"0": 37, "1": 80, ...}}

``classify_payload`` decides which shape a value is in; ``decode_payload``
dispatches to exactly one decoder per shape. Anything that matches no shape
raises UnsupportedEncoding, including objects without numeric keys.

Adding a new shape:
  1. Add a PayloadEncoding member.
  2. Teach classify_payload to recognise it.
  3. Register a decoder in _DECODERS.
"""

import base64
import binascii
import logging
from enum import Enum
from typing import Any, Callable, Iterable

from studybuddy.errors import EmptyPayload, UnsupportedEncoding
from studybuddy.models.attachment import FileData

logger = logging.getLogger(__name__)


class PayloadEncoding(str, Enum):
    BASE64 = "base64"
    TEXT = "text"
    RAW_BYTES = "raw_bytes"
    SERIALIZED_BUFFER = "serialized_buffer"
    BYTE_ARRAY = "byte_array"
    INDEXED_OBJECT = "indexed_object"


def _is_numeric_key(key: Any) -> bool:
    return isinstance(key, str) and key.isdecimal()


def _shape_name(value: Any) -> str:
    """Human-readable description of an unrecognised value, for error messages."""
    if isinstance(value, dict):
        keys = list(value)[:5]
        return f"object with keys {keys}"
    return type(value).__name__


def classify_payload(file_data: FileData) -> PayloadEncoding:
    """
    Return the shape of ``file_data.data``.

    Raises:
        UnsupportedEncoding: if the value matches none of the known shapes.
    """
    data = file_data.data

    if isinstance(data, str):
        if (file_data.encoding or "").lower() == "base64":
            return PayloadEncoding.BASE64
        return PayloadEncoding.TEXT

    if isinstance(data, (bytes, bytearray, memoryview)):
        return PayloadEncoding.RAW_BYTES

    if isinstance(data, dict):
        if data.get("type") == "Buffer" and isinstance(data.get("data"), list):
            return PayloadEncoding.SERIALIZED_BUFFER
        if all(_is_numeric_key(k) for k in data):
            return PayloadEncoding.INDEXED_OBJECT
        raise UnsupportedEncoding(_shape_name(data), "object keys are not byte indices")

    if isinstance(data, (list, tuple)):
        return PayloadEncoding.BYTE_ARRAY

    raise UnsupportedEncoding(_shape_name(data))


def _to_bytes(values: Iterable[Any], shape: str) -> bytes:
    """Build bytes from a sequence of integer byte values (0-255)."""
    values = list(values)
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise UnsupportedEncoding(shape, "byte values must be integers")
    try:
        return bytes(values)
    except ValueError as exc:
        raise UnsupportedEncoding(shape, str(exc)) from exc


def _decode_base64(data: str) -> bytes:
    try:
        # Line breaks are allowed (MIME-style wrapping); any other stray character is an error
        return base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedEncoding("base64 string", str(exc)) from exc


def _decode_text(data: str) -> bytes:
    return data.encode("utf-8")


def _decode_raw_bytes(data: Any) -> bytes:
    return bytes(data)


def _decode_serialized_buffer(data: dict) -> bytes:
    return _to_bytes(data["data"], "serialized Buffer")


def _decode_byte_array(data: Any) -> bytes:
    return _to_bytes(data, "byte array")


def _decode_indexed_object(data: dict) -> bytes:
    ordered_keys = sorted(data, key=int)
    return _to_bytes((data[k] for k in ordered_keys), "indexed object")


_DECODERS: dict[PayloadEncoding, Callable[[Any], bytes]] = {
    PayloadEncoding.BASE64: _decode_base64,
    PayloadEncoding.TEXT: _decode_text,
    PayloadEncoding.RAW_BYTES: _decode_raw_bytes,
    PayloadEncoding.SERIALIZED_BUFFER: _decode_serialized_buffer,
    PayloadEncoding.BYTE_ARRAY: _decode_byte_array,
    PayloadEncoding.INDEXED_OBJECT: _decode_indexed_object,
}


def decode_payload(file_data: FileData) -> bytes:
    """
    Decode an attachment's ``fileData`` into a non-empty byte string.

    Raises:
        UnsupportedEncoding: unknown shape or undecodable value.
        EmptyPayload: the value decoded to zero bytes.
    """
    encoding = classify_payload(file_data)
    logger.info(f"Decoding attachment payload as {encoding.value}")

    payload = _DECODERS[encoding](file_data.data)

    if len(payload) == 0:
        raise EmptyPayload()

    logger.info(f"Decoded payload: {len(payload)} bytes")
    return payload
