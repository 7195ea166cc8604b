"""Base-protocol framing: JSON bodies behind a ``Content-Length`` header."""

from __future__ import annotations

import json
import re
from typing import Any, BinaryIO, Iterator, Optional, Tuple

SEPARATOR = b"\r\n\r\n"
_HEADER_PREFIX = b"Content-Length: "
_INTEGER = re.compile(rb"[+-]?[0-9]+")
_READ_SIZE = 4096


class RpcError(ValueError):
    """Raised when a message cannot be framed, unframed or parsed."""


def _describe(msg: bytes) -> str:
    return msg.decode("utf-8", errors="replace")


def _content_length(header: bytes, msg: bytes) -> int:
    if len(header) < len(_HEADER_PREFIX):
        raise RpcError("Invalid format :: Header too short, Message:" + _describe(msg))
    value = header[len(_HEADER_PREFIX):]
    if not _INTEGER.fullmatch(value):
        raise RpcError(
            "Invalid format :: Invalid contentLength value, Message:" + _describe(msg)
        )
    length = int(value)
    if length < 0:
        raise RpcError(
            "Invalid format :: Negative contentLength value, Message:" + _describe(msg)
        )
    return length


def encode_message(msg: Any) -> str:
    """Serialise ``msg`` compactly and prefix it with its byte length."""
    to_dict = getattr(msg, "to_dict", None)
    payload = to_dict() if callable(to_dict) else msg
    try:
        content = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise RpcError(f"Cannot encode message: {exc}") from exc
    return f"Content-Length: {len(content.encode('utf-8'))}\r\n\r\n{content}"


def decode_message(msg: bytes | str) -> Tuple[str, bytes]:
    """Return the method name and JSON body of one framed message."""
    if isinstance(msg, str):
        msg = msg.encode("utf-8")
    header, sep, content = bytes(msg).partition(SEPARATOR)
    if not sep:
        raise RpcError("Invalid format :: Received no separator, Message:" + _describe(msg))

    length = _content_length(header, msg)
    if length > len(content):
        raise RpcError("Invalid format :: Body shorter than contentLength, Message:" + _describe(msg))
    body = content[:length]

    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RpcError("Invalid format :: Invalid JSON Format, Message:" + _describe(msg)) from exc

    if parsed is None:
        return "", body
    if not isinstance(parsed, dict):
        raise RpcError("Invalid format :: Invalid JSON Format, Message:" + _describe(msg))
    method = parsed.get("method")
    if method is None:
        method = ""
    if not isinstance(method, str):
        raise RpcError("Invalid format :: Invalid JSON Format, Message:" + _describe(msg))
    return method, body


def split(data: bytes) -> Optional[Tuple[int, bytes]]:
    """Find the first complete frame in ``data``.

    Returns ``(bytes consumed, frame)``, or ``None`` if more data is needed.
    """
    header, sep, content = data.partition(SEPARATOR)
    if not sep:
        return None
    length = _content_length(header, data)
    if len(content) < length:
        return None
    total = len(header) + len(SEPARATOR) + length
    return total, data[:total]


def read_messages(stream: BinaryIO) -> Iterator[bytes]:
    """Yield each complete frame read from a binary stream until it ends."""
    read = getattr(stream, "read1", None) or stream.read
    buffer = b""
    while True:
        while (frame := split(buffer)) is not None:
            advance, token = frame
            buffer = buffer[advance:]
            yield token
        chunk = read(_READ_SIZE)
        if not chunk:
            return
        buffer += chunk