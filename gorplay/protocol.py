"""Framing of recorded payloads: meta header line, body and separators."""

from __future__ import annotations

import secrets
from collections.abc import Iterable, Iterator

REQUEST_PAYLOAD = ord("1")
RESPONSE_PAYLOAD = ord("2")
REPLAYED_RESPONSE_PAYLOAD = ord("3")

PAYLOAD_SEPARATOR = "\n-------------------------------------------------\n"
PAYLOAD_SEPARATOR_BYTES = PAYLOAD_SEPARATOR.encode()


def rand_hex(length: int) -> bytes:
    """Random lowercase hex of ``length`` bytes (odd lengths end in a zero byte)."""
    return secrets.token_hex(length // 2).encode() + b"\x00" * (length % 2)


def new_uuid() -> bytes:
    """Random 24-character hex identifier."""
    return rand_hex(24)


def iter_payloads(data: bytes | Iterable[bytes]) -> Iterator[bytes]:
    """Split a stream of chunks into payloads delimited by the separator.

    Whatever follows the last separator is yielded at the end of the stream.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = (bytes(data),)
    buf = bytearray()
    sep_len = len(PAYLOAD_SEPARATOR_BYTES)
    for chunk in data:
        buf += chunk
        while (i := buf.find(PAYLOAD_SEPARATOR_BYTES)) >= 0:
            yield bytes(buf[:i])
            del buf[: i + sep_len]
    if buf:
        yield bytes(buf)


def payload_header(payload_type: int, uuid: bytes, timing: int, latency: int) -> bytes:
    """Build the meta line, e.g. ``b"3 f455...b3 13923489726487326 1231\\n"``.

    ``timing`` is the request start or the round-trip time, depending on type.
    """
    return b"%c %s %d %d\n" % (payload_type, uuid, timing, latency)


def payload_body(payload: bytes) -> bytes:
    """Everything after the meta line."""
    return payload[payload.find(b"\n") + 1 :]


def payload_meta(payload: bytes) -> list[bytes] | None:
    """Space-separated fields of the meta line, or None without one."""
    end = payload.find(b"\n")
    if end < 0:
        return None
    return payload[:end].split(b" ")


def payload_meta_with_body(payload: bytes) -> tuple[bytes | None, bytes]:
    """Split into meta line (with its newline) and body.

    A payload without a usable meta line is returned whole as the body.
    """
    i = payload.find(b"\n")
    if i > 0 and len(payload) > i + 1:
        return payload[: i + 1], payload[i + 1 :]
    return None, payload


def payload_id(payload: bytes) -> bytes:
    """Identifier field of the meta line, or empty bytes."""
    meta = payload_meta(payload)
    if meta is None or len(meta) < 2:
        return b""
    return meta[1]


def is_origin_payload(payload: bytes) -> bool:
    """Whether the payload is an original request or response."""
    return payload[:1] in (b"1", b"2")


def is_request_payload(payload: bytes) -> bool:
    """Whether the payload is an original request."""
    return payload[:1] == b"1"