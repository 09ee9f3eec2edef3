"""Byte-level access to HTTP/1 request and response payloads.

A payload looks like this (line breaks are CRLF)::

    POST /upload HTTP/1.1
    User-Agent: Gor
    Content-Length: 11

    Hello world
"""

from __future__ import annotations

from dataclasses import dataclass

CRLF = b"\r\n"
EMPTY_LINE = b"\r\n\r\n"
HEADER_DELIM = b": "

METHODS = (
    b"CONNECT",
    b"DELETE",
    b"GET",
    b"HEAD",
    b"OPTIONS",
    b"PATCH",
    b"POST",
    b"PUT",
    b"TRACE",
)

# "GET / HTTP/1.1\r\n"
MIN_REQUEST_COUNT = 16
# "HTTP/1.1 200\r\n"
MIN_RESPONSE_COUNT = 14
# "HTTP/1.1"
VERSION_LEN = 8

_VERSIONS = (b"HTTP/1.0", b"HTTP/1.1")

_KNOWN_STATUSES = frozenset(
    [100, 101, 102, 103]
    + list(range(200, 209))
    + [226]
    + [300, 301, 302, 303, 304, 305, 307, 308]
    + list(range(400, 419))
    + [421, 422, 423, 424, 425, 426, 428, 429, 431, 451]
    + list(range(500, 509))
    + [510, 511]
)

_HEX_DIGITS = {ord(c): int(c, 16) for c in "0123456789abcdefABCDEF"}

_TOKEN_BYTES = frozenset(
    b"!#$%&'*+-.^_`|~0123456789"
    b"abcdefghijklmnopqrstuvwxyz"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


@dataclass(frozen=True)
class HeaderSpan:
    """Location of a header line inside a payload.

    ``header_end`` and ``value_end`` are exclusive offsets; the header line
    spans ``payload[header_start:header_end]`` including its line break.
    """

    value: bytes
    header_start: int
    header_end: int
    value_start: int
    value_end: int


@dataclass
class HTTPState:
    """Parsing state kept between calls to :func:`has_full_payload`."""

    body: int = 0
    header_start: int = 0
    header_end: int = 0
    header_parsed: bool = False
    has_full_payload: bool = False
    is_chunked: bool = False
    body_len: int = 0
    has_trailer: bool = False
    continue100: bool = False


def _atoi(digits: bytes, base: int) -> tuple[int, bool]:
    """Parse a positive integer; return the value read so far and success."""
    num = 0
    for c in digits:
        if c > 127:
            return num, False
        v = _HEX_DIGITS.get(c, 0)
        if v >= base or (v == 0 and c != 0x30):
            return num, False
        num = num * base + v
    return num, True


def mime_headers_end_pos(payload: bytes) -> int:
    """Offset just past the empty line ending the headers, or -1."""
    pos = payload.find(EMPTY_LINE)
    if pos < 0:
        return -1
    return pos + 4


def mime_headers_start_pos(payload: bytes) -> int:
    """Offset of the second line (first header), or -1."""
    pos = payload.find(CRLF)
    if pos < 0:
        return -1
    return pos + 2


def find_header(payload: bytes, name: bytes) -> HeaderSpan | None:
    """Locate a header by case-insensitive name; multi-line headers are not supported."""
    if has_title(payload):
        start = mime_headers_start_pos(payload)
        if start < 0:
            return None
    else:
        start = 0

    wanted = name.lower()
    found = False
    line_end = value_start = value_end = 0
    while start < len(payload):
        line_end = payload.find(b"\n", start)
        if line_end == -1:
            break
        colon = payload.find(b":", start, line_end)
        if colon == -1:
            # most likely a packet with partial headers
            start = line_end + 1
            continue
        if payload[start:colon].lower() == wanted:
            value_start = colon + 1
            value_end = line_end - 2
            found = True
            break
        start = line_end + 1

    if not found:
        return None

    while value_start < value_end and payload[value_start] < 0x21:
        value_start += 1
    while value_end > value_start and payload[value_end] < 0x21:
        value_end -= 1
    value_end = max(value_end + 1, value_start)

    return HeaderSpan(
        value=payload[value_start:value_end],
        header_start=start,
        header_end=line_end + 1,
        value_start=value_start,
        value_end=value_end,
    )


def _canonical_key(key: bytes) -> str | None:
    if not key:
        return None
    keep_as_is = False
    for c in key:
        if c in _TOKEN_BYTES:
            continue
        if c == 0x20:
            keep_as_is = True
            continue
        return None
    text = key.decode("ascii")
    if keep_as_is:
        return text
    out = []
    upper = True
    for ch in text:
        ch = ch.upper() if upper else ch.lower()
        out.append(ch)
        upper = ch == "-"
    return "".join(out)


def _valid_value(value: bytes) -> bool:
    return all(c == 0x09 or (c >= 0x20 and c != 0x7F) for c in value)


def get_headers(payload: bytes) -> dict[str, list[str]] | None:
    """Read a MIME header block that ends with an empty line.

    Returns ``None`` when the block is malformed or not terminated.
    """
    lines = payload.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    lines = [line[:-1] if line.endswith(b"\r") else line for line in lines]

    if lines and lines[0][:1] in (b" ", b"\t"):
        return None

    headers: dict[str, list[str]] = {}
    remaining = iter(range(len(lines)))
    i = 0
    del remaining
    while True:
        if i >= len(lines):
            return None
        line = lines[i]
        i += 1
        if not line:
            return headers
        if b":" not in line:
            return None
        parts = [line.strip(b" \t\r\n")]
        while i < len(lines) and lines[i][:1] in (b" ", b"\t"):
            parts.append(lines[i].strip(b" \t\r\n"))
            i += 1
        key_bytes, _, value_bytes = b" ".join(parts).partition(b":")
        key = _canonical_key(key_bytes)
        if key is None or not _valid_value(value_bytes):
            return None
        value = value_bytes.lstrip(b" \t").decode("utf-8", "surrogateescape")
        headers.setdefault(key, []).append(value)


def parse_headers(payload: bytes) -> dict[str, list[str]] | None:
    """Parse the headers of a payload, skipping its title line."""
    if has_title(payload):
        start = mime_headers_start_pos(payload)
        if start > len(payload) - 1:
            return None
        payload = payload[start:]
    end = mime_headers_end_pos(payload)
    if end > 1:
        payload = payload[:end]
    return get_headers(payload)


def header(payload: bytes, name: bytes) -> bytes:
    """Value of a header, or empty bytes when it is missing."""
    span = find_header(payload, name)
    return span.value if span else b""


def set_header(payload: bytes, name: bytes, value: bytes) -> bytes:
    """Replace a header value, adding the header when it is missing."""
    span = find_header(payload, name)
    if span is not None:
        return payload[: span.value_start] + value + payload[span.value_end :]
    return add_header(payload, name, value)


def add_header(payload: bytes, name: bytes, value: bytes) -> bytes:
    """Insert a header at the start of the headers section."""
    start = mime_headers_start_pos(payload)
    if start < 1:
        return payload
    line = name + HEADER_DELIM + value + CRLF
    return payload[:start] + line + payload[start:]


def delete_header(payload: bytes, name: bytes) -> bytes:
    """Remove a header line if present."""
    span = find_header(payload, name)
    if span is None:
        return payload
    return payload[: span.header_start] + payload[span.header_end :]


def body(payload: bytes) -> bytes:
    """Body of the message, or empty bytes."""
    pos = mime_headers_end_pos(payload)
    if pos == -1 or len(payload) <= pos:
        return b""
    return payload[pos:]


def path(payload: bytes) -> bytes:
    """Request path, or empty bytes if the payload is not a request."""
    if not has_request_title(payload):
        return b""
    start = payload.find(b" ") + 1
    end = payload.find(b" ", start)
    return payload[start:end]


def set_path(payload: bytes, new_path: bytes) -> bytes:
    """Replace the second word of the title line; empty bytes without a title."""
    if not has_title(payload):
        return b""
    start = payload.find(b" ") + 1
    end = payload.find(b" ", start)
    if end == -1:
        return payload
    return payload[:start] + new_path + payload[end:]


def path_param(payload: bytes, name: bytes) -> tuple[bytes, int, int] | None:
    """Query parameter value with its start and end offsets inside the path."""
    request_path = path(payload)
    start = request_path.find(b"&" + name + b"=")
    if start == -1:
        start = request_path.find(b"?" + name + b"=")
        if start == -1:
            return None
    value_start = start + len(name) + 2
    value_end = request_path.find(b"&", value_start)
    if value_end == -1:
        value_end = len(request_path)
    return request_path[value_start:value_end], value_start, value_end


def set_path_param(payload: bytes, name: bytes, value: bytes) -> bytes:
    """Set a query parameter, appending it when missing."""
    request_path = path(payload)
    found = path_param(payload, name)
    if found is not None:
        _, start, end = found
        return set_path(payload, request_path[:start] + value + request_path[end:])
    sep = b"?" if b"?" not in request_path else b"&"
    return set_path(payload, request_path + sep + name + b"=" + value)


def set_host(payload: bytes, url: bytes | None, host: bytes) -> bytes:
    """Rewrite an absolute request path's host, or set the Host header."""
    request_path = path(payload)
    if request_path.startswith(b"http"):
        host_start = request_path.find(b":") + 3
        slash = request_path.find(b"/", host_start)
        host_end = slash if slash != -1 else len(request_path)
        return set_path(payload, (url or b"") + request_path[host_end:])
    return set_header(payload, b"Host", host)


def method(payload: bytes) -> bytes:
    """First word of the payload, or empty bytes."""
    end = payload.find(b" ")
    if end == -1:
        return b""
    return payload[:end]


def status(payload: bytes) -> bytes:
    """Three-digit response status, or empty bytes for non-responses."""
    if not has_response_title(payload):
        return b""
    start = payload.find(b" ") + 1
    return payload[start : start + 3]


def has_response_title(payload: bytes) -> bool:
    """Whether the payload starts with an HTTP/1 status line."""
    if len(payload) < MIN_RESPONSE_COUNT:
        return False
    if payload.find(CRLF) == -1:
        return False
    if payload[:VERSION_LEN] not in _VERSIONS:
        return False
    if payload[VERSION_LEN] != 0x20:
        return False
    code, ok = _atoi(payload[VERSION_LEN + 1 : VERSION_LEN + 4], 10)
    if not ok or code not in _KNOWN_STATUSES:
        return False
    return payload[VERSION_LEN + 4] in (0x20, 0x0D)


def has_request_title(payload: bytes) -> bool:
    """Whether the payload starts with an HTTP/1 request line."""
    if len(payload) < MIN_REQUEST_COUNT:
        return False
    title_len = payload.find(CRLF)
    if title_len == -1:
        return False
    if payload[:title_len].count(b" ") != 2:
        return False
    verb = method(payload)
    if verb not in METHODS:
        return False
    path_end = payload.find(b" ", len(verb) + 1)
    if path_end == -1:
        return False
    return payload[path_end + 1 : title_len] in _VERSIONS


def has_title(payload: bytes) -> bool:
    """Whether the payload has a request or response title."""
    return has_request_title(payload) or has_response_title(payload)


def check_chunked(buf: bytes) -> tuple[int, bool]:
    """Validate chunked body data.

    Returns the length of the valid chunks scanned and whether the final
    zero-length chunk was reached.
    """
    chunk_end = 0
    full = False
    while chunk_end < len(buf):
        cr = buf.find(b"\r", chunk_end)
        if cr == -1 or cr - chunk_end < 1:
            break
        size_field = buf[chunk_end:cr]
        chunk_len, ok = _atoi(size_field, 16)
        if not ok and size_field.find(b";") < 1:
            break
        lf = cr + 1
        total = lf + chunk_len + 2
        if (
            total >= len(buf)
            or (buf[lf] & buf[total]) != 0x0A
            or buf[total - 1] != 0x0D
        ):
            break
        chunk_end = total + 1
        if chunk_len == 0:
            full = True
            break
    return chunk_end, full


def has_full_payload(state: HTTPState | None, *payloads: bytes) -> bool:
    """Whether the given packets hold a complete HTTP message.

    ``state`` keeps parsing progress when the same message is checked
    repeatedly as packets arrive; pass ``None`` for a one-off check.
    """
    if state is None:
        state = HTTPState()
    if not payloads:
        return False
    first = payloads[0]
    if not has_request_title(first) and not has_response_title(first):
        return False

    if state.header_start < 1:
        state.header_start = mime_headers_start_pos(first)
        if state.header_start < 0:
            return False

    if state.body < 1 or state.header_end < 1:
        pos = 0
        for data in payloads:
            end_pos = mime_headers_end_pos(data)
            if end_pos < 0:
                pos += len(data)
            else:
                pos += end_pos
                state.header_end = pos
            if end_pos > 0:
                state.body = pos
                break

    if state.header_end < 1:
        return False

    if not state.header_parsed:
        pos = 0
        for data in payloads:
            if header(data, b"Transfer-Encoding") and data.find(b"chunked") > 0:
                state.is_chunked = True
                state.has_trailer = bool(header(data, b"Trailer"))
            else:
                state.body_len, _ = _atoi(header(data, b"Content-Length"), 10)
            pos += len(data)
            if header(data, b"Expect") == b"100-continue":
                state.continue100 = True
            if state.body_len > 0 or pos >= state.body:
                state.header_parsed = True
                break

    body_len = sum(len(data) for data in payloads) - state.body

    if state.is_chunked:
        if body_len < 1:
            return False
        last = payloads[-1]
        if state.has_trailer:
            return last.endswith(b"\r\n\r\n")
        if last.endswith(b"0\r\n\r\n"):
            state.has_full_payload = True
            return True
        return False

    return state.body_len == body_len