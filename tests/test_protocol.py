import string

import pytest

from gorplay.protocol import (
    PAYLOAD_SEPARATOR_BYTES,
    REPLAYED_RESPONSE_PAYLOAD,
    REQUEST_PAYLOAD,
    RESPONSE_PAYLOAD,
    is_origin_payload,
    is_request_payload,
    iter_payloads,
    new_uuid,
    payload_body,
    payload_header,
    payload_id,
    payload_meta,
    payload_meta_with_body,
    rand_hex,
)

HEX = set(string.hexdigits.lower().encode())


@pytest.mark.parametrize("length", [4, 20, 24])
def test_rand_hex_length_and_alphabet(length):
    value = rand_hex(length)
    assert len(value) == length
    assert set(value) <= HEX


def test_new_uuid_is_unique_hex():
    first, second = new_uuid(), new_uuid()
    assert len(first) == 24
    assert set(first) <= HEX
    assert first != second


def test_payload_header_format():
    assert payload_header(REQUEST_PAYLOAD, b"abc", 1, 2) == b"1 abc 1 2\n"


def test_payload_header_meta_round_trip():
    uuid = new_uuid()
    header = payload_header(REPLAYED_RESPONSE_PAYLOAD, uuid, 13923489726487326, 1231)
    assert payload_meta(header) == [b"3", uuid, b"13923489726487326", b"1231"]
    assert payload_id(header) == uuid


def test_payload_body_and_meta_with_body():
    meta = payload_header(RESPONSE_PAYLOAD, b"id", 5, -1)
    data = b"GET / HTTP/1.1\r\n\r\n"
    assert payload_body(meta + data) == data
    assert payload_meta_with_body(meta + data) == (meta, data)


def test_payload_without_meta():
    data = b"no newline here"
    assert payload_meta(data) is None
    assert payload_id(data) == b""
    assert payload_body(data) == data
    assert payload_meta_with_body(data) == (None, data)
    assert payload_meta_with_body(b"meta only\n") == (None, b"meta only\n")


def test_payload_type_checks():
    assert is_request_payload(b"1 x 1 1\n")
    assert not is_request_payload(b"2 x 1 1\n")
    assert is_origin_payload(b"1 x 1 1\n")
    assert is_origin_payload(b"2 x 1 1\n")
    assert not is_origin_payload(b"3 x 1 1\n")
    assert not is_origin_payload(b"")


def test_iter_payloads_splits_stream():
    messages = [b"first", b"second message", b"third"]
    stream = PAYLOAD_SEPARATOR_BYTES.join(messages) + PAYLOAD_SEPARATOR_BYTES
    assert list(iter_payloads(stream)) == messages


def test_iter_payloads_across_small_chunks():
    messages = [b"alpha\nbeta", b"gamma"]
    stream = PAYLOAD_SEPARATOR_BYTES.join(messages) + PAYLOAD_SEPARATOR_BYTES
    chunks = [stream[i : i + 3] for i in range(0, len(stream), 3)]
    assert list(iter_payloads(chunks)) == messages


def test_iter_payloads_yields_trailing_data():
    stream = b"one" + PAYLOAD_SEPARATOR_BYTES + b"tail"
    assert list(iter_payloads(stream)) == [b"one", b"tail"]
    assert list(iter_payloads(b"")) == []