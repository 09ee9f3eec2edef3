from types import SimpleNamespace

from gorplay.null_output import NullOutput
from gorplay.protocol import REQUEST_PAYLOAD, payload_header


def test_reports_size_of_meta_and_data():
    msg = SimpleNamespace(meta=b"123\n", data=b"abcdef")
    assert NullOutput().plugin_write(msg) == 10


def test_empty_message_is_zero():
    assert NullOutput().plugin_write(SimpleNamespace(meta=b"", data=b"")) == 0


def test_size_grows_with_data():
    out = NullOutput()
    meta = payload_header(REQUEST_PAYLOAD, b"abcd", 1, -1)
    small = out.plugin_write(SimpleNamespace(meta=meta, data=b"GET / HTTP/1.1\r\n\r\n"))
    large = out.plugin_write(
        SimpleNamespace(meta=meta, data=b"GET / HTTP/1.1\r\nHost: example.com\r\n\r\n")
    )
    assert large - small == len(b"Host: example.com\r\n")


def test_string_form():
    assert str(NullOutput()) == "Null Output"