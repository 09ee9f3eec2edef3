# gorplay

Building blocks for recording HTTP traffic and replaying it elsewhere:
byte-level reading and rewriting of raw HTTP/1.x messages, the framing of
recorded messages, application settings with a command-line parser, and a
small raw TCP request/response client.

## Working with raw HTTP payloads

`gorplay.proto` works directly on the bytes of a request or response,
without fully parsing it, so partial or slightly malformed traffic is
handled gracefully.

```python
from gorplay import proto

payload = b"POST /post HTTP/1.1\r\nContent-Length: 7\r\nHost: www.w3.org\r\n\r\na=1&b=2"

proto.header(payload, b"Content-Length")   # b"7"
proto.path(payload)                        # b"/post"
proto.method(payload)                      # b"POST"
proto.body(payload)                        # b"a=1&b=2"

proto.set_header(payload, b"Content-Length", b"14")
# b"POST /post HTTP/1.1\r\nContent-Length: 14\r\nHost: www.w3.org\r\n\r\na=1&b=2"

proto.set_path_param(payload, b"param", b"test")
# b"POST /post?param=test HTTP/1.1\r\n..."
```

* Header lookup (`header`, `find_header`) is case-insensitive and trims
  whitespace around the value. `find_header` returns a `HeaderSpan` with the
  value and its offsets, or `None`; `header` returns empty bytes when the
  header is missing.
* `add_header` inserts a header at the start of the header section,
  `set_header` replaces a value or adds the header, `delete_header` removes
  the whole line.
* `path`, `set_path`, `path_param` and `set_path_param` read and rewrite the
  request path and its query parameters. `path_param` returns the value with
  its start and end offsets inside the path, or `None`.
* `set_host` rewrites the host inside an absolute-URI path (proxy or
  HTTP/1.0 style requests), and otherwise sets the `Host` header.
* `parse_headers` and `get_headers` return the header block as a dict of
  canonical header names to lists of values, or `None` when it is malformed.
* `has_request_title`, `has_response_title` and `has_title` recognise the
  first line of an HTTP/1.0 or HTTP/1.1 message; `status` returns the
  three-digit status of a response.

### Checking whether a message is complete

When traffic arrives packet by packet, `has_full_payload` tells whether the
pieces collected so far form a complete message. It understands
`Content-Length`, chunked transfer encoding and trailers. Pass an
`HTTPState` to keep parsing progress between calls, or `None` for a one-off
check:

```python
from gorplay import proto

proto.has_full_payload(
    None,
    b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n",
    b"Transfer-Encoding: chunked\r\n\r\n",
    b"7\r\nMozilla\r\n9\r\nDeveloper\r\n",
    b"7\r\nNetwork\r\n0\r\n\r\n",
)  # True
```

`check_chunked` validates a chunked body on its own and returns the length
of the valid chunks found together with whether the final zero-length
chunk was reached.

## Recorded message format

Every recorded message starts with a metadata line: the payload type
(`1` request, `2` response, `3` replayed response), a hex identifier, a
timestamp and a latency, separated by spaces. `gorplay.protocol` builds and
reads these lines:

* `payload_header` builds the metadata line;
* `payload_meta`, `payload_id`, `payload_body` and `payload_meta_with_body`
  take a message apart;
* `is_request_payload` and `is_origin_payload` classify it;
* `new_uuid` and `rand_hex` make random hex identifiers;
* `iter_payloads` splits bytes, or an iterable of byte chunks, written with
  `PAYLOAD_SEPARATOR` back into individual messages.

## Settings and options

`gorplay.settings` holds the configuration dataclasses `AppSettings`,
`HTTPOutputConfig`, `TCPOutputConfig` and `WebSocketOutputConfig`
(durations in seconds), a shared `settings` instance, and `VERSION`.
`AppSettings.to_dict()` gives a JSON-ready view keyed by option name, and
`HTTPOutputConfig.copy()` copies the public options. `debug(level, *args)`
writes a timestamped line to stderr when `settings.verbose` is at least
`level`.

`gorplay.options` turns command-line style arguments into an `AppSettings`:

```python
from gorplay.options import parse_args, check_settings

opts = check_settings(parse_args(["--output-http", "http://staging.example.com",
                                  "--output-http-timeout", "30s", "-verbose", "1"]))
opts.output_http                   # ["http://staging.example.com"]
opts.output_http_config.timeout    # 30.0
```

Each option accepts one or two leading dashes. Durations take forms such as
`100ms` or `1m30s`, sizes such as `5mb` (1024-based units), and boolean
options may be given alone or with an explicit value. `build_parser`
returns the underlying `argparse` parser; `check_settings` restores the
default copy buffer size when it is below one byte.

## Other pieces

* `gorplay.tcp_client.TCPClient` keeps a connection to an address,
  reconnecting when the peer has closed it, optionally over TLS without
  certificate checks. `send` writes a payload and reads the reply until the
  peer closes, cut to `response_buffer_size` bytes; errors are raised.
  Options live in `TCPClientConfig`.
* `gorplay.null_output.NullOutput` accepts messages (objects with `meta`
  and `data` bytes) and drops them, reporting their full size as written.

## What this package does not do

It has no traffic capture, no inputs, no command-line program, and no
outputs that actually replay traffic: nothing here sends recorded requests
to an HTTP server, forwards messages over persistent TCP or WebSocket
connections, or wires inputs and outputs together. The settings and options
for those outputs exist, but nothing in the package acts on them.

## Running the tests

Install the package with its `test` extra and run pytest from the project
directory.