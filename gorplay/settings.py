"""Application settings, output configurations and debug logging."""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Callable

VERSION = "0.0.1"


def _tag(name: str) -> dict[str, str]:
    return {"json": name}


_HIDDEN = {"json": "-"}


def _export(value: Any) -> Any:
    """Turn nested settings into plain JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for f in fields(value):
            key = f.metadata.get("json", f.name)
            if key == "-":
                continue
            out[key] = _export(getattr(value, f.name))
        return out
    if isinstance(value, dict):
        return {str(k): _export(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_export(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", "replace")
    return value


@dataclass
class TCPOutputConfig:
    """Configuration of the TCP output.

    ``get_init_message`` returns a message written once after connecting;
    ``write_before_message(conn, msg)`` writes extra bytes before each
    message and raises to signal a broken connection.
    """

    secure: bool = field(default=False, metadata=_tag("output-tcp-secure"))
    sticky: bool = field(default=False, metadata=_tag("output-tcp-sticky"))
    skip_verify: bool = field(default=False, metadata=_tag("output-tcp-skip-verify"))
    workers: int = field(default=10, metadata=_tag("output-tcp-workers"))
    get_init_message: Callable[[], Any] | None = field(default=None, metadata=_HIDDEN)
    write_before_message: Callable[[Any, Any], None] | None = field(
        default=None, metadata=_HIDDEN
    )


@dataclass
class WebSocketOutputConfig:
    """Configuration of the WebSocket output."""

    sticky: bool = field(default=False, metadata=_tag("output-ws-sticky"))
    skip_verify: bool = field(default=False, metadata=_tag("output-ws-skip-verify"))
    workers: int = field(default=10, metadata=_tag("output-ws-workers"))
    headers: dict[str, list[str]] = field(
        default_factory=dict, metadata=_tag("output-ws-headers")
    )


@dataclass
class HTTPOutputConfig:
    """Configuration of the HTTP output; durations are in seconds."""

    track_responses: bool = field(default=False, metadata=_tag("output-http-track-response"))
    stats: bool = field(default=False, metadata=_tag("output-http-stats"))
    original_host: bool = field(default=False, metadata=_tag("output-http-original-host"))
    redirect_limit: int = field(default=0, metadata=_tag("output-http-redirect-limit"))
    workers_min: int = field(default=0, metadata=_tag("output-http-workers-min"))
    workers_max: int = field(default=0, metadata=_tag("output-http-workers"))
    stats_ms: int = field(default=5000, metadata=_tag("output-http-stats-ms"))
    queue_len: int = field(default=1000, metadata=_tag("output-http-queue-len"))
    elasticsearch: str = field(default="", metadata=_tag("output-http-elasticsearch"))
    timeout: float = field(default=5.0, metadata=_tag("output-http-timeout"))
    worker_timeout: float = field(default=2.0, metadata=_tag("output-http-worker-timeout"))
    buffer_size: int = field(default=0, metadata=_tag("output-http-response-buffer"))
    skip_verify: bool = field(default=False, metadata=_tag("output-http-skip-verify"))
    compatibility_mode: bool = field(
        default=False, metadata=_tag("output-http-compatibility-mode")
    )
    request_group: str = field(default="", metadata=_tag("output-http-request-group"))
    debug: bool = field(default=False, metadata=_tag("output-http-debug"))
    raw_url: str = field(default="", metadata=_HIDDEN)
    url: Any = field(default=None, metadata=_HIDDEN)

    def copy(self) -> HTTPOutputConfig:
        """Copy of the public options, without the resolved target URL."""
        return replace(self, raw_url="", url=None)


@dataclass
class AppSettings:
    """Main configuration; durations are in seconds."""

    verbose: int = field(default=0, metadata=_tag("verbose"))
    stats: bool = field(default=False, metadata=_tag("stats"))
    exit_after: float = field(default=0.0, metadata=_tag("exit-after"))

    split_output: bool = field(default=False, metadata=_tag("split-output"))
    recognize_tcp_sessions: bool = field(default=False, metadata=_tag("recognize-tcp-sessions"))
    pprof: str = field(default="", metadata=_tag("http-pprof"))

    copy_buffer_size: int = field(default=5242880, metadata=_tag("copy-buffer-size"))

    input_dummy: list[str] = field(default_factory=list, metadata=_tag("input-dummy"))
    output_dummy: list[str] = field(default_factory=list)
    output_stdout: bool = field(default=False, metadata=_tag("output-stdout"))
    output_null: bool = field(default=False, metadata=_tag("output-null"))

    input_tcp: list[str] = field(default_factory=list, metadata=_tag("input-tcp"))
    output_tcp: list[str] = field(default_factory=list, metadata=_tag("output-tcp"))
    output_tcp_config: TCPOutputConfig = field(default_factory=TCPOutputConfig)
    output_tcp_stats: bool = field(default=False, metadata=_tag("output-tcp-stats"))

    output_ws: list[str] = field(default_factory=list, metadata=_tag("output-ws"))
    output_ws_config: WebSocketOutputConfig = field(default_factory=WebSocketOutputConfig)
    output_ws_stats: bool = field(default=False, metadata=_tag("output-ws-stats"))

    input_file: list[str] = field(default_factory=list, metadata=_tag("input-file"))
    input_file_loop: bool = field(default=False, metadata=_tag("input-file-loop"))
    input_file_read_depth: int = field(default=100, metadata=_tag("input-file-read-depth"))
    input_file_dry_run: bool = field(default=False, metadata=_tag("input-file-dry-run"))
    input_file_max_wait: float = field(default=0.0, metadata=_tag("input-file-max-wait"))
    output_file: list[str] = field(default_factory=list, metadata=_tag("output-file"))

    input_raw: list[str] = field(default_factory=list, metadata=_tag("input_raw"))

    middleware: str = field(default="", metadata=_tag("middleware"))

    input_http: list[str] = field(default_factory=list)
    output_http: list[str] = field(default_factory=list, metadata=_tag("output-http"))
    prettify_http: bool = field(default=False, metadata=_tag("prettify-http"))
    output_http_config: HTTPOutputConfig = field(default_factory=HTTPOutputConfig)

    output_binary: list[str] = field(default_factory=list, metadata=_tag("output-binary"))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view of the settings, keyed by option name."""
        return _export(self)


settings = AppSettings()
"""Settings shared by the running application."""

_debug_lock = threading.Lock()
_previous_debug_time = time.monotonic()


def _format_elapsed(seconds: float) -> str:
    if seconds < 1e-6:
        return f"{seconds * 1e9:.0f}ns"
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"


def _text(arg: Any) -> str:
    if isinstance(arg, (bytes, bytearray)):
        return bytes(arg).decode("utf-8", "replace")
    return str(arg)


def debug(level: int, *args: Any) -> None:
    """Write a debug line to stderr when ``settings.verbose >= level``."""
    global _previous_debug_time
    if settings.verbose < level:
        return
    with _debug_lock:
        now = time.monotonic()
        elapsed = now - _previous_debug_time
        _previous_debug_time = now
        line = " ".join(_text(a) for a in args)
        print(f"[DEBUG][elapsed {_format_elapsed(elapsed)}]: {line}", file=sys.stderr)