"""Command-line options that fill in :class:`~gorplay.settings.AppSettings`."""

from __future__ import annotations

import argparse
import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from gorplay.settings import VERSION, AppSettings

DEMO = ""
"""Non-empty when running in demo mode; the run is then capped at five minutes."""

_DEMO_EXIT_AFTER = 5 * 60.0
_DEFAULT_COPY_BUFFER_SIZE = 5 * 1024 * 1024

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "kb": 1024,
    "mb": 1024**2,
    "gb": 1024**3,
    "tb": 1024**4,
}
_SIZE_RE = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*")


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _parse_int(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        try:
            return int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer value {text!r}") from None


def _parse_duration(text: str) -> float:
    """Parse a duration such as ``1m30s`` or ``100ms`` into seconds."""
    rest = text
    sign = 1.0
    if rest[:1] in ("-", "+"):
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None:
            raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def _parse_size(text: str) -> int:
    """Parse a byte size such as ``5mb`` or ``100kb`` (1024-based units)."""
    match = _SIZE_RE.fullmatch(text)
    if match is None:
        raise argparse.ArgumentTypeError(f"invalid size {text!r}")
    unit = match.group(2).lower()
    if unit not in _SIZE_UNITS:
        raise argparse.ArgumentTypeError(f"invalid size unit in {text!r}")
    return int(float(match.group(1)) * _SIZE_UNITS[unit])


@dataclass(frozen=True)
class _Option:
    name: str
    dest: str
    kind: str
    help: str


_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "str": str,
    "int": _parse_int,
    "duration": _parse_duration,
    "size": _parse_size,
}

_OPTIONS: tuple[_Option, ...] = (
    _Option("http-pprof", "pprof", "str",
            "Enable profiling on the given address, e.g. `:8181`."),
    _Option("verbose", "verbose", "int",
            "Level of verbosity; greater than zero turns on debug output."),
    _Option("stats", "stats", "bool", "Turn on queue stats output."),
    _Option("exit-after", "exit_after", "duration", "Exit after the given duration."),
    _Option("split-output", "split_output", "bool",
            "Split traffic equally among all outputs instead of copying it to each."),
    _Option("recognize-tcp-sessions", "recognize_tcp_sessions", "bool",
            "HTTP output creates a separate worker for each TCP session."),
    _Option("input-dummy", "input_dummy", "multi",
            "Used for testing outputs. Emits 'GET /' request every 1s."),
    _Option("output-stdout", "output_stdout", "bool",
            "Used for testing inputs. Prints data coming from inputs."),
    _Option("output-null", "output_null", "bool",
            "Used for testing inputs. Drops all requests."),
    _Option("input-tcp", "input_tcp", "multi",
            "Receive payloads from other instances on the given address."),
    _Option("output-tcp", "output_tcp", "multi",
            "Forward payloads to another instance at the given address."),
    _Option("output-tcp-secure", "output_tcp_config.secure", "bool",
            "Use a TLS connection."),
    _Option("output-tcp-skip-verify", "output_tcp_config.skip_verify", "bool",
            "Don't verify hostname on TLS connection."),
    _Option("output-tcp-sticky", "output_tcp_config.sticky", "bool",
            "Send payloads with the same ID to the same connection."),
    _Option("output-tcp-workers", "output_tcp_config.workers", "int",
            "Number of parallel TCP connections, default is 10."),
    _Option("output-tcp-stats", "output_tcp_stats", "bool",
            "Report TCP output queue stats every 5 seconds."),
    _Option("output-ws", "output_ws", "multi",
            "Like output-tcp, over WebSocket, e.g. wss://replay.local:28020/endpoint."),
    _Option("output-ws-skip-verify", "output_ws_config.skip_verify", "bool",
            "Don't verify hostname on TLS connection."),
    _Option("output-ws-sticky", "output_ws_config.sticky", "bool",
            "Send payloads with the same ID to the same connection."),
    _Option("output-ws-workers", "output_ws_config.workers", "int",
            "Number of parallel WebSocket connections, default is 10."),
    _Option("output-ws-stats", "output_ws_stats", "bool",
            "Report WebSocket output queue stats every 5 seconds."),
    _Option("input-file", "input_file", "multi", "Read requests from file."),
    _Option("input-file-loop", "input_file_loop", "bool", "Loop input files."),
    _Option("input-file-read-depth", "input_file_read_depth", "int",
            "Number of records read and sorted in advance."),
    _Option("input-file-dry-run", "input_file_dry_run", "bool",
            "Simulate reading from the data source without replaying it."),
    _Option("input-file-max-wait", "input_file_max_wait", "duration",
            "Maximum time between requests."),
    _Option("output-file", "output_file", "multi", "Write incoming requests to file."),
    _Option("prettify-http", "prettify_http", "bool",
            "Decode gzip and chunked requests and responses."),
    _Option("copy-buffer-size", "copy_buffer_size", "size",
            "Buffer size for an individual request (default 5MB)."),
    _Option("input-raw", "input_raw", "multi", "Capture traffic from the given port."),
    _Option("middleware", "middleware", "str",
            "Used for modifying traffic using an external command."),
    _Option("output-http", "output_http", "multi",
            "Forward incoming requests to the given HTTP address."),
    _Option("output-http-response-buffer", "output_http_config.buffer_size", "size",
            "HTTP response buffer size; data beyond it is discarded."),
    _Option("output-http-workers-min", "output_http_config.workers_min", "int",
            "Minimum number of HTTP workers, default 1."),
    _Option("output-http-workers", "output_http_config.workers_max", "int",
            "Maximum number of HTTP workers, default 0 = unlimited."),
    _Option("output-http-queue-len", "output_http_config.queue_len", "int",
            "Number of requests that can be queued, default 1000."),
    _Option("output-http-skip-verify", "output_http_config.skip_verify", "bool",
            "Don't verify hostname on TLS connection."),
    _Option("output-http-worker-timeout", "output_http_config.worker_timeout", "duration",
            "Duration after which idle workers are rolled back."),
    _Option("output-http-redirects", "output_http_config.redirect_limit", "int",
            "How many redirects to follow."),
    _Option("output-http-timeout", "output_http_config.timeout", "duration",
            "HTTP request/response timeout, default 5s."),
    _Option("output-http-track-response", "output_http_config.track_responses", "bool",
            "Pass HTTP output responses on to all outputs."),
    _Option("output-http-stats", "output_http_config.stats", "bool",
            "Report HTTP output queue stats every output-http-stats-ms."),
    _Option("output-http-stats-ms", "output_http_config.stats_ms", "int",
            "Interval of HTTP output queue stats in milliseconds, default 5000."),
    _Option("http-original-host", "output_http_config.original_host", "bool",
            "Preserve the original Host header instead of the output's host."),
    _Option("output-http-elasticsearch", "output_http_config.elasticsearch", "str",
            "Send request and response stats to ElasticSearch."),
    _Option("output-binary", "output_binary", "multi",
            "Forward incoming binary payloads to the given address."),
)


def build_parser() -> argparse.ArgumentParser:
    """Parser for all options; each accepts one or two leading dashes."""
    parser = argparse.ArgumentParser(
        prog="gor",
        description=(
            "Gor is a simple http traffic replication tool. Its main goal is to "
            "replay traffic from production servers to staging and dev "
            f"environments. Current Version: v{VERSION}"
        ),
        allow_abbrev=False,
    )
    for opt in _OPTIONS:
        if opt.name == "exit-after" and DEMO:
            continue
        flags = ["--" + opt.name, "-" + opt.name]
        common: dict[str, Any] = {
            "dest": opt.dest,
            "default": argparse.SUPPRESS,
            "help": opt.help,
        }
        if opt.kind == "bool":
            parser.add_argument(*flags, nargs="?", const=True, type=_parse_bool, **common)
        elif opt.kind == "multi":
            parser.add_argument(*flags, action="append", metavar="VALUE", **common)
        else:
            parser.add_argument(*flags, type=_CONVERTERS[opt.kind], **common)
    return parser


def _assign(target: Any, dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    for name in parents:
        target = getattr(target, name)
    setattr(target, leaf, value)


def parse_args(argv: Sequence[str] | None = None) -> AppSettings:
    """Build settings from command-line arguments; unset options keep defaults."""
    namespace = build_parser().parse_args(argv)
    result = AppSettings()
    if DEMO:
        result.exit_after = _DEMO_EXIT_AFTER
    for dest, value in vars(namespace).items():
        _assign(result, dest, value)
    return result


def check_settings(settings: AppSettings) -> AppSettings:
    """Restore defaults for sizes that were left unset or made invalid."""
    if settings.copy_buffer_size < 1:
        settings.copy_buffer_size = _DEFAULT_COPY_BUFFER_SIZE
    return settings