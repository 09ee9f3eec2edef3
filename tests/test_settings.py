import json

import pytest

from gorplay import settings as settings_module
from gorplay.settings import (
    AppSettings,
    HTTPOutputConfig,
    TCPOutputConfig,
    WebSocketOutputConfig,
    debug,
)


def test_app_settings_marshals_to_json():
    encoded = json.dumps(AppSettings().to_dict())
    decoded = json.loads(encoded)
    assert decoded["verbose"] == 0
    assert decoded["output-http"] == []
    assert decoded["input_raw"] == []


def test_to_dict_uses_option_names_and_skips_hidden_fields():
    app = AppSettings(output_tcp_config=TCPOutputConfig(get_init_message=lambda: None))
    exported = app.to_dict()
    assert set(exported["output_tcp_config"]) == {
        "output-tcp-secure",
        "output-tcp-sticky",
        "output-tcp-skip-verify",
        "output-tcp-workers",
    }
    assert "raw_url" not in exported["output_http_config"]
    assert "url" not in exported["output_http_config"]


def test_to_dict_keeps_values():
    app = AppSettings(
        output_http=["http://localhost:9000"],
        output_ws_config=WebSocketOutputConfig(headers={"key1": ["value1"]}),
    )
    exported = app.to_dict()
    assert exported["output-http"] == ["http://localhost:9000"]
    assert exported["output_ws_config"]["output-ws-headers"] == {"key1": ["value1"]}


def test_flag_defaults():
    app = AppSettings()
    assert app.output_tcp_config.workers == 10
    assert app.output_ws_config.workers == 10
    assert app.output_http_config.queue_len == 1000
    assert app.input_file_read_depth == 100


def test_http_config_copy_drops_resolved_url():
    original = HTTPOutputConfig(track_responses=True, workers_max=4, raw_url="http://x", url=object())
    copied = original.copy()
    assert copied.track_responses is True
    assert copied.workers_max == 4
    assert copied.raw_url == ""
    assert copied.url is None
    copied.workers_max = 7
    assert original.workers_max == 4


def test_settings_instances_do_not_share_lists():
    first = AppSettings()
    second = AppSettings()
    first.output_http.append("a")
    assert second.output_http == []


def test_debug_writes_when_verbose_enough(monkeypatch, capsys):
    monkeypatch.setattr(settings_module.settings, "verbose", 2)
    debug(1, "hello", 42, b"bytes")
    err = capsys.readouterr().err
    assert err.startswith("[DEBUG][elapsed ")
    assert err.endswith("]: hello 42 bytes\n")


@pytest.mark.parametrize("verbose", [0, 1])
def test_debug_silent_below_level(monkeypatch, capsys, verbose):
    monkeypatch.setattr(settings_module.settings, "verbose", verbose)
    debug(2, "hidden")
    assert capsys.readouterr().err == ""