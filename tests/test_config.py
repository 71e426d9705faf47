from __future__ import annotations

import importlib

import pytest

import leiverify.config as cfg


@pytest.fixture
def reload_cfg(monkeypatch):
    yield lambda: importlib.reload(cfg)
    # restore the real environment before re-evaluating the constants
    monkeypatch.undo()
    importlib.reload(cfg)


def test_defaults_from_env(monkeypatch, reload_cfg):
    monkeypatch.setenv("LEIVERIFY_BASE_URL", "https://gleif.example.test/api/v1")
    monkeypatch.setenv("LEIVERIFY_RATE_LIMIT", "30")
    monkeypatch.setenv("LEIVERIFY_WINDOW_S", "10")
    monkeypatch.setenv("LEIVERIFY_TIMEOUT_S", "5.5")
    monkeypatch.setenv("LEIVERIFY_BATCH_SIZE", "4")
    monkeypatch.setenv("LEIVERIFY_BATCH_DELAY_S", "0.25")
    monkeypatch.setenv("LEIVERIFY_MAX_CHILDREN", "3")
    monkeypatch.setenv("LEIVERIFY_FUZZY_LIMIT", "7")

    reload_cfg()

    assert cfg.GLEIF_BASE_URL == "https://gleif.example.test/api/v1"
    assert cfg.DEFAULT_RATE_LIMIT == 30
    assert cfg.DEFAULT_WINDOW_S == 10.0
    assert cfg.DEFAULT_TIMEOUT_S == 5.5
    assert cfg.DEFAULT_BATCH_SIZE == 4
    assert cfg.DEFAULT_BATCH_DELAY_S == 0.25
    assert cfg.DEFAULT_MAX_CHILDREN == 3
    assert cfg.DEFAULT_FUZZY_LIMIT == 7

    c = cfg.ClientConfig()
    assert c.base_url == "https://gleif.example.test/api/v1"
    assert c.rate_limit == 30
    assert c.batch_size == 4


def test_reference_defaults(monkeypatch, reload_cfg):
    for name in (
        "LEIVERIFY_BASE_URL",
        "LEIVERIFY_RATE_LIMIT",
        "LEIVERIFY_WINDOW_S",
        "LEIVERIFY_TIMEOUT_S",
        "LEIVERIFY_BATCH_SIZE",
        "LEIVERIFY_BATCH_DELAY_S",
        "LEIVERIFY_MAX_CHILDREN",
        "LEIVERIFY_FUZZY_LIMIT",
        "LEIVERIFY_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)
    reload_cfg()

    c = cfg.ClientConfig()
    assert c.base_url == "https://api.gleif.org/api/v1"
    assert c.rate_limit == 60
    assert c.window_s == 60.0
    assert c.timeout_s == 30.0
    assert c.batch_size == 10
    assert c.batch_delay_s == 1.0
    assert c.max_children == 10
    assert c.fuzzy_limit == 10
    assert c.retries == 0


def test_base_url_trailing_slash_stripped():
    c = cfg.ClientConfig(base_url="https://x.test/api/v1/")
    assert c.base_url == "https://x.test/api/v1"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rate_limit": 0},
        {"window_s": -1},
        {"timeout_s": 0},
        {"batch_size": 0},
        {"max_children": 0},
        {"batch_delay_s": -0.1},
        {"retries": -1},
        {"base_url": "ftp://nope"},
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        cfg.ClientConfig(**kwargs)


def test_with_rpm():
    c = cfg.ClientConfig.with_rpm(30, debug=True)
    assert c.rate_limit == 30
    assert c.window_s == 60.0
    assert c.debug is True


def test_clamp_page_size():
    assert cfg.clamp_page_size(0) == 1
    assert cfg.clamp_page_size(50) == 50
    assert cfg.clamp_page_size(5000) == cfg.MAX_PAGE_SIZE


def test_get_env_required_ok(monkeypatch):
    monkeypatch.setenv("X_TEST_KEY", "ok")
    assert cfg.get_env("X_TEST_KEY", required=True) == "ok"


def test_get_env_required_missing(monkeypatch):
    monkeypatch.delenv("X_MISSING_KEY", raising=False)
    with pytest.raises(RuntimeError):
        cfg.get_env("X_MISSING_KEY", required=True)
