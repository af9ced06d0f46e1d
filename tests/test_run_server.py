"""Launcher defaults for the Uvicorn entry point."""
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_run_server.db")

import run_server  # noqa: E402


def _capture_run(monkeypatch) -> dict:
    calls: dict = {}

    def _fake_run(target, **kwargs) -> None:
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setattr(run_server.uvicorn, "run", _fake_run)
    return calls


def test_reload_defaults_on(monkeypatch):
    for name in ("UVICORN_RELOAD", "COLLABFEED_HOST", "COLLABFEED_PORT"):
        monkeypatch.delenv(name, raising=False)
    calls = _capture_run(monkeypatch)

    run_server.main()

    assert calls["target"] == "collabfeed.main:app"
    assert (calls["host"], calls["port"], calls["reload"]) == ("0.0.0.0", 8000, True)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("UVICORN_RELOAD", "False")
    monkeypatch.setenv("COLLABFEED_HOST", "127.0.0.1")
    monkeypatch.setenv("COLLABFEED_PORT", "9001")
    calls = _capture_run(monkeypatch)

    run_server.main()

    assert (calls["host"], calls["port"], calls["reload"]) == ("127.0.0.1", 9001, False)
