from __future__ import annotations

from sma_signal_service.app import main as app_main
from sma_signal_service.web import server


def test_main_serves_app_with_configured_host_and_port(monkeypatch, tmp_path):
    calls: list[dict] = []

    def _fake_run(app, **kwargs):
        calls.append({"app": app, **kwargs})

    config = server.APP_CONFIG.model_copy(deep=True)
    config.logging.log_dir = str(tmp_path / "logs")
    monkeypatch.setattr(server, "APP_CONFIG", config)
    monkeypatch.setattr(app_main.uvicorn, "run", _fake_run)

    app_main.main()

    assert len(calls) == 1
    assert calls[0]["app"] is server.app
    assert calls[0]["host"] == config.server.host
    assert calls[0]["port"] == config.server.port
    assert (tmp_path / "logs").is_dir()
