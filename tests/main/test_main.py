import importlib

import pytest

from telemetry_exporter.exporter.server import BindError


@pytest.fixture
def main_mod(monkeypatch, tmp_path):
    mod = importlib.import_module("telemetry_exporter.main")
    monkeypatch.setenv("TELEMETRY_ENV_FILE", str(tmp_path / "sem.env"))
    monkeypatch.delenv("TELEMETRY_METRICS_ADDRESS", raising=False)
    monkeypatch.delenv("TELEMETRY_SAMPLE_INTERVAL_SEC", raising=False)
    # evita handlers de arquivo e hooks globais durante os testes
    monkeypatch.setattr(mod, "setup_logging", lambda level, root=None: None)
    return mod


def test_main_starts_exporter_runs_loop_and_stops(main_mod, monkeypatch):
    """main liga o exporter no endereço da CLI, roda o loop e encerra o exporter."""
    events = {}

    class FakeServer:
        def stop(self, timeout=None):
            events["stopped"] = True

    def fake_start(address, handle, **kwargs):
        events["address"] = address
        events["kwargs"] = kwargs
        return FakeServer()

    def fake_loop(handle, server, interval, cycles):
        events["loop"] = (interval, cycles)
        return cycles

    monkeypatch.setattr(main_mod, "start_exporter", fake_start)
    monkeypatch.setattr(main_mod, "_run_loop", fake_loop)

    main_mod.main(["--address", "127.0.0.1:0", "-c", "1", "-i", "0"])
    assert events["address"] == "127.0.0.1:0"
    assert events["kwargs"] == {"request_timeout": None, "lock_timeout": None}
    assert events["loop"] == (0.0, 1)
    assert events["stopped"] is True


def test_main_uses_settings_when_cli_absent(main_mod, monkeypatch):
    events = {}
    monkeypatch.setenv("TELEMETRY_METRICS_ADDRESS", "127.0.0.1:0")
    monkeypatch.setenv("TELEMETRY_SAMPLE_INTERVAL_SEC", "0")
    monkeypatch.setattr(main_mod, "_run_loop", lambda h, s, interval, cycles: events.update(interval=interval))

    real_start = main_mod.start_exporter

    def spy_start(address, handle, **kwargs):
        events["address"] = address
        server = real_start(address, handle, **kwargs)
        events["server"] = server
        return server

    monkeypatch.setattr(main_mod, "start_exporter", spy_start)
    main_mod.main(["-c", "1"])
    assert events["address"] == "127.0.0.1:0"
    assert events["interval"] == 0.0
    assert not events["server"].is_alive()


def test_main_exits_on_bind_error(main_mod, monkeypatch):
    def failing_start(address, handle, **kwargs):
        raise BindError("endereço em uso")

    monkeypatch.setattr(main_mod, "start_exporter", failing_start)
    monkeypatch.setattr(main_mod, "_run_loop", lambda *a, **k: pytest.fail("loop não deveria rodar"))
    with pytest.raises(SystemExit) as ei:
        main_mod.main(["--address", "127.0.0.1:0"])
    assert ei.value.code == 2
