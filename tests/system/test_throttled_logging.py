import json
import logging
import sys

from telemetry_exporter.system.log_helpers import JSONFormatter, ThrottledLogger, format_date_for_log


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_throttled_logger_suppresses_within_window(caplog):
    """Mensagens idênticas dentro da janela são suprimidas e contadas."""
    clock = FakeClock()
    log = logging.getLogger("test.throttle")
    tl = ThrottledLogger(log, interval=300, clock=clock)
    caplog.set_level(logging.ERROR, logger="test.throttle")

    assert tl.error("accept error: %r", OSError(24, "x")) is True
    assert tl.error("accept error: %r", OSError(24, "y")) is False
    assert tl.error("accept error: %r", OSError(24, "z")) is False
    assert tl.suppressed_count(logging.ERROR, "accept error: %r") == 2
    assert len(caplog.records) == 1

    clock.now += 300
    assert tl.error("accept error: %r", OSError(24, "w")) is True
    assert len(caplog.records) == 2
    assert "2 mensagens semelhantes suprimidas" in caplog.records[-1].getMessage()
    assert tl.suppressed_count(logging.ERROR, "accept error: %r") == 0


def test_throttled_logger_keys_by_level_and_template(caplog):
    clock = FakeClock()
    log = logging.getLogger("test.throttle2")
    tl = ThrottledLogger(log, interval=60, clock=clock)
    caplog.set_level(logging.DEBUG, logger="test.throttle2")

    assert tl.error("a %s", 1)
    assert tl.error("b %s", 1)
    assert tl.warning("a %s", 1)
    assert not tl.error("a %s", 2)
    assert [r.levelno for r in caplog.records] == [logging.ERROR, logging.ERROR, logging.WARNING]


def test_format_date_for_log():
    assert format_date_for_log(0) == "1970-01-01"


def test_json_formatter_includes_exception():
    fmt = JSONFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        rec = logging.LogRecord("x", logging.ERROR, __file__, 1, "falha %s", ("aqui",), sys.exc_info())
    obj = json.loads(fmt.format(rec))
    assert obj["level"] == "ERROR"
    assert obj["msg"] == "falha aqui"
    assert "ValueError: boom" in obj["exc"]
