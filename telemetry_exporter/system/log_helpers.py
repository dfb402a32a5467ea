"""Helpers de logging: janela de supressão e formatação.

O ``ThrottledLogger`` evita que uma tempestade de erros idênticos (ex:
``accept`` falhando por falta de descritores) inunde o log. Mensagens com o
mesmo nível e o mesmo template são emitidas no máximo uma vez por janela; a
próxima emissão informa quantas foram suprimidas.
"""

import json
import logging
import threading
import time
import traceback

# Janela padrão (segundos) para mensagens repetidas
DEFAULT_THROTTLE_SECONDS = 300.0


class ThrottledLogger:
    """Encapsula um ``logging.Logger`` suprimindo mensagens repetidas."""

    def __init__(self, logger: logging.Logger, interval: float = DEFAULT_THROTTLE_SECONDS, clock=time.monotonic):
        self.logger = logger
        self.interval = float(interval)
        self._clock = clock
        self._lock = threading.Lock()
        self._last: dict[tuple[int, str], float] = {}
        self._suppressed: dict[tuple[int, str], int] = {}

    def log(self, level: int, msg: str, *args, **kwargs) -> bool:
        """Emite ``msg`` se a janela permitir; retorna True quando emitido."""
        key = (level, msg)
        now = self._clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and (now - last) < self.interval:
                self._suppressed[key] = self._suppressed.get(key, 0) + 1
                return False
            self._last[key] = now
            suppressed = self._suppressed.pop(key, 0)

        if suppressed:
            msg = msg + " (%d mensagens semelhantes suprimidas)"
            args = (*args, suppressed)
        self.logger.log(level, msg, *args, **kwargs)
        return True

    def error(self, msg: str, *args, **kwargs) -> bool:
        return self.log(logging.ERROR, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> bool:
        return self.log(logging.WARNING, msg, *args, **kwargs)

    def suppressed_count(self, level: int, msg: str) -> int:
        """Número de mensagens suprimidas desde a última emissão de ``msg``."""
        with self._lock:
            return self._suppressed.get((level, msg), 0)


def format_date_for_log(ts: float | None = None) -> str:
    """Data (UTC) no formato usado nos nomes de arquivo de log."""
    if ts is None:
        ts = time.time()
    return time.strftime("%Y-%m-%d", time.gmtime(ts))


class JSONFormatter(logging.Formatter):
    """Formata cada registro como uma linha JSON para ingestão."""

    def format(self, record):
        try:
            ts = self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ")
        except Exception:
            ts = ""
        obj = {
            "ts": ts,
            "level": record.levelname,
            "name": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            try:
                obj["exc"] = "".join(traceback.format_exception(*record.exc_info))
            except Exception:
                logging.getLogger(__name__).warning("Falha ao formatar exc_info para JSON", exc_info=True)
        return json.dumps(obj, ensure_ascii=False)
