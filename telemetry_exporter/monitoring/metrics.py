"""Coleta métricas do processo hospedeiro.

Usa ``psutil`` para CPU, memória, uptime, threads e descritores abertos do
próprio processo e grava os valores na telemetria compartilhada.
"""

import logging
import time

import psutil

from .state import TelemetryHandle

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    "cpu_percent": "CPU do processo em percentagem",
    "memory_percent": "Memória do processo em percentagem da RAM total",
    "memory_rss_bytes": "Resident set size do processo em bytes",
    "uptime_seconds": "Tempo desde o início do processo em segundos",
    "num_threads": "Número de threads do processo",
    "num_fds": "Número de descritores de arquivo abertos",
}

_process: psutil.Process | None = None


def _get_process() -> psutil.Process:
    # Reutiliza o mesmo Process para que cpu_percent meça o intervalo entre coletas
    global _process
    if _process is None:
        _process = psutil.Process()
    return _process


def collect_process_metrics(prefix: str = "process_") -> dict[str, float]:
    """Coleta métricas do processo em tempo real."""
    proc = _get_process()
    with proc.oneshot():
        metrics = {
            f"{prefix}cpu_percent": proc.cpu_percent(interval=None),
            f"{prefix}memory_percent": proc.memory_percent(),
            f"{prefix}memory_rss_bytes": getattr(proc.memory_info(), "rss", 0),
            f"{prefix}uptime_seconds": float(max(0.0, time.time() - proc.create_time())),
            f"{prefix}num_threads": proc.num_threads(),
        }
        # num_fds só existe em POSIX
        num_fds_fn = getattr(proc, "num_fds", None)
        if callable(num_fds_fn):
            try:
                fds = num_fds_fn()
                if isinstance(fds, int):
                    metrics[f"{prefix}num_fds"] = fds
            except (psutil.Error, OSError) as exc:
                logger.debug("Falha ao obter número de descritores de arquivos: %s", exc, exc_info=True)
    return metrics


def update_telemetry(handle: TelemetryHandle, metrics: dict, timeout: float | None = None) -> int:
    """Grava ``metrics`` como Gauges na telemetria, sob o lock de escrita.

    Valores não numéricos são ignorados. Retorna quantas métricas foram gravadas.
    """
    written = 0
    with handle.write(timeout=timeout) as telemetry:
        for name, value in metrics.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                logger.debug("métrica não numérica ignorada: %s=%r", name, value)
                continue
            short = name.split("_", 1)[1] if "_" in name else name
            telemetry.set_gauge(name, float(value), _DESCRIPTIONS.get(short, ""))
            written += 1
    return written
