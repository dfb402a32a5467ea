"""Core do processo hospedeiro do exporter.

Loop principal: amostra métricas do processo para a telemetria compartilhada
e acompanha o thread do exporter.
"""

import logging
import time

from ..monitoring.metrics import collect_process_metrics as _collect_metrics
from ..monitoring.metrics import update_telemetry
from ..monitoring.state import TelemetryHandle, TelemetryLockError
from ..system.log_helpers import ThrottledLogger

logger = logging.getLogger(__name__)

# avisos repetidos sobre o worker parado (uma vez a cada 5 min)
_worker_log = ThrottledLogger(logger, 300.0)


def run_loop(handle: TelemetryHandle, server, interval: float, cycles: int) -> int:
    """Loop principal de amostragem.

    Parâmetros:
        handle: telemetria compartilhada com o exporter.
        server: ``MetricsServer`` em execução (ou None).
        interval: atraso entre ciclos em segundos (float).
        cycles: número de ciclos a executar (0 = infinito).

    Retorna o número de ciclos executados.
    """
    executed = 0
    try:
        while True:
            _sample_once(handle)
            _check_worker(server)
            executed += 1
            if cycles != 0 and executed >= cycles:
                break
            if interval > 0.0:
                time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Recebido KeyboardInterrupt, saindo...")
    return executed


def _sample_once(handle: TelemetryHandle) -> None:
    """Coleta e grava uma amostra; falhas não interrompem o loop."""
    try:
        metrics = _collect_metrics()
    except Exception as exc:
        logger.debug("Falha ao coletar métricas do processo: %s", exc, exc_info=True)
        return
    try:
        update_telemetry(handle, metrics)
    except TelemetryLockError as exc:
        logger.warning("Telemetria indisponível para escrita: %s", exc)


def _check_worker(server) -> None:
    if server is not None and not server.is_alive():
        _worker_log.warning("thread do exporter de métricas não está em execução")
