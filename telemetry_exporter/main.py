"""Ponto de entrada do exporter de telemetria.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
carregamento das settings, configuração de logging, início do endpoint de
métricas e execução do loop de amostragem. A lógica de runtime fica em
`core` e `exporter` para facilitar testes e reutilização.
"""

import logging as _logging

from .config.settings import load_settings, validate_settings
from .core.args import get_log_config, parse_args
from .core.core import run_loop as _run_loop
from .exporter.server import BindError
from .exporter.server import run as start_exporter
from .monitoring.state import TelemetryHandle
from .system.logs import setup_logging


def main(argv: list[str] | None = None) -> None:
    """Inicializa a aplicação e inicia o loop de amostragem.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.

    Raises:
        SystemExit: código 2 quando o endpoint de métricas não pode ser aberto.

    """
    args = parse_args(argv)
    settings = validate_settings(load_settings())
    log_conf = get_log_config(args, settings)
    setup_logging(log_conf["level"], log_conf.get("root"))
    logger = _logging.getLogger(__name__)

    address = args.address or settings["metrics_address"]
    interval = args.interval if args.interval is not None else settings["sample_interval"]

    handle = TelemetryHandle()
    try:
        server = start_exporter(
            address,
            handle,
            request_timeout=settings.get("request_timeout"),
            lock_timeout=settings.get("lock_timeout"),
        )
    except BindError as exc:
        logger.error("Falha ao iniciar endpoint de métricas: %s", exc)
        raise SystemExit(2) from exc

    try:
        _run_loop(handle, server, interval=interval, cycles=args.cycles)
    finally:
        server.stop(timeout=5.0)


if __name__ == "__main__":
    main()
