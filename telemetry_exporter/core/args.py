"""Parser de argumentos da linha de comando.

Docstrings e mensagens em português.

Este módulo fornece um parser simples que expõe:
- endereço de bind do endpoint de métricas (--address)
- intervalo entre amostragens (-i / --interval)
- número de ciclos (-c / --cycles), 0 = infinito
- verbosidade (-v)
- opções de logging (nível e caminho raiz)

Argumentos ausentes ficam ``None`` e são completados pelas settings
(``telemetry_exporter.config.settings``): CLI > ENV/.env > default.
"""

import argparse
from typing import Sequence

from ..system.helpers import validate_bind_address


def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o exporter."""
    parser = argparse.ArgumentParser(
        prog="telemetry-exporter",
        description="Exporter de telemetria: expõe métricas do processo para scraping Prometheus",
    )
    parser.add_argument(
        "--address",
        type=str,
        default=None,
        help="Endereço host:port do endpoint de métricas (substitui TELEMETRY_METRICS_ADDRESS)",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=None,
        help="Intervalo em segundos entre amostragens do processo (float)",
    )
    parser.add_argument(
        "-c",
        "--cycles",
        type=int,
        default=0,
        help="Número de ciclos de amostragem a executar (0 = infinito)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Aumenta a verbosidade (-v, -vv)",
    )
    parser.add_argument(
        "--log-root",
        dest="log_root",
        type=str,
        default=None,
        help="Caminho raiz para os logs (substitui TELEMETRY_LOG_ROOT)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR). Se ausente, definido por -v ou settings",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace validado para uso no programa."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    validate_args(ns)
    return ns


def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza argumentos informados."""
    if getattr(args, "interval", None) is not None:
        try:
            args.interval = float(args.interval)
        except (TypeError, ValueError) as exc:
            raise ValueError("intervalo deve ser um número") from exc
        if args.interval < 0.0:
            raise ValueError("intervalo deve ser >= 0.0")

    try:
        args.cycles = int(args.cycles)
    except (TypeError, ValueError) as exc:
        raise ValueError("cycles deve ser um inteiro >= 0") from exc
    if args.cycles < 0:
        raise ValueError("cycles deve ser >= 0")

    address = getattr(args, "address", None)
    if address is not None and not validate_bind_address(address):
        raise ValueError(f"endereço inválido: {address!r}")


def get_log_config(args: argparse.Namespace, settings: dict | None = None) -> dict:
    """Retorna dict com configuração de logging ('level' e 'root')."""
    if getattr(args, "log_level", None):
        level = str(args.log_level).upper()
    else:
        v = getattr(args, "verbose", 0) or 0
        if v >= 2:
            level = "DEBUG"
        elif v == 1:
            level = "INFO"
        else:
            level = str((settings or {}).get("log_level") or "INFO").upper()

    return {"level": level, "root": getattr(args, "log_root", None)}
