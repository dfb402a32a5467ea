"""Pacote exporter: endpoint HTTP de métricas para scraping pelo Prometheus.

Oferece re-exports para importações curtas como
``from telemetry_exporter.exporter import run``.
"""

from .response import CONTENT_TYPE, FALLBACK_BODY, build_response
from .server import BindError, ExporterError, MetricsServer, run

__all__ = [
    "BindError",
    "CONTENT_TYPE",
    "ExporterError",
    "FALLBACK_BODY",
    "MetricsServer",
    "build_response",
    "run",
]
