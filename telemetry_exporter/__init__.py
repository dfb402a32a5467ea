"""Exporter de telemetria: endpoint HTTP mínimo para scraping Prometheus.

Uso típico num processo hospedeiro::

    from telemetry_exporter.exporter import run
    from telemetry_exporter.monitoring import TelemetryHandle

    handle = TelemetryHandle()
    server = run("127.0.0.1:9100", handle)
"""

__version__ = "0.1.0"
