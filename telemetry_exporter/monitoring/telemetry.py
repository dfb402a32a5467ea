"""Objeto de telemetria compartilhado pelo processo.

Mantém um ``CollectorRegistry`` privado do ``prometheus_client`` e sabe se
renderizar no formato de exposição texto do Prometheus. Não é thread-safe por
si só: o acesso concorrente passa pelo ``TelemetryHandle`` (ver ``state``).
"""

import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

logger = logging.getLogger(__name__)


def _sanitize_metric_name(name: str) -> str:
    """Sanitiza o nome da métrica para o padrão Prometheus, substituindo caracteres inválidos por underline."""
    # Prometheus metric names: [a-zA-Z_:][a-zA-Z0-9_:]*
    out = []
    for i, ch in enumerate(name):
        if i == 0:
            if (ch.isascii() and ch.isalpha()) or ch in ("_", ":"):
                out.append(ch)
            else:
                out.append("_")
        else:
            if (ch.isascii() and ch.isalnum()) or ch in ("_", ":"):
                out.append(ch)
            else:
                out.append("_")
    return "".join(out) or "_"


class Telemetry:
    """Coleção de métricas do processo renderizável para Prometheus."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}
        self._counters: dict[str, Counter] = {}

    def set_gauge(self, name: str, value: float, description: str = "") -> None:
        """Cria o Gauge na primeira chamada e atualiza o valor nas próximas."""
        san = _sanitize_metric_name(name)
        g = self._gauges.get(san)
        if g is None:
            g = Gauge(san, description or f"Gauge for {name}", registry=self.registry)
            self._gauges[san] = g
        g.set(float(value))

    def inc_counter(self, name: str, amount: float = 1.0, description: str = "") -> None:
        """Incrementa um Counter, criando-o na primeira chamada.

        O ``prometheus_client`` expõe counters com o sufixo ``_total``.
        """
        san = _sanitize_metric_name(name)
        if san.endswith("_total"):
            san = san[: -len("_total")]
        c = self._counters.get(san)
        if c is None:
            c = Counter(san, description or f"Counter for {name}", registry=self.registry)
            self._counters[san] = c
        c.inc(float(amount))

    def metric_names(self) -> list[str]:
        return sorted([*self._gauges, *self._counters])

    def to_prometheus(self) -> str:
        """Renderiza todas as métricas no formato de exposição texto (0.0.4)."""
        return generate_latest(self.registry).decode("utf-8")
