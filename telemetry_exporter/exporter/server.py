"""Servidor HTTP mínimo do endpoint de métricas Prometheus.

Um único thread dedicado (``metrics-server``) executa o loop de accept. Cada
conexão é atendida em sequência no próprio thread: drena até 1024 bytes da
requisição (sem parse), lê a telemetria sob lock de leitura, escreve a
resposta completa e fecha a conexão.

Política de erros:
- bind inválido/indisponível -> ``BindError`` síncrono em ``run``;
- erro de accept -> log de erro com supressão (janela de 300s), loop segue;
- erro de leitura -> ignorado (requisição vazia);
- lock indisponível -> corpo de fallback, status 200;
- erro de escrita -> log em debug, conexão descartada.
"""

import logging
import socket
import socketserver
import threading

from ..monitoring.state import TelemetryLockError
from ..system.helpers import parse_bind_address
from ..system.log_helpers import ThrottledLogger
from .response import FALLBACK_BODY, build_response

logger = logging.getLogger(__name__)

THREAD_NAME = "metrics-server"
REQUEST_DRAIN_BYTES = 1024
ACCEPT_ERROR_THROTTLE_SECONDS = 300.0
# intervalo do select em serve_forever; limita a latência de stop()
POLL_INTERVAL = 0.5


class ExporterError(Exception):
    """Erro do exporter de métricas."""


class BindError(ExporterError):
    """Endereço de bind inválido ou indisponível."""


class MetricsRequestHandler(socketserver.BaseRequestHandler):
    """Atende uma conexão: drena, lê a telemetria e responde."""

    def setup(self):
        timeout = getattr(self.server, "request_timeout", None)
        if timeout is not None:
            self.request.settimeout(timeout)

    def handle(self):
        self._drain_request()
        body = self.server.render_telemetry()
        self._send(build_response(body))

    def _drain_request(self) -> None:
        try:
            self.request.recv(REQUEST_DRAIN_BYTES)
        except OSError:
            # leitura falhou (inclui timeout): tratado como requisição vazia
            return

    def _send(self, payload: bytes) -> None:
        try:
            self.request.sendall(payload)
        except OSError as exc:
            logger.debug("metrics endpoint write error: %r", exc)


class MetricsTCPServer(socketserver.TCPServer):
    """``TCPServer`` síncrono que serve a telemetria compartilhada."""

    allow_reuse_address = True
    request_queue_size = 128

    def __init__(
        self,
        server_address,
        telemetry,
        family: socket.AddressFamily = socket.AF_INET,
        request_timeout: float | None = None,
        lock_timeout: float | None = None,
    ):
        self.address_family = family
        self.telemetry = telemetry
        self.request_timeout = request_timeout
        self.lock_timeout = lock_timeout
        self._accept_log = ThrottledLogger(logger, ACCEPT_ERROR_THROTTLE_SECONDS)
        super().__init__(server_address, MetricsRequestHandler)

    def get_request(self):
        try:
            return super().get_request()
        except OSError as exc:
            # socketserver descarta o erro e volta ao select
            self._accept_log.error("metrics endpoint accept error: %r", exc)
            raise

    def render_telemetry(self) -> str:
        """Texto da telemetria, ou o corpo de fallback se o lock falhar."""
        try:
            with self.telemetry.read(timeout=self.lock_timeout) as telemetry:
                return telemetry.to_prometheus()
        except TelemetryLockError as exc:
            logger.debug("lock da telemetria indisponível, usando fallback: %s", exc)
            return FALLBACK_BODY

    def handle_error(self, request, client_address):
        logger.exception("erro inesperado atendendo %s; conexão descartada", client_address)


class MetricsServer:
    """Handle do exporter em execução.

    Dono exclusivo do socket de escuta e do thread ``metrics-server``.
    ``stop()`` desbloqueia o loop de accept, fecha o socket e aguarda o thread.
    """

    def __init__(self, server: MetricsTCPServer, address: str):
        self._server = server
        self.address = address
        self._thread = threading.Thread(target=self._serve, name=THREAD_NAME, daemon=True)
        self._stop_lock = threading.Lock()
        self._stopped = False

    def _serve(self) -> None:
        self._server.serve_forever(poll_interval=POLL_INTERVAL)

    def start(self) -> None:
        self._thread.start()

    @property
    def server_address(self) -> tuple[str, int]:
        """Par (host, port) efetivamente ligado (útil com porta 0)."""
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    @property
    def thread(self) -> threading.Thread:
        return self._thread

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def stop(self, timeout: float | None = None) -> None:
        """Encerra o loop de accept e libera o socket. Idempotente."""
        with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True
        if self._thread.is_alive():
            self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout)
        logger.info("Prometheus metrics endpoint em %s encerrado", self.address)


def run(
    address: str,
    telemetry,
    *,
    request_timeout: float | None = None,
    lock_timeout: float | None = None,
) -> MetricsServer:
    """Abre o socket em ``address`` e inicia o thread do exporter.

    ``telemetry`` é o handle compartilhado (ex: ``TelemetryHandle``): qualquer
    objeto com ``read(timeout)`` como context manager que entregue algo com
    ``to_prometheus()``. Retorna assim que o socket está ligado e o thread
    iniciado. Levanta ``BindError`` se o endereço for inválido ou o bind
    falhar.
    """
    try:
        family, host, port = parse_bind_address(address)
    except ValueError as exc:
        raise BindError(f"endereço de bind inválido {address!r}: {exc}") from exc

    try:
        tcp = MetricsTCPServer(
            (host, port),
            telemetry,
            family=family,
            request_timeout=request_timeout,
            lock_timeout=lock_timeout,
        )
    except OSError as exc:
        raise BindError(f"falha ao abrir {address}: {exc}") from exc

    server = MetricsServer(tcp, address)
    try:
        server.start()
    except RuntimeError as exc:
        tcp.server_close()
        raise ExporterError(f"falha ao iniciar thread {THREAD_NAME}: {exc}") from exc
    logger.info("Prometheus metrics endpoint listening on %s", address)
    return server
