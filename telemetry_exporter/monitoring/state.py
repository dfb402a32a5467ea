"""Handle compartilhado da telemetria com lock de leitores/escritor.

O ``TelemetryHandle`` é passado explicitamente para quem precisa da
telemetria (exporter, coletores). Várias leituras podem ocorrer em paralelo;
uma escrita é exclusiva e tem prioridade sobre novas leituras.

Se um escritor levantar exceção com o lock de escrita adquirido o handle fica
"envenenado" (poisoned): a telemetria pode estar inconsistente, então leituras
e escritas passam a falhar com ``LockPoisonedError`` até ``clear_poison()``.
"""

import logging
import threading
from contextlib import contextmanager

from .telemetry import Telemetry

logger = logging.getLogger(__name__)


class TelemetryLockError(RuntimeError):
    """Não foi possível adquirir o lock da telemetria."""


class LockPoisonedError(TelemetryLockError):
    """Um escritor falhou com o lock adquirido."""


class LockTimeoutError(TelemetryLockError):
    """O lock não ficou disponível dentro do timeout."""


class TelemetryHandle:
    """Referência compartilhada e protegida por lock para um ``Telemetry``."""

    def __init__(self, telemetry: Telemetry | None = None):
        self._telemetry = telemetry if telemetry is not None else Telemetry()
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        with self._cond:
            return self._poisoned

    def clear_poison(self) -> None:
        """Marca a telemetria como consistente novamente."""
        with self._cond:
            self._poisoned = False
            self._cond.notify_all()

    @contextmanager
    def read(self, timeout: float | None = None):
        """Adquire o lock de leitura e entrega a telemetria (somente leitura).

        Levanta ``LockTimeoutError`` se o lock não vier em ``timeout``
        segundos (None = espera indefinida) e ``LockPoisonedError`` se o
        handle estiver envenenado.
        """
        with self._cond:
            ok = self._cond.wait_for(lambda: not self._writer and not self._writers_waiting, timeout)
            if not ok:
                raise LockTimeoutError(f"lock de leitura indisponível após {timeout}s")
            if self._poisoned:
                raise LockPoisonedError("telemetria envenenada por falha de escritor")
            self._readers += 1
        try:
            yield self._telemetry
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self, timeout: float | None = None):
        """Adquire o lock exclusivo de escrita.

        Uma exceção dentro do bloco envenena o handle e é propagada.
        """
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._cond.wait_for(lambda: not self._writer and self._readers == 0, timeout)
            finally:
                self._writers_waiting -= 1
            if not ok:
                # leitores podem estar esperando só por este escritor
                self._cond.notify_all()
                raise LockTimeoutError(f"lock de escrita indisponível após {timeout}s")
            if self._poisoned:
                self._cond.notify_all()
                raise LockPoisonedError("telemetria envenenada por falha de escritor")
            self._writer = True
        try:
            yield self._telemetry
        except BaseException:
            with self._cond:
                self._poisoned = True
            logger.warning("escritor falhou com o lock da telemetria adquirido; handle envenenado")
            raise
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()
