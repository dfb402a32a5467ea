"""Pacote monitoring: telemetria compartilhada e coleta de métricas."""

from .state import LockPoisonedError, LockTimeoutError, TelemetryHandle, TelemetryLockError
from .telemetry import Telemetry

__all__ = [
    "LockPoisonedError",
    "LockTimeoutError",
    "Telemetry",
    "TelemetryHandle",
    "TelemetryLockError",
]
