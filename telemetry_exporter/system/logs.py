"""Subsistema de logs: configuração do logging do processo.

Instala a saída de console, os arquivos diários de debug (texto e JSONL) e
os hooks globais de exceção, incluindo exceções não tratadas em threads
(ex: o worker do exporter).
"""

import logging
import os
import sys
import threading
import types
from dataclasses import dataclass
from pathlib import Path

from .log_helpers import JSONFormatter, format_date_for_log

logger = logging.getLogger(__name__)

LOG_ROOT = (os.getenv("TELEMETRY_LOG_ROOT", "logs") or "logs").strip() or "logs"

DEBUG_LOG_FILENAME = "debug_log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


@dataclass(frozen=True)
class LogPaths:
    """Agrupa caminhos usados pelo subsistema de logging."""

    root: Path
    debug_dir: Path


def get_log_paths(root: str | Path | None = None) -> LogPaths:
    """Resolve raiz de logs e garante que o diretório de debug exista."""
    env_root = os.getenv("TELEMETRY_LOG_ROOT")
    candidate = root if root else (env_root if env_root else LOG_ROOT)
    log_root = Path(candidate)
    debug_dir = log_root / "debug"
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.debug("get_log_paths: não foi possível criar %s: %s", debug_dir, exc, exc_info=True)
    return LogPaths(log_root, debug_dir)


def get_debug_file_path(root: str | Path | None = None) -> Path:
    """Retorna caminho do arquivo de debug diário."""
    filename = f"{DEBUG_LOG_FILENAME}-{format_date_for_log(None)}.txt"
    return get_log_paths(root).debug_dir / filename


def setup_logging(level: str = "INFO", root: str | Path | None = None, file_enable: bool = True) -> None:
    """Configura o logging do processo.

    - console via ``basicConfig`` no nível pedido;
    - arquivos de debug diário (texto + JSONL) quando ``file_enable``;
    - ``sys.excepthook`` e ``threading.excepthook`` enviando exceções não
      tratadas para o logger root.

    Falhas ao criar os arquivos são registradas em debug e não interrompem
    o processo.
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger().setLevel(lvl)

    if file_enable:
        try:
            _setup_debug_file_handlers(root)
        except Exception as exc:
            logger.debug("falha ao configurar debug file handler: %s", exc, exc_info=True)

    _install_exception_hooks()


def _setup_debug_file_handlers(root: str | Path | None) -> None:
    debug_path = get_debug_file_path(root)

    # Handler texto (legível por humanos)
    fh = logging.FileHandler(str(debug_path), encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))

    jfh = logging.FileHandler(str(debug_path.with_suffix(".jsonl")), encoding="utf-8")
    jfh.setLevel(logging.INFO)
    jfh.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    if _has_existing_file_handler(root_logger, fh, jfh):
        fh.close()
        jfh.close()
        return
    _wrap_emit_safe(fh)
    _wrap_emit_safe(jfh)
    root_logger.addHandler(fh)
    root_logger.addHandler(jfh)


def _install_exception_hooks() -> None:
    root_logger = logging.getLogger()

    def _exc_hook(exc_type, exc_value, exc_tb):
        try:
            root_logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        except Exception:
            sys.__excepthook__(exc_type, exc_value, exc_tb)

    def _thread_exc_hook(args):
        if args.exc_type is SystemExit:
            return
        name = args.thread.name if args.thread is not None else "?"
        try:
            root_logger.error(
                "Unhandled exception in thread %s",
                name,
                exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            )
        except Exception:
            threading.__excepthook__(args)

    sys.excepthook = _exc_hook
    threading.excepthook = _thread_exc_hook


def _has_existing_file_handler(root_logger, fh, jfh) -> bool:
    bases = (getattr(fh, "baseFilename", None), getattr(jfh, "baseFilename", None))
    for h in root_logger.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) in bases:
            return True
    return False


def _wrap_emit_safe(handler: logging.Handler) -> None:
    orig = handler.emit

    def _emit_safe(self, record):
        try:
            return orig(record)
        except Exception:
            # nunca propagar falhas do próprio handler
            sys.stderr.write("debug handler emit failed\n")

    handler.emit = types.MethodType(_emit_safe, handler)  # type: ignore[assignment]
