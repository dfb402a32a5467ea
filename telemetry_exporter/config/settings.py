"""Configurações do exporter de telemetria.

Carrega valores a partir de ``DEFAULT_SETTINGS`` e permite overrides via
arquivo ``.env`` ou variáveis de ambiente (prefixo ``TELEMETRY_*``).
As funções públicas principais são:

- ``load_settings()`` -> dicionário com chaves: "metrics_address",
  "log_level", "sample_interval", "request_timeout", "lock_timeout".
- ``validate_settings()`` -> valida e normaliza um dicionário de settings.
"""

import logging
import os
from pathlib import Path

from ..system.helpers import merge_env_items, validate_bind_address

logger = logging.getLogger(__name__)

# ========================
# Constantes e padrões globais
# ========================

DEFAULT_SETTINGS = {
    "metrics_address": "127.0.0.1:9100",
    "log_level": "INFO",
    "sample_interval": 5.0,
    # None = sem timeout (comportamento padrão do exporter)
    "request_timeout": None,
    "lock_timeout": None,
}

_ENV_KEYS = {
    "metrics_address": "TELEMETRY_METRICS_ADDRESS",
    "log_level": "TELEMETRY_LOG_LEVEL",
    "sample_interval": "TELEMETRY_SAMPLE_INTERVAL_SEC",
    "request_timeout": "TELEMETRY_REQUEST_TIMEOUT_SEC",
    "lock_timeout": "TELEMETRY_LOCK_TIMEOUT_SEC",
}

_FLOAT_KEYS = ("sample_interval", "request_timeout", "lock_timeout")


# ========================
# 1. Carregamento das configurações
# ========================


def load_settings() -> dict:
    """Carrega configurações combinando DEFAULTS + .env + ambiente.

    As variáveis em ambiente sobrescrevem valores do arquivo `.env`.
    """
    project_root = Path(__file__).resolve().parents[2]
    env_path = Path(os.getenv("TELEMETRY_ENV_FILE", project_root / ".env"))
    env_items = merge_env_items(env_path, dict(os.environ))

    settings = DEFAULT_SETTINGS.copy()
    _apply_env_overrides(env_items, settings)
    return settings


# Auxilia load_settings; aplica overrides de cada chave conhecida
def _apply_env_overrides(env_items: dict, settings: dict) -> None:
    for key, env_var in _ENV_KEYS.items():
        raw = env_items.get(env_var)
        if raw is None or str(raw).strip() == "":
            continue
        raw = str(raw).strip()
        if key in _FLOAT_KEYS:
            try:
                settings[key] = float(raw)
            except ValueError:
                logger.warning("%s inválido: %s", env_var, raw)
        elif key == "log_level":
            settings[key] = raw.upper()
        else:
            settings[key] = raw


# ========================
# 2. Validação
# ========================


def validate_settings(settings: dict) -> dict:
    """Normaliza e valida o dicionário de configurações.

    Levanta ``ValueError`` para endereço inválido ou números negativos.
    """
    if not isinstance(settings, dict):
        raise TypeError("settings deve ser um dict")

    for key, default in DEFAULT_SETTINGS.items():
        settings.setdefault(key, default)

    address = settings["metrics_address"]
    if not validate_bind_address(address):
        raise ValueError(f"metrics_address inválido: {address!r}")

    for key in _FLOAT_KEYS:
        val = settings.get(key)
        if val is None:
            continue
        try:
            fval = float(val)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{key} deve ser numérico: {val!r}") from exc
        if fval < 0.0:
            raise ValueError(f"{key} deve ser >= 0.0")
        settings[key] = fval

    settings["log_level"] = str(settings.get("log_level") or "INFO").upper()
    logger.debug("Configurações validadas e normalizadas")
    return settings
