import logging
import socket
from pathlib import Path

"""Helpers genéricos de sistema.
Contém utilitários pequenos e sem dependências pesadas que são usados por
vários subsistemas (validação de endereço de bind, leitura de .env, etc.).
"""

logger = logging.getLogger(__name__)


def parse_bind_address(address: str) -> tuple[socket.AddressFamily, str, int]:
    """Converta uma string ``host:port`` em ``(family, host, port)``.

    Aceita IPv6 entre colchetes (``[::1]:9100``). Hostnames são mantidos como
    estão e resolvidos pelo bind. Levanta ``ValueError`` quando o endereço não
    é um alvo de bind sintaticamente válido.
    """
    if not isinstance(address, str):
        raise ValueError(f"endereço de bind deve ser uma string: {address!r}")
    raw = address.strip()
    host, sep, port_str = raw.rpartition(":")
    if not sep or not port_str:
        raise ValueError(f"endereço de bind sem porta: {address!r}")

    family = socket.AF_INET
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        family = socket.AF_INET6
    elif ":" in host:
        # IPv6 sem colchetes é ambíguo (ex: '::1:9100')
        raise ValueError(f"endereço IPv6 deve estar entre colchetes: {address!r}")
    if not host:
        raise ValueError(f"endereço de bind sem host: {address!r}")

    try:
        port = int(port_str)
    except ValueError as exc:
        raise ValueError(f"porta inválida em {address!r}") from exc
    if not 0 <= port <= 65535:
        raise ValueError(f"porta fora do intervalo (0..65535): {port}")
    return family, host, port


def validate_bind_address(address: str) -> bool:
    """Retorna True quando ``address`` puder ser interpretado por ``parse_bind_address``."""
    try:
        parse_bind_address(address)
        return True
    except ValueError:
        return False


def read_env_file(path: Path | str) -> dict:
    """Leia um ficheiro `.env` simples e retorne um dicionário key->value.

    Regras:
    - Linhas vazias e que começam com '#' são ignoradas.
    - A primeira '=' separa chave/valor; aspas simples ou duplas em torno do
      valor são removidas.
    - Se o ficheiro não existir, retorna um dict vazio.
    """
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                # remover espaços e aspas ao redor
                val = val.strip().strip('"').strip("'")
                # remover comentários inline após o valor (ex: "9100  # default")
                if " #" in val:
                    val = val.split(" #", 1)[0].rstrip()
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


def merge_env_items(env_path: Path, process_env: dict) -> dict:
    """Mescla itens de um ficheiro `.env` com o ambiente de processo.

    O mapeamento `process_env` (normalmente ``os.environ``) sobrescreve as
    chaves do ficheiro. A função não tem efeitos colaterais.
    """
    file_items = read_env_file(env_path)
    out = dict(file_items)
    out.update(dict(process_env))
    return out
