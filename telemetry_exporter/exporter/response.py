"""Montagem da resposta HTTP do endpoint de métricas.

Função pura, sem I/O: recebe o corpo e devolve os bytes completos da
resposta (status line, cabeçalhos fixos e corpo).
"""

from http import HTTPStatus

from prometheus_client import CONTENT_TYPE_PLAIN_0_0_4

CONTENT_TYPE = CONTENT_TYPE_PLAIN_0_0_4

# Corpo usado quando o lock da telemetria não pode ser adquirido
FALLBACK_BODY = "# error reading telemetry\n"


def build_response(body: str | bytes, status: int = 200) -> bytes:
    """Monta uma resposta HTTP/1.1 completa com ``Connection: close``.

    ``Content-Length`` é o tamanho exato em bytes do corpo codificado em UTF-8.
    """
    payload = body if isinstance(body, bytes) else body.encode("utf-8")
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = ""
    head = (
        f"HTTP/1.1 {int(status)} {reason}\r\n"
        f"Content-Type: {CONTENT_TYPE}\r\n"
        f"Content-Length: {len(payload)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return head.encode("ascii") + payload
