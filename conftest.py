# conftest.py
# Fixtures globais para pytest: telemetria compartilhada, exporter em porta efêmera
# e um cliente TCP cru para inspecionar a resposta byte a byte.
import socket
from types import SimpleNamespace

import pytest

from telemetry_exporter.exporter.server import run
from telemetry_exporter.monitoring.state import TelemetryHandle


@pytest.fixture
def telemetry_handle():
    handle = TelemetryHandle()
    with handle.write() as t:
        t.set_gauge("test_up", 1.0, "exporter de teste")
    return handle


@pytest.fixture
def exporter(telemetry_handle):
    """Fábrica: inicia o exporter em 127.0.0.1:0 e encerra ao final do teste."""
    started = []

    def _start(telemetry=None, **kwargs):
        server = run("127.0.0.1:0", telemetry if telemetry is not None else telemetry_handle, **kwargs)
        started.append(server)
        return server

    yield _start
    for server in started:
        server.stop(timeout=5.0)


def _parse_response(raw: bytes) -> SimpleNamespace:
    head, sep, body = raw.partition(b"\r\n\r\n")
    if not sep:
        return SimpleNamespace(raw=raw, status_line=None, headers={}, body=b"")
    lines = head.decode("ascii").split("\r\n")
    headers = {}
    for line in lines[1:]:
        k, _, v = line.partition(":")
        headers[k.strip().lower()] = v.strip()
    return SimpleNamespace(raw=raw, status_line=lines[0], headers=headers, body=body)


def _content_length(raw: bytes):
    head, sep, rest = raw.partition(b"\r\n\r\n")
    if not sep:
        return None, rest
    for line in head.split(b"\r\n")[1:]:
        k, _, v = line.partition(b":")
        if k.strip().lower() == b"content-length":
            return int(v.strip()), rest
    return None, rest


@pytest.fixture
def scrape():
    """Cliente TCP cru: envia ``payload`` e lê a resposta completa."""

    def _scrape(address, payload: bytes = b"", half_close: bool = True, timeout: float = 5.0):
        with socket.create_connection(address, timeout=timeout) as sock:
            if payload:
                sock.sendall(payload)
            if half_close:
                try:
                    sock.shutdown(socket.SHUT_WR)
                except OSError:
                    # servidor já respondeu e fechou
                    pass
            data = b""
            while True:
                try:
                    chunk = sock.recv(4096)
                except ConnectionResetError:
                    break
                if not chunk:
                    break
                data += chunk
                length, rest = _content_length(data)
                if length is not None and len(rest) >= length:
                    break
        return _parse_response(data)

    return _scrape
