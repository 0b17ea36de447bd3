"""
Pytest configuration and fixtures for the varlink-cli tests.
"""

from __future__ import annotations

import json
import shutil
import socket
import sys
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
PYTHON_SRC = REPO_ROOT / "python"
if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))

# A handler receives the call message and returns the replies to send.
# Returning None hangs up without replying.
MethodHandler = Callable[[Dict[str, Any]], Optional[List[Dict[str, Any]]]]


class DummyVarlinkServer:
    """Threaded varlink service on a unix socket answering from a method table."""

    def __init__(self, methods: Optional[Dict[str, MethodHandler]] = None) -> None:
        self.methods: Dict[str, MethodHandler] = dict(methods or {})
        self.calls: List[Dict[str, Any]] = []
        # Keep the socket path short; AF_UNIX paths are limited to ~108 bytes.
        self._dir = tempfile.mkdtemp(prefix="vl")
        self.path = str(Path(self._dir) / "sock")
        self.address = f"unix:{self.path}"
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.bind(self.path)
        self._sock.listen(5)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def add(self, method: str, handler: MethodHandler) -> None:
        self.methods[method] = handler

    def reply(self, method: str, *replies: Dict[str, Any]) -> None:
        self.methods[method] = lambda _msg: [dict(entry) for entry in replies]

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except OSError:
                break
            thread = threading.Thread(target=self._handle_client, args=(conn,), daemon=True)
            thread.start()

    def _handle_client(self, conn: socket.socket) -> None:
        buffer = b""
        with conn:
            while not self._stop.is_set():
                try:
                    chunk = conn.recv(4096)
                except OSError:
                    break
                if not chunk:
                    break
                buffer += chunk
                while b"\0" in buffer:
                    raw, buffer = buffer.split(b"\0", 1)
                    msg = json.loads(raw.decode("utf-8"))
                    self.calls.append(msg)
                    handler = self.methods.get(msg.get("method"))
                    if handler is None:
                        replies: Optional[List[Dict[str, Any]]] = [
                            {"error": "org.varlink.service.MethodNotFound", "parameters": {"method": msg.get("method")}}
                        ]
                    else:
                        replies = handler(msg)
                    if replies is None:
                        return
                    try:
                        for reply in replies:
                            conn.sendall(json.dumps(reply).encode("utf-8") + b"\0")
                    except OSError:
                        return

    def close(self) -> None:
        self._stop.set()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            self._sock.close()
        except OSError:
            pass
        self._thread.join(timeout=2)
        shutil.rmtree(self._dir, ignore_errors=True)


@pytest.fixture
def varlink_server():
    server = DummyVarlinkServer()
    yield server
    server.close()


@pytest.fixture(autouse=True)
def _no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("VARLINK_RESOLVER", raising=False)
