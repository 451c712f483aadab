from __future__ import annotations

import socket
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass

import pytest
import uvicorn
from fastapi import FastAPI

from fake_server import create_app

USER = "joern"
PASSWORD = "s3cret"


@dataclass
class RunningServer:
    app: FastAPI
    base_url: str


@contextmanager
def serve(app: FastAPI):
    """Run *app* under uvicorn in a background thread on a free port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]

    config = uvicorn.Config(app, log_level="warning", timeout_graceful_shutdown=1)
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline or not thread.is_alive():
            raise RuntimeError("fake joern server did not start")
        time.sleep(0.01)
    try:
        yield RunningServer(app=app, base_url=f"127.0.0.1:{port}")
    finally:
        server.should_exit = True
        thread.join(timeout=5)
        sock.close()


@pytest.fixture(scope="session")
def joern_server():
    with serve(create_app()) as running:
        yield running


@pytest.fixture(scope="module")
def auth_server():
    with serve(create_app(credentials=(USER, PASSWORD))) as running:
        yield running


@pytest.fixture
def unused_base_url():
    """host:port where nothing is listening."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


@pytest.fixture
def silent_base_url():
    """host:port that completes TCP handshakes but never answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    port = sock.getsockname()[1]
    yield f"127.0.0.1:{port}"
    sock.close()
