import os
import socket

import pytest

from cgihttpd.config import Config
from cgihttpd.engine import RequestDispatcher

ENV_SCRIPT = """#!/bin/sh
echo "method=$REQUEST_METHOD"
echo "query=${QUERY_STRING-unset}"
echo "length=${CONTENT_LENGTH-unset}"
if [ -n "$CONTENT_LENGTH" ]; then
  echo "body=$(cat)"
fi
"""


def write_script(path, text=ENV_SCRIPT, mode=0o755):
    path.write_text(text)
    path.chmod(mode)
    return path


def recv_all(sock) -> bytes:
    chunks = []
    while True:
        try:
            data = sock.recv(65536)
        except ConnectionResetError:
            # server closed with request bytes unread; treat as end of response
            data = b""
        if not data:
            return b"".join(chunks)
        chunks.append(data)


def split_response(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.split(b"\r\n")
    return lines[0], lines[1:], body


def zombie_children():
    """Zombie processes whose parent is the test process, read from /proc."""
    if not os.path.isdir("/proc"):
        pytest.skip("process table not available")
    me = os.getpid()
    zombies = []
    for entry in os.listdir("/proc"):
        if not entry.isdigit():
            continue
        try:
            with open(f"/proc/{entry}/stat") as f:
                fields = f.read().rsplit(")", 1)[1].split()
        except OSError:
            continue
        state, ppid = fields[0], int(fields[1])
        if ppid == me and state == "Z":
            zombies.append(int(entry))
    return zombies


@pytest.fixture
def conn_pair():
    server, client = socket.socketpair()
    yield server, client
    for s in (server, client):
        s.close()


@pytest.fixture
def docroot(tmp_path):
    (tmp_path / "index.html").write_bytes(b"<h1>hi</h1>")
    return tmp_path


@pytest.fixture
def config(docroot):
    return Config(root=str(docroot))


@pytest.fixture
def exchange(config):
    def run(raw: bytes, dispatcher=None) -> bytes:
        dispatcher = dispatcher or RequestDispatcher(config)
        server, client = socket.socketpair()
        try:
            client.sendall(raw)
            client.shutdown(socket.SHUT_WR)
            dispatcher.handle_connection(server)
            return recv_all(client)
        finally:
            server.close()
            client.close()
    return run


@pytest.fixture
def env_script(docroot):
    return write_script(docroot / "env.cgi")
