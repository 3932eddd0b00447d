import socket

import pytest

from cgihttpd.errors import ClientProtocolError
from cgihttpd.models import ReadStatus
from cgihttpd.stream import ByteLineReader, write_all


def test_read_line_keeps_terminator(conn_pair):
    server, client = conn_pair
    client.sendall(b"GET / HTTP/1.0\r\nHost: x\r\n")
    reader = ByteLineReader(server)

    first = reader.read_line(4096)
    assert first.status is ReadStatus.OK
    assert first.line == b"GET / HTTP/1.0\r\n"
    assert first.count == 16

    second = reader.read_line(4096)
    assert second.line == b"Host: x\r\n"


def test_read_line_overflow(conn_pair):
    server, client = conn_pair
    client.sendall(b"A" * 100)
    reader = ByteLineReader(server, buffer_size=16)

    result = reader.read_line(64)
    assert result.status is ReadStatus.OVERFLOW
    assert result.count == 63


def test_read_line_newline_just_inside_limit(conn_pair):
    server, client = conn_pair
    client.sendall(b"A" * 62 + b"\n")
    result = ByteLineReader(server).read_line(64)
    assert result.status is ReadStatus.OK
    assert result.count == 63


def test_read_line_end_of_stream(conn_pair):
    server, client = conn_pair
    client.sendall(b"partial")
    client.shutdown(socket.SHUT_WR)
    reader = ByteLineReader(server)

    result = reader.read_line(4096)
    assert result.status is ReadStatus.END_OF_STREAM
    assert result.line == b"partial"
    assert reader.read_line(4096).status is ReadStatus.END_OF_STREAM


class FlakyConn:
    def __init__(self, chunks):
        self.chunks = list(chunks)

    def recv(self, n):
        item = self.chunks.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def test_read_line_io_error():
    reader = ByteLineReader(FlakyConn([b"GE", ConnectionResetError()]))
    result = reader.read_line(4096)
    assert result.status is ReadStatus.IO_ERROR
    assert result.line == b"GE"


def test_read_headers(conn_pair):
    server, client = conn_pair
    client.sendall(b"Host: example\r\nContent-Length: 11\r\n\r\npageIndex=1")
    reader = ByteLineReader(server)

    headers = reader.read_headers(100, 4096)
    assert headers == {"host": "example", "content-length": "11"}
    assert reader.read_body(11) == b"pageIndex=1"


def test_read_headers_without_blank_line(conn_pair):
    server, client = conn_pair
    client.sendall(b"Host: example\r\n")
    client.shutdown(socket.SHUT_WR)
    with pytest.raises(ClientProtocolError):
        ByteLineReader(server).read_headers(100, 4096)


def test_read_headers_line_limit(conn_pair):
    server, client = conn_pair
    client.sendall(b"X-A: 1\r\n" * 5 + b"\r\n")
    with pytest.raises(ClientProtocolError):
        ByteLineReader(server).read_headers(3, 4096)


def test_read_body_truncated_to_one_buffer(conn_pair):
    server, client = conn_pair
    client.sendall(b"x" * 100)
    client.shutdown(socket.SHUT_WR)
    reader = ByteLineReader(server, buffer_size=32)
    assert reader.read_body(100) == b"x" * 32


def test_read_body_stops_at_end_of_stream(conn_pair):
    server, client = conn_pair
    client.sendall(b"abc")
    client.shutdown(socket.SHUT_WR)
    assert ByteLineReader(server).read_body(10) == b"abc"


class RecordingConn:
    def __init__(self):
        self.sent = []

    def sendall(self, data):
        self.sent.append(bytes(data))


def test_write_all_hands_whole_payload_to_sendall():
    conn = RecordingConn()
    write_all(conn, b"hello world")
    assert conn.sent == [b"hello world"]
