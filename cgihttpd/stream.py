import logging
from typing import Dict

from .errors import ClientProtocolError
from .models import LineResult, ReadStatus

logger = logging.getLogger(__name__)


def write_all(conn, data: bytes) -> None:
    # sendall retries short writes; interrupted calls are retried by the runtime
    conn.sendall(data)


class ByteLineReader:
    """Line reader over one connection.

    The read buffer lives on the instance, so concurrent connections never
    see each other's bytes.
    """

    def __init__(self, conn, buffer_size: int = 4096) -> None:
        self.conn = conn
        self.buffer_size = buffer_size
        self._buf = bytearray()
        self._eof = False

    def _fill(self) -> ReadStatus:
        if self._eof:
            return ReadStatus.END_OF_STREAM
        try:
            chunk = self.conn.recv(self.buffer_size)
        except OSError as e:
            logger.debug("recv failed: %s", e)
            return ReadStatus.IO_ERROR
        if not chunk:
            self._eof = True
            return ReadStatus.END_OF_STREAM
        self._buf.extend(chunk)
        return ReadStatus.OK

    def read_line(self, max_len: int) -> LineResult:
        limit = max_len - 1
        while True:
            nl = self._buf.find(b"\n", 0, limit)
            if nl != -1:
                return LineResult(self._take(nl + 1), ReadStatus.OK)
            if len(self._buf) >= limit:
                return LineResult(self._take(limit), ReadStatus.OVERFLOW)

            status = self._fill()
            if status is not ReadStatus.OK:
                return LineResult(self._take(len(self._buf)), status)

    def read_headers(self, max_lines: int, max_len: int) -> Dict[str, str]:
        headers = {}
        for _ in range(max_lines):
            result = self.read_line(max_len)
            if result.status is not ReadStatus.OK:
                raise ClientProtocolError(f"header read failed: {result.status.value}")

            line = result.line.rstrip(b"\r\n")
            if not line:
                return headers

            text = line.decode("iso-8859-1")
            if ":" not in text:
                continue
            k, v = text.split(":", 1)
            headers[k.strip().lower()] = v.strip()

        raise ClientProtocolError("too many header lines")

    def read_body(self, length: int) -> bytes:
        # one buffer at most; longer bodies are truncated
        want = min(length, self.buffer_size)
        while len(self._buf) < want:
            if self._fill() is not ReadStatus.OK:
                break
        return self._take(min(want, len(self._buf)))

    def _take(self, n: int) -> bytes:
        data = bytes(self._buf[:n])
        del self._buf[:n]
        return data
