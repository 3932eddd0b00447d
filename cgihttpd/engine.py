import logging
import socket
from typing import Optional

from .config import Config
from .errors import ClientProtocolError, HTTPError, UnsupportedMethod
from .executor import CGIExecutor
from .handler import StaticFileServer
from .models import Method, ReadStatus, ResourceKind
from .parser import parse_request_line
from .resolver import PathResolver, split_target
from .response import ResponseWriter
from .stream import ByteLineReader

logger = logging.getLogger(__name__)


class Engine:
    def handle_connection(self, conn: socket.socket) -> None:
        try:
            self.process(conn)
        finally:
            try:
                conn.close()
            except OSError:
                pass

    def process(self, conn: socket.socket) -> None:
        raise NotImplementedError


class RequestDispatcher(Engine):
    """One request/response cycle per connection."""

    def __init__(self, config: Config, resolver: Optional[PathResolver] = None,
                 executor: Optional[CGIExecutor] = None) -> None:
        self.config = config
        self.writer = ResponseWriter()
        self.resolver = resolver or PathResolver(config.root)
        self.static = StaticFileServer(self.writer, config.buffer_size)
        self.executor = executor or CGIExecutor(self.writer, config.buffer_size)

    def process(self, conn: socket.socket) -> None:
        reader = ByteLineReader(conn, self.config.buffer_size)
        try:
            self._dispatch(conn, reader)
        except HTTPError as e:
            logger.debug("%s: %s", e.__class__.__name__, e)
            try:
                self.writer.write_status(conn, e.status)
            except OSError as err:
                logger.warning("could not send %d: %s", e.status, err)
        except (socket.timeout, TimeoutError):
            logger.warning("connection timed out")
        except OSError as e:
            logger.warning("connection error: %s", e)

    def _dispatch(self, conn: socket.socket, reader: ByteLineReader) -> None:
        result = reader.read_line(self.config.buffer_size)
        # a line cut short by end of stream is still served
        if result.status in (ReadStatus.OVERFLOW, ReadStatus.IO_ERROR) or not result.line.strip():
            logger.warning("bad client (%s), closing", result.status.value)
            return

        logger.debug("request line: %r", result.line)
        request = parse_request_line(
            result.line, self.config.max_method_len, self.config.max_target_len
        )

        if request.method is Method.POST:
            return self._handle_post(conn, reader, request.target)
        self._discard_headers(reader)
        if request.method in (Method.GET, Method.HEAD):
            return self._handle_get(conn, request.target, request.method is Method.HEAD)
        raise UnsupportedMethod(request.token)

    def _discard_headers(self, reader: ByteLineReader) -> None:
        # unread request bytes would reset the connection on close
        try:
            reader.read_headers(self.config.max_header_lines, self.config.buffer_size)
        except ClientProtocolError:
            pass

    def _handle_get(self, conn: socket.socket, target: str, head_only: bool) -> None:
        resource = self.resolver.resolve(target)
        if resource.kind is ResourceKind.EXECUTABLE:
            query = (resource.query or "").encode("iso-8859-1")
            self.executor.execute(conn, resource.path, Method.GET.value, query, send_body=not head_only)
        else:
            self.static.serve(conn, resource.path, send_body=not head_only)

    def _handle_post(self, conn: socket.socket, reader: ByteLineReader, target: str) -> None:
        headers = reader.read_headers(self.config.max_header_lines, self.config.buffer_size)

        length = 0
        if "content-length" in headers:
            try:
                length = int(headers["content-length"])
            except ValueError:
                raise ClientProtocolError("bad content-length")
            if length < 0:
                raise ClientProtocolError("negative content-length")

        body = reader.read_body(length)
        url_path, _ = split_target(target)
        program = self.resolver.resolve(url_path).path
        self.executor.execute(conn, program, Method.POST.value, body)
