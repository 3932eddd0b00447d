import logging

from .errors import ResourceNotFound
from .response import ResponseWriter
from .stream import write_all

logger = logging.getLogger(__name__)


class StaticFileServer:
    def __init__(self, writer: ResponseWriter, chunk_size: int = 4096) -> None:
        self.writer = writer
        self.chunk_size = chunk_size

    def serve(self, conn, path: str, send_body: bool = True) -> None:
        try:
            f = open(path, "rb")
        except OSError as e:
            logger.warning("can not open %s: %s", path, e)
            raise ResourceNotFound(path)

        with f:
            self.writer.write_headers(conn, 200)
            if not send_body:
                return
            while True:
                data = f.read(self.chunk_size)
                if not data:
                    break
                write_all(conn, data)
