import logging
import socket
import threading
from typing import Optional, Tuple

from .config import Config
from .engine import Engine, RequestDispatcher
from .pool import Task, WorkerPool, close_quietly, handle_task

logger = logging.getLogger(__name__)


class HTTPServer:
    def __init__(self, config: Config, engine: Optional[Engine] = None) -> None:
        self.config = config
        self.engine = engine or RequestDispatcher(config)

        self._listen_sock: Optional[socket.socket] = None
        self._pool: Optional[WorkerPool] = None
        self._stop_event = threading.Event()

    @property
    def server_address(self) -> Optional[Tuple[str, int]]:
        if self._listen_sock is None:
            return None
        return self._listen_sock.getsockname()

    def bind(self) -> Tuple[str, int]:
        """
        Create/bind/listen on host:port.
        Backlog stays at the configured 5 pending connections.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError:
            sock.close()
            raise
        sock.settimeout(self.config.accept_timeout)

        self._listen_sock = sock
        return sock.getsockname()

    def run(self) -> None:
        self._stop_event.clear()
        if self._listen_sock is None:
            self.bind()

        if self.config.workers > 0:
            self._pool = WorkerPool(self.engine, self.config.workers, self.config.queue_size)
            self._pool.start()

        logger.info("httpd running on port %d", self.server_address[1])
        try:
            self._accept_loop()
        finally:
            self._cleanup()

    def stop(self) -> None:
        self._stop_event.set()

    def _cleanup(self) -> None:
        if self._listen_sock is not None:
            close_quietly(self._listen_sock)
        if self._pool is not None:
            self._pool.stop()

        self._listen_sock = None
        self._pool = None

    def _accept_loop(self) -> None:
        """
        Accept connections until stop() is called.
        Without a pool each connection is served before the next accept.
        """
        assert self._listen_sock is not None

        while not self._stop_event.is_set():
            try:
                conn, addr = self._listen_sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop_event.is_set() or self._listen_sock.fileno() == -1:
                    break
                logger.warning("accept client connect error: %s", e)
                continue

            try:
                conn.settimeout(self.config.recv_timeout)
            except OSError:
                close_quietly(conn)
                continue

            task = Task(conn=conn, addr=addr)
            if self._pool is not None:
                self._pool.submit(task)
            else:
                handle_task(self.engine, task)
