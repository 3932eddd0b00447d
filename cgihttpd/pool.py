import logging
import queue
import socket
import threading
from dataclasses import dataclass
from typing import List, Tuple

from .engine import Engine

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass(frozen=True)
class Task:
    conn: socket.socket
    addr: Tuple[str, int]


def close_quietly(conn: socket.socket) -> None:
    try:
        conn.close()
    except OSError:
        pass


def handle_task(engine: Engine, task: Task) -> None:
    logger.debug("handling connection from %s", task.addr)
    try:
        engine.handle_connection(task.conn)
    except Exception:
        logger.exception("unhandled error on connection from %s", task.addr)


class WorkerPool:
    """Threads taking accepted connections off a bounded queue.

    A connection is served start to finish by one worker; workers share
    nothing but the queue.
    """

    def __init__(self, engine: Engine, workers: int, queue_size: int = 0) -> None:
        self.engine = engine
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._threads: List[threading.Thread] = [
            threading.Thread(target=self._work, name=f"cgihttpd-worker-{i}", daemon=True)
            for i in range(workers)
        ]

    def start(self) -> None:
        for t in self._threads:
            t.start()

    def submit(self, task: Task) -> None:
        try:
            self._queue.put_nowait(task)
        except queue.Full:
            logger.warning("worker queue full; dropping connection from %s", task.addr)
            close_quietly(task.conn)

    def stop(self, timeout: float = 5.0) -> None:
        # one marker per worker, queued behind pending connections
        for _ in self._threads:
            self._queue.put(_STOP)
        for t in self._threads:
            t.join(timeout)

    def _work(self) -> None:
        while True:
            task = self._queue.get()
            if task is _STOP:
                return
            handle_task(self.engine, task)
