import logging
import subprocess
from typing import Dict, Optional

from .errors import SubprocessSpawnError
from .models import CGIInvocation
from .response import ResponseWriter
from .stream import write_all

logger = logging.getLogger(__name__)


class Subprocess:
    """Spawns a CGI program with both standard streams on pipes."""

    def spawn(self, program: str, env: Dict[str, str]) -> subprocess.Popen:
        return subprocess.Popen(
            [program],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            env=env,
            close_fds=True,
        )

    def wait(self, proc: subprocess.Popen) -> int:
        return proc.wait()


class CGIExecutor:
    def __init__(self, writer: ResponseWriter, buffer_size: int = 4096,
                 subprocess_factory: Optional[Subprocess] = None) -> None:
        self.writer = writer
        self.buffer_size = buffer_size
        self.subprocess = subprocess_factory or Subprocess()

    def execute(self, conn, program: str, method: str, payload: bytes = b"",
                send_body: bool = True) -> int:
        """Run ``program`` and relay its output to ``conn``.

        GET passes ``payload`` through QUERY_STRING; any other method writes
        it to the child's stdin and announces it with CONTENT_LENGTH. Output
        past one buffer is dropped. Returns the child's exit status.
        """
        invocation = CGIInvocation.build(program, method, payload)
        # ValueError: NUL byte in the query string
        try:
            proc = self.subprocess.spawn(program, invocation.environ())
        except (OSError, ValueError) as e:
            logger.warning("cgi spawn failed for %s: %s", program, e)
            raise SubprocessSpawnError(str(e))

        try:
            output = self._communicate(proc, invocation)
            self.writer.write_headers(conn, 200)
            if send_body and output:
                write_all(conn, output)
        finally:
            self._close_pipes(proc)
            status = self.subprocess.wait(proc)
            logger.debug("cgi %s exited with %s", program, status)
        return status

    def _communicate(self, proc: subprocess.Popen, invocation: CGIInvocation) -> bytes:
        try:
            if invocation.content_length:
                proc.stdin.write(invocation.query)
            proc.stdin.close()
        except BrokenPipeError:
            logger.warning("cgi %s closed its input early", invocation.program)

        output = proc.stdout.read(self.buffer_size)
        proc.stdout.close()
        return output

    @staticmethod
    def _close_pipes(proc: subprocess.Popen) -> None:
        for pipe in (proc.stdin, proc.stdout):
            try:
                pipe.close()
            except OSError:
                pass
