from dataclasses import dataclass
from typing import Optional

SERVER_NAME = "httpd"
SERVER_VERSION = "0.1.0"


@dataclass(frozen=True)
class Config:
    host: str = "0.0.0.0"
    port: int = 8080
    root: str = "."
    # 0 handles every connection inside the accept loop
    workers: int = 0
    queue_size: int = 1000
    # historical BSD ceiling, kept as is
    backlog: int = 5
    recv_timeout: Optional[float] = None
    accept_timeout: float = 1.0
    buffer_size: int = 4096
    max_method_len: int = 128
    max_target_len: int = 512
    max_header_lines: int = 100
    debug: bool = False
