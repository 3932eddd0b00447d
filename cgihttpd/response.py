import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .config import SERVER_NAME, SERVER_VERSION
from .stream import write_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusEntry:
    reason: str
    content_type: str = "text/html"
    body: Optional[str] = None


STATUS_TABLE: Dict[int, StatusEntry] = {
    200: StatusEntry("OK", content_type="text/html; charset=utf-8"),
    301: StatusEntry("Moved Permanently"),
    400: StatusEntry(
        "BAD REQUEST",
        body=(
            "<HTML><TITLE>Bad Request</TITLE>\r\n"
            "<BODY><P>Your browser sent a bad request,\r\n"
            "such as a POST without a blank line after its headers.\r\n"
            "</BODY></HTML>\r\n"
        ),
    ),
    404: StatusEntry(
        "NOT FOUND",
        body=(
            "<HTML><TITLE>Not Found</TITLE>\r\n"
            "<BODY><P>The server could not fulfill\r\n"
            "your request because the resource specified\r\n"
            "is unavailable or nonexistent.\r\n"
            "</BODY></HTML>\r\n"
        ),
    ),
    500: StatusEntry(
        "Internal Server Error",
        body=(
            "<HTML><TITLE>Error</TITLE>\r\n"
            "<BODY><P>Error prohibited CGI execution.\r\n"
            "</BODY></HTML>\r\n"
        ),
    ),
    501: StatusEntry(
        "Method Not Implemented",
        body=(
            "<HTML><HEAD><TITLE>Method Not Implemented\r\n"
            "</TITLE></HEAD>\r\n"
            "<BODY><P>HTTP request method not supported.\r\n"
            "</BODY></HTML>\r\n"
        ),
    ),
}


class ResponseWriter:
    def __init__(self, server_name: Optional[str] = None) -> None:
        if server_name is None:
            server_name = f"{SERVER_NAME}/{SERVER_VERSION}"
        self.server_name = server_name

    def header_block(self, code: int) -> bytes:
        entry = STATUS_TABLE[code]
        head = (
            f"HTTP/1.0 {code} {entry.reason}\r\n"
            f"Server: {self.server_name}\r\n"
            f"Content-Type: {entry.content_type}\r\n"
            "\r\n"
        )
        return head.encode("iso-8859-1")

    def write_headers(self, conn, code: int = 200) -> None:
        logger.debug("response %d", code)
        write_all(conn, self.header_block(code))

    def write_status(self, conn, code: int) -> None:
        """Header block for ``code``, plus the fixed HTML body of error codes."""
        self.write_headers(conn, code)
        body = STATUS_TABLE[code].body
        if body is not None:
            write_all(conn, body.encode("iso-8859-1"))
