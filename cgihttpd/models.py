import enum
import os
from dataclasses import dataclass
from typing import Dict, Optional


class Method(enum.Enum):
    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    UNSUPPORTED = None

    @classmethod
    def from_token(cls, token: str) -> "Method":
        try:
            return cls(token.upper())
        except ValueError:
            return cls.UNSUPPORTED


class ResourceKind(enum.Enum):
    STATIC = "static"
    EXECUTABLE = "executable"


class ReadStatus(enum.Enum):
    OK = "ok"
    END_OF_STREAM = "eof"
    OVERFLOW = "overflow"
    IO_ERROR = "io-error"


@dataclass(frozen=True)
class LineResult:
    line: bytes
    status: ReadStatus

    @property
    def count(self) -> int:
        return len(self.line)


@dataclass(frozen=True)
class RequestLine:
    method: Method
    token: str
    target: str


@dataclass(frozen=True)
class ResolvedResource:
    path: str
    kind: ResourceKind
    query: Optional[str] = None


@dataclass(frozen=True)
class CGIInvocation:
    program: str
    method: str
    query: bytes = b""
    content_length: Optional[int] = None

    @classmethod
    def build(cls, program: str, method: str, payload: bytes) -> "CGIInvocation":
        if method == Method.GET.value:
            return cls(program=program, method=method, query=payload)
        return cls(program=program, method=method, query=payload, content_length=len(payload))

    def environ(self, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ if base is None else base)
        for name in ("REQUEST_METHOD", "QUERY_STRING", "CONTENT_LENGTH"):
            env.pop(name, None)

        env["REQUEST_METHOD"] = self.method
        if self.content_length is None:
            env["QUERY_STRING"] = self.query.decode("iso-8859-1")
        else:
            env["CONTENT_LENGTH"] = str(self.content_length)
        return env
