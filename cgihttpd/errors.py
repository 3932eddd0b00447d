class HTTPError(Exception):
    status = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)


class ClientProtocolError(HTTPError):
    """Malformed or oversized request line, broken header block."""
    status = 400


class ResourceNotFound(HTTPError):
    status = 404


class SubprocessSpawnError(HTTPError):
    """Pipe, fork or exec failure while starting a CGI program."""
    status = 500


class UnsupportedMethod(HTTPError):
    status = 501
