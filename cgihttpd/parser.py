from .errors import ClientProtocolError
from .models import Method, RequestLine

# the ASCII set C isspace() matches
WHITESPACE = " \t\n\r\x0b\x0c"


def _take_token(text: str, pos: int) -> tuple[str, int]:
    start = pos
    while pos < len(text) and text[pos] not in WHITESPACE:
        pos += 1
    return text[start:pos], pos


def parse_request_line(line: bytes, max_method_len: int = 128, max_target_len: int = 512) -> RequestLine:
    """Split ``METHOD SP TARGET [SP VERSION]`` into method and target.

    The target is passed through untouched: no percent-decoding and no
    ``..`` normalisation. Tokens at or over their limit are rejected rather
    than truncated.
    """
    text = line.decode("iso-8859-1")

    pos = 0
    while pos < len(text) and text[pos] in WHITESPACE:
        pos += 1

    token, pos = _take_token(text, pos)
    if not token:
        raise ClientProtocolError("empty request line")
    if len(token) >= max_method_len:
        raise ClientProtocolError("method token too long")

    while pos < len(text) and text[pos] in WHITESPACE:
        pos += 1

    target, _ = _take_token(text, pos)
    if len(target) >= max_target_len:
        raise ClientProtocolError("request target too long")

    return RequestLine(method=Method.from_token(token), token=token, target=target)
