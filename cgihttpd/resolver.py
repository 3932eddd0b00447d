import logging
import os
import stat
from typing import Optional, Tuple

from .errors import ResourceNotFound
from .models import ResolvedResource, ResourceKind

logger = logging.getLogger(__name__)

EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def split_target(target: str) -> Tuple[str, Optional[str]]:
    path, sep, query = target.partition("?")
    return path, (query if sep else None)


def classify(mode: int, query: Optional[str]) -> ResourceKind:
    """Any execute bit, or a query string on the target, means CGI."""
    if mode & EXEC_BITS:
        return ResourceKind.EXECUTABLE
    if query is not None:
        return ResourceKind.EXECUTABLE
    return ResourceKind.STATIC


class PathResolver:
    def __init__(self, document_root: str) -> None:
        self.root = document_root

    def resolve(self, target: str) -> ResolvedResource:
        url_path, query = split_target(target)
        abs_path = self.fs_path(url_path)

        st = self._stat(abs_path)
        if stat.S_ISDIR(st.st_mode):
            abs_path = os.path.join(abs_path, "index.html")
            st = self._stat(abs_path)

        kind = classify(st.st_mode, query)
        logger.debug("resolved %s -> %s (%s)", target, abs_path, kind.value)
        return ResolvedResource(path=abs_path, kind=kind, query=query)

    def fs_path(self, url_path: str) -> str:
        # no containment check: the target maps straight onto the filesystem
        return os.path.join(self.root, url_path.lstrip("/"))

    @staticmethod
    def _stat(path: str) -> os.stat_result:
        # a NUL byte in the path names no file either
        try:
            return os.stat(path)
        except (OSError, ValueError):
            raise ResourceNotFound(path)
