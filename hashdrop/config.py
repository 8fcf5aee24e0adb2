"""Process-wide settings, built once at startup and never mutated."""

from dataclasses import dataclass
from typing import Tuple


DEFAULT_LISTEN = "127.0.0.1:8000"
DEFAULT_FILE_STORE = "./store"
DEFAULT_URL_BASE = "http://127.0.0.1:8000/c/"
DEFAULT_TMP_DIR = "./tmp"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/90.0.4430.212 Safari/537.36"
)
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Settings shared read-only by every request.

    Attributes:
        listen: ``host:port`` address to serve on.
        file_store: Directory published files are stored in.
        url_base: Public URL prefix the stored filename is appended to.
        tmp_dir: Directory for files being written.
        user_agent: ``User-Agent`` sent when fetching remote files.
        log_level: loguru level name.
        allow_error_status: Store non-2xx remote responses instead of failing.
    """

    listen: str = DEFAULT_LISTEN
    file_store: str = DEFAULT_FILE_STORE
    url_base: str = DEFAULT_URL_BASE
    tmp_dir: str = DEFAULT_TMP_DIR
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = DEFAULT_LOG_LEVEL
    allow_error_status: bool = False

    @property
    def address(self) -> Tuple[str, int]:
        return split_listen(self.listen)


def split_listen(address: str) -> Tuple[str, int]:
    """Split a ``host:port`` listen address. An empty host means every
    interface and IPv6 hosts may be bracketed, e.g. ``[::1]:8000``.

    Raises:
        ValueError: If `address` has no valid port.
    """
    host, sep, port = address.rpartition(":")

    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError("Invalid listen address: {0!r}".format(address))

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    return host or "0.0.0.0", int(port)
