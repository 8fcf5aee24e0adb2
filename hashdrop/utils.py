"""
common utils for hashdrop
"""

from collections import namedtuple
from typing import Callable, Iterable, Iterator, Optional

from fs.osfs import OSFS


CHUNK_SIZE = 64 * 1024


class HashAddress(namedtuple("HashAddress",
                             ["id", "relpath", "abspath", "is_duplicate"])):
    """File address containing the file's content hash, its public filename,
    its absolute path on disk and whether the store already held it.

    Attributes:
        id (str): Hex digest of the file's content.
        relpath (str): Filename relative to the store root. This is the name
            published under the public URL prefix.
        abspath (str): Absolute path of the file on disk.
        is_duplicate (bool): Whether an identical file was already published
            under the same name.
    """

    def __new__(cls, id, relpath, abspath, is_duplicate=False):
        return super(HashAddress, cls).__new__(cls, id, relpath, abspath,
                                               is_duplicate)


def to_bytes(text):
    if not isinstance(text, bytes):
        text = bytes(text, "utf8")
    return text


def extension(filename: Optional[str]) -> str:
    """Return the extension of the last ``/``-separated element of
    `filename`, starting at its last dot. Return ``''`` if there is no dot.

    Only this substring of a client supplied name is ever used, so directory
    components can't leak into the stored filename.
    """
    if not filename:
        return ""

    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def load_fs(root: str, dmode: int = 0o755) -> OSFS:
    """Open directory `root` as a pyfilesystem2 filesystem, creating it with
    `dmode` permissions if needed.
    """
    return OSFS(root, create=True, create_mode=dmode)


class Stream(object):
    """Single-pass, read-once source of bytes.

    The input `obj` can be a file-like object or an iterable yielding chunks
    of bytes (or text, which is encoded as UTF-8). The stream owns `obj`:
    :meth:`close` closes it, then calls each function in `on_close`.
    Closing more than once is a no-op.
    """

    def __init__(self,
                 obj,
                 on_close: Iterable[Callable[[], None]] = (),
                 chunk_size: int = CHUNK_SIZE):
        if hasattr(obj, "read"):
            chunks = self._read_chunks(obj, chunk_size)
        elif hasattr(obj, "__iter__") and not isinstance(obj, (str, bytes)):
            chunks = iter(obj)
        else:
            raise ValueError("Object must be a readable object or an "
                             "iterable of bytes.")

        self._obj = obj
        self._chunks = chunks
        self._on_close = list(on_close)
        self.closed = False

    @staticmethod
    def _read_chunks(obj, chunk_size: int) -> Iterator[bytes]:
        while True:
            data = obj.read(chunk_size)

            if not data:
                break

            yield data

    def __iter__(self) -> Iterator[bytes]:
        """Yield the remaining content of the underlying object as bytes."""
        for data in self._chunks:
            if data:
                yield to_bytes(data)

    def close(self) -> None:
        """Close the underlying object and release anything registered with
        `on_close`.
        """
        if self.closed:
            return

        self.closed = True

        try:
            if hasattr(self._obj, "close"):
                self._obj.close()
        finally:
            for release in self._on_close:
                release()
