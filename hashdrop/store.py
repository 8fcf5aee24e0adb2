"""Module for HashStore class."""

import hashlib
import os
from contextlib import closing
from tempfile import NamedTemporaryFile
from typing import Iterator, Optional, Tuple

from fs.copy import copy_file
from fs.errors import FSError
from fs.permissions import Permissions
from loguru import logger

import hashdrop.utils as u
from hashdrop.exceptions import (
    CopyFailed,
    FetchError,
    PublishFailed,
    TempFileCreateFailed,
)


TMP_PREFIX = "hashdrop_"


class HashStore(object):
    """Content addressable file drop. Files are written once to a temporary
    directory while their hash is computed, then published in a flat
    :attr:`root` directory under ``<hexdigest><extension>``.

    Attributes:
        root (str): Directory path where published files live.
        tmpdir (str): Directory path for files being written. It should sit on
            the same filesystem as :attr:`root` so publishing is an atomic
            rename.
        algorithm (str): Hash algorithm to use when computing file hash.
            Algorithm should be available in ``hashlib`` module. Defaults to
            ``'sha1'``.
        fmode (int, optional): File mode permission to set on published files.
            Defaults to ``0o644`` which allows owner to read/write and
            everyone else to read.
        dmode (int, optional): Directory mode permission used when
            :attr:`root` or :attr:`tmpdir` have to be created. Defaults to
            ``0o755``.
    """

    def __init__(self,
                 root: str,
                 tmpdir: str,
                 algorithm: str = "sha1",
                 fmode: int = 0o644,
                 dmode: int = 0o755):
        self.fs = u.load_fs(root, dmode)
        self.tmpfs = u.load_fs(tmpdir, dmode)
        self.root = os.path.abspath(root)
        self.tmpdir = os.path.abspath(tmpdir)
        self.algorithm = algorithm
        self.fmode = fmode
        self.dmode = dmode

    def put(self, content, filename: Optional[str] = "") -> u.HashAddress:
        """Store contents of `content` using its content hash for the
        address. `content` is consumed and closed whatever the outcome.

        Args:
            content: :class:`hashdrop.utils.Stream`, readable object or
                iterable of bytes.
            filename: Original filename. Only its extension is kept.

        Returns:
            File's hash address.

        Raises:
            TempFileCreateFailed: If the temporary file can't be created.
            CopyFailed: If reading `content` or writing it to disk fails.
            PublishFailed: If the file can't be moved to its final name.
        """
        extension = u.extension(filename)

        if not isinstance(content, u.Stream):
            content = u.Stream(content)

        with closing(content) as stream:
            tmp_path, hashid, size = self._spool(stream)

        relpath = hashid + extension
        abspath = os.path.join(self.root, relpath)
        is_duplicate = os.path.isfile(abspath)

        self._publish(tmp_path, relpath, abspath)
        self._chmod(abspath)

        logger.info("Stored {} ({} bytes{})", relpath, size,
                    ", duplicate" if is_duplicate else "")

        return u.HashAddress(hashid, relpath, abspath, is_duplicate)

    def exists(self, filename: str) -> bool:
        """Check whether a given filename is published in the store."""
        return bool(filename) and self.fs.isfile(filename)

    def files(self) -> Iterator[str]:
        """Return generator that yields the absolute path of every published
        file.
        """
        for name in sorted(self.fs.listdir("/")):
            if self.fs.isfile(name):
                yield os.path.join(self.root, name)

    def count(self) -> int:
        """Return count of the number of published files."""
        return sum(1 for _ in self.files())

    def __contains__(self, filename: str) -> bool:
        return self.exists(filename)

    def __iter__(self) -> Iterator[str]:
        return self.files()

    def __len__(self) -> int:
        return self.count()

    def _spool(self, stream: u.Stream) -> Tuple[str, str, int]:
        """Copy `stream` into a new temporary file while feeding every chunk to
        the hash. Return the temporary file path, the hex digest and the size.
        """
        try:
            tmp = NamedTemporaryFile(dir=self.tmpdir,
                                     prefix=TMP_PREFIX,
                                     delete=False)
        except OSError as exc:
            raise TempFileCreateFailed(
                "Couldn't create temp file: {0}".format(exc)) from exc

        hash = hashlib.new(self.algorithm)
        size = 0

        try:
            with tmp:
                for data in stream:
                    hash.update(data)
                    tmp.write(data)
                    size += len(data)
        except (OSError, FetchError) as exc:
            self._discard(tmp.name)
            raise CopyFailed(
                "Writing to temp file failed: {0}".format(exc)) from exc

        return tmp.name, hash.hexdigest(), size

    def _publish(self, tmp_path: str, relpath: str, abspath: str) -> None:
        """Move the temporary file to its public name. A rename replaces an
        existing file atomically. When renaming isn't possible the file is
        copied over, which readers may observe half written.
        """
        try:
            os.replace(tmp_path, abspath)
            return
        except (OSError, ValueError) as exc:
            logger.warning("Rename of {} to {} failed ({}), copying instead",
                           tmp_path, abspath, exc)

        tmpname = os.path.basename(tmp_path)

        try:
            copy_file(self.tmpfs, tmpname, self.fs, relpath)
        except (OSError, FSError) as exc:
            self._discard(tmp_path)
            raise PublishFailed(
                "Couldn't publish {0}: {1}".format(relpath, exc)) from exc

        self._discard(tmp_path)

    def _discard(self, tmp_path: str) -> None:
        """Remove a temporary file that will never be published."""
        try:
            self.tmpfs.remove(os.path.basename(tmp_path))
        except FSError as exc:
            logger.warning("Couldn't remove temp file {}: {}", tmp_path, exc)

    def _chmod(self, abspath: str) -> None:
        try:
            os.chmod(abspath, Permissions.create(self.fmode).mode)
        except OSError as exc:
            logger.warning("Couldn't set mode of {}: {}", abspath, exc)
