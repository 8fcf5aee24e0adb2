"""hashdrop is a content-addressed file-drop service. Clients upload a file
or hand over a URL, and get back a public URL whose name is the SHA-1 digest
of the content plus the original extension.

Typical use cases for this kind of system are ones where:

- Files are written once and never change (e.g. pasted screenshots).
- The same content should always get the same link.
- Files are served by a separate static file server.
"""

from .__meta__ import (
    __title__,
    __summary__,
    __version__,
    __author__,
    __email__,
    __license__,
)

from .store import HashStore
from .utils import HashAddress, Stream


__all__ = ("HashStore", "HashAddress", "Stream")
