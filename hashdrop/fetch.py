"""Obtain byte streams from uploads and remote URLs."""

from typing import Iterator, Optional, Tuple

import httpx
from starlette.datastructures import UploadFile

from hashdrop.exceptions import (
    ConnectFailed,
    FetchError,
    MissingFileField,
    MissingURL,
    NonSuccessStatus,
    TimeoutExceeded,
)
from hashdrop.utils import CHUNK_SIZE, Stream


FETCH_TIMEOUT = 20.0
MAX_REDIRECTS = 10


def fetch_upload(upload) -> Tuple[Stream, str]:
    """Return a stream over an uploaded file part and its declared filename.

    Raises:
        MissingFileField: If `upload` isn't a file part.
    """
    if not isinstance(upload, UploadFile):
        raise MissingFileField()

    return Stream(upload.file), upload.filename or ""


class Fetcher(object):
    """HTTP GET client used to pull remote files into the store.

    Every call to :meth:`fetch` gets its own client, hence its own cookie jar.
    Connecting (TLS handshake included) and each read are bounded by
    `timeout` seconds. The read bound covers waiting for the response headers
    and also every read of the body, so a body that stalls for longer than
    `timeout` fails even though its total transfer time is unbounded.
    Nothing is retried.

    Args:
        user_agent (str): Value of the ``User-Agent`` header.
        timeout (float, optional): Connect and read timeout in seconds.
        transport (httpx.BaseTransport, optional): Transport to send requests
            through instead of the default network transport.
        allow_error_status (bool, optional): Accept non-2xx responses as
            content instead of failing. Defaults to ``False``.
    """

    def __init__(self,
                 user_agent: str,
                 timeout: float = FETCH_TIMEOUT,
                 transport: Optional[httpx.BaseTransport] = None,
                 allow_error_status: bool = False):
        self.user_agent = user_agent
        self.timeout = httpx.Timeout(None, connect=timeout, read=timeout)
        self.transport = transport
        self.allow_error_status = allow_error_status

    def client(self) -> httpx.Client:
        return httpx.Client(
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            transport=self.transport,
        )

    def fetch(self, url: Optional[str]) -> Stream:
        """Issue a GET for `url` and return a stream over the response body.
        Closing the stream releases the response and its client.

        Raises:
            MissingURL: If `url` is empty.
            TimeoutExceeded: If connecting or waiting for the response times
                out.
            ConnectFailed: If the request can't be made or completed.
            NonSuccessStatus: If the response isn't 2xx and
                :attr:`allow_error_status` is off.
        """
        if not url:
            raise MissingURL()

        client = self.client()

        try:
            response = client.send(client.build_request("GET", url),
                                   stream=True)
        except httpx.TimeoutException as exc:
            client.close()
            raise TimeoutExceeded(
                "Get {0!r}: timeout exceeded: {1}".format(url, exc)) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            client.close()
            raise ConnectFailed(
                "Get {0!r}: couldn't connect: {1}".format(url, exc)) from exc

        if not response.is_success and not self.allow_error_status:
            response.close()
            client.close()
            raise NonSuccessStatus(url, response.status_code)

        return Stream(iter_body(response, url),
                      on_close=(response.close, client.close))


def iter_body(response: httpx.Response, url: str) -> Iterator[bytes]:
    """Yield the decoded response body, reporting transport failures as
    :class:`FetchError`.
    """
    try:
        for chunk in response.iter_bytes(CHUNK_SIZE):
            yield chunk
    except httpx.HTTPError as exc:
        raise FetchError(
            "Get {0!r}: reading body failed: {1}".format(url, exc)) from exc
