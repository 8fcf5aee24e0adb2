"""Exception hierarchy for hashdrop.

Every error is local to the request that raised it. The message of each
exception is what the client gets back as the body of the 500 response.
"""


class HashDropError(Exception):
    """Base exception for all hashdrop errors."""

    def __init__(self, message):
        super(HashDropError, self).__init__(message)
        self.message = message


class FetchError(HashDropError):
    """Raised when a byte stream can't be obtained from an upload or URL."""


class MissingFileField(FetchError):
    """Raised when a multipart form has no ``file`` part."""

    def __init__(self, field="file"):
        super(MissingFileField, self).__init__("http: no such file")
        self.field = field


class MalformedForm(FetchError):
    """Raised when a request body can't be parsed as a form."""


class MissingURL(FetchError):
    """Raised when no ``url`` value was supplied."""

    def __init__(self):
        super(MissingURL, self).__init__("missing url")


class ConnectFailed(FetchError):
    """Raised when the remote host can't be reached or the request is
    invalid.
    """


class TimeoutExceeded(FetchError):
    """Raised when connecting or waiting on the remote end takes too long."""


class NonSuccessStatus(FetchError):
    """Raised when the remote end answers with a non-2xx status."""

    def __init__(self, url, status_code):
        super(NonSuccessStatus, self).__init__(
            "Get {0!r}: unexpected status {1}".format(url, status_code)
        )
        self.url = url
        self.status_code = status_code


class StoreError(HashDropError):
    """Raised when a stream can't be persisted to the store."""


class TempFileCreateFailed(StoreError):
    pass


class CopyFailed(StoreError):
    pass


class PublishFailed(StoreError):
    pass
