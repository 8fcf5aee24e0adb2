"""HTTP surface: ``POST /up`` stores an uploaded file, ``GET|POST /down``
stores a remote file. Both answer with the public URL of the stored file as
plain text, or a 500 carrying the error message.
"""

from contextlib import closing
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from loguru import logger
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from hashdrop.__meta__ import __summary__, __title__, __version__
from hashdrop.config import Settings
from hashdrop.exceptions import HashDropError, MalformedForm
from hashdrop.fetch import Fetcher, fetch_upload
from hashdrop.store import HashStore


async def read_form(request: Request) -> Dict[str, Any]:
    """Return the query string values of `request` updated with its form
    body values.

    Raises:
        MalformedForm: If the body can't be parsed as a form.
    """
    values = dict(request.query_params)

    try:
        form = await request.form()
    except HTTPException as exc:
        raise MalformedForm(exc.detail) from exc
    except MultiPartException as exc:
        raise MalformedForm(exc.message) from exc

    values.update(form.items())
    return values


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def build_router(store: HashStore, fetcher: Fetcher, url_base: str) -> APIRouter:
    """Build the handler table for a store, a fetcher and the public URL
    prefix.
    """
    router = APIRouter()

    @router.post("/up", response_class=PlainTextResponse)
    def receive_file(form: Dict[str, Any] = Depends(read_form)) -> str:
        stream, filename = fetch_upload(form.get("file"))

        with closing(stream):
            address = store.put(stream, filename)

        return url_base + address.relpath

    @router.api_route("/down",
                      methods=["GET", "POST"],
                      response_class=PlainTextResponse)
    def receive_link(form: Dict[str, Any] = Depends(read_form)) -> str:
        stream = fetcher.fetch(_text(form.get("url")))

        with closing(stream):
            address = store.put(stream, _text(form.get("filename")))

        return url_base + address.relpath

    return router


async def hashdrop_error_handler(request: Request,
                                 exc: HashDropError) -> PlainTextResponse:
    logger.warning("{} {} failed: {}: {}", request.method, request.url.path,
                   type(exc).__name__, exc.message)

    return PlainTextResponse(
        exc.message + "\n",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers={"X-Content-Type-Options": "nosniff"},
    )


def create_app(settings: Settings,
               store: Optional[HashStore] = None,
               fetcher: Optional[Fetcher] = None) -> FastAPI:
    """Create the application serving `settings`. `store` and `fetcher`
    default to ones built from `settings`.
    """
    if store is None:
        store = HashStore(settings.file_store, settings.tmp_dir)

    if fetcher is None:
        fetcher = Fetcher(settings.user_agent,
                          allow_error_status=settings.allow_error_status)

    app = FastAPI(
        title=__title__,
        version=__version__,
        description=__summary__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.include_router(build_router(store, fetcher, settings.url_base))
    app.add_exception_handler(HashDropError, hashdrop_error_handler)

    return app
