import dataclasses
import os

import httpx
import pytest
from fastapi.testclient import TestClient

from hashdrop.app import create_app
from hashdrop.config import Settings
from hashdrop.fetch import Fetcher


URL_BASE = "https://files.example.test/c/"
HELLO_SHA1 = "aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"
REMOTE_FILES = {
    "/hello.txt": b"hello",
    "/logo.png": b"\x89PNG\r\n\x1a\n",
}


def remote(request):
    if request.url.host == "unreachable.test":
        raise httpx.ConnectError("[Errno 111] Connection refused",
                                 request=request)

    if request.url.host == "slow.test":
        raise httpx.ReadTimeout("timed out", request=request)

    content = REMOTE_FILES.get(request.url.path)

    if content is None:
        return httpx.Response(404, content=b"<h1>Not Found</h1>")

    return httpx.Response(200, content=content)


@pytest.fixture
def settings(tmpdir):
    return Settings(
        listen="127.0.0.1:0",
        file_store=str(tmpdir.join("c")),
        url_base=URL_BASE,
        tmp_dir=str(tmpdir.join("tmp")),
        user_agent="hashdrop-test",
    )


@pytest.fixture
def app(settings):
    fetcher = Fetcher(settings.user_agent,
                      transport=httpx.MockTransport(remote))
    return create_app(settings, fetcher=fetcher)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def store(app):
    return app.state.store


def stored(settings, filename):
    with open(os.path.join(settings.file_store, filename), "rb") as fileobj:
        return fileobj.read()


def test_up(client, settings, store):
    response = client.post("/up", files={"file": ("hello.txt", b"hello")})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == URL_BASE + HELLO_SHA1 + ".txt"
    assert stored(settings, HELLO_SHA1 + ".txt") == b"hello"
    assert len(store) == 1


def test_up_is_idempotent(client, settings, store):
    first = client.post("/up", files={"file": ("a.txt", b"hello")})
    second = client.post("/up", files={"file": ("b.txt", b"hello")})

    assert first.text == second.text == URL_BASE + HELLO_SHA1 + ".txt"
    assert stored(settings, HELLO_SHA1 + ".txt") == b"hello"
    assert len(store) == 1


def test_up_empty_file(client):
    response = client.post("/up", files={"file": ("noext", b"")})

    assert response.status_code == 200
    assert response.text == URL_BASE + "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_up_missing_file(client, store):
    response = client.post("/up", data={"other": "value"})

    assert response.status_code == 500
    assert response.text == "http: no such file\n"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert len(store) == 0


def test_up_file_sent_as_text_field(client, store):
    response = client.post("/up", data={"file": "hello"})

    assert response.status_code == 500
    assert len(store) == 0


def test_up_multipart_without_boundary(client, settings, store):
    response = client.post("/up",
                           content=b"abc",
                           headers={"content-type": "multipart/form-data"})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "boundary" in response.text.lower()
    assert len(store) == 0
    assert os.listdir(settings.tmp_dir) == []


def test_up_get_not_allowed(client):
    response = client.get("/up")

    assert response.status_code == 405


def test_down_get(client, settings):
    response = client.get("/down",
                          params={"url": "https://remote.test/logo.png",
                                  "filename": "logo.png"})

    assert response.status_code == 200
    assert response.text.startswith(URL_BASE)
    assert response.text.endswith(".png")
    filename = response.text[len(URL_BASE):]
    assert stored(settings, filename) == REMOTE_FILES["/logo.png"]


def test_down_post(client):
    response = client.post("/down",
                           data={"url": "https://remote.test/hello.txt",
                                 "filename": "greeting.md"})

    assert response.status_code == 200
    assert response.text == URL_BASE + HELLO_SHA1 + ".md"


def test_down_form_overrides_query(client):
    response = client.post("/down?filename=query.txt",
                           data={"url": "https://remote.test/hello.txt",
                                 "filename": "form.md"})

    assert response.status_code == 200
    assert response.text == URL_BASE + HELLO_SHA1 + ".md"


def test_down_without_filename(client):
    response = client.get("/down", params={"url": "https://remote.test/hello.txt"})

    assert response.status_code == 200
    assert response.text == URL_BASE + HELLO_SHA1


def test_down_filename_extension_only(client, settings, store):
    response = client.get("/down",
                          params={"url": "https://remote.test/hello.txt",
                                  "filename": "../../etc/cron.d/evil.sh"})

    assert response.text == URL_BASE + HELLO_SHA1 + ".sh"
    assert list(store) == [os.path.join(store.root, HELLO_SHA1 + ".sh")]


def test_down_multipart_without_boundary(client, store):
    response = client.post("/down?url=https://remote.test/hello.txt",
                           content=b"abc",
                           headers={"content-type": "multipart/form-data"})

    assert response.status_code == 500
    assert "boundary" in response.text.lower()
    assert len(store) == 0


def test_down_missing_url(client, store):
    response = client.get("/down")

    assert response.status_code == 500
    assert response.text == "missing url\n"
    assert len(store) == 0


def test_down_unreachable(client, settings, store):
    response = client.get("/down",
                          params={"url": "http://unreachable.test/file.txt",
                                  "filename": "file.txt"})

    assert response.status_code == 500
    assert "connect" in response.text.lower()
    assert len(store) == 0
    assert os.listdir(settings.file_store) == []


def test_down_timeout(client, store):
    response = client.get("/down", params={"url": "http://slow.test/file.txt"})

    assert response.status_code == 500
    assert "timeout" in response.text.lower()
    assert len(store) == 0


def test_down_error_status(client, store):
    response = client.get("/down", params={"url": "https://remote.test/missing"})

    assert response.status_code == 500
    assert "404" in response.text
    assert len(store) == 0


def test_down_error_status_allowed(settings):
    settings = dataclasses.replace(settings, allow_error_status=True)
    app = create_app(settings,
                     fetcher=Fetcher(settings.user_agent,
                                     transport=httpx.MockTransport(remote),
                                     allow_error_status=settings.allow_error_status))

    with TestClient(app) as client:
        response = client.get("/down",
                              params={"url": "https://remote.test/missing",
                                      "filename": "page.html"})

    assert response.status_code == 200
    assert response.text.endswith(".html")
    assert stored(settings, response.text[len(URL_BASE):]) == b"<h1>Not Found</h1>"


def test_no_other_routes(client):
    assert client.get("/docs").status_code == 404
    assert client.get("/openapi.json").status_code == 404
