from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import http_exception_handler
from app.middleware import RequestSizeLimitMiddleware


def make_client(max_bytes=1000):
    app = FastAPI()
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=max_bytes)

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body)}

    return TestClient(app)


def test_small_body_passes():
    r = make_client().post("/echo", content=b"x" * 500)
    assert r.status_code == 200
    assert r.json() == {"size": 500}


def test_declared_length_over_cap_is_413():
    r = make_client().post("/echo", content=b"x" * 1500)
    assert r.status_code == 413
    assert r.json()["message"] == "Request entity too large"


def test_chunked_body_over_cap_is_413():
    chunks = iter([b"x" * 600, b"y" * 600])
    r = make_client().post("/echo", content=chunks)
    assert "content-length" not in r.request.headers
    assert r.status_code == 413
    assert r.json()["ok"] is False


def test_chunked_body_under_cap_passes():
    r = make_client().post("/echo", content=iter([b"x" * 300, b"y" * 300]))
    assert r.status_code == 200
    assert r.json() == {"size": 600}
