import pytest
from fastapi.testclient import TestClient

from app.application.services.profile_service import ProfileService
from app.database import get_session
from app.dependencies import get_audit_logger, get_otp_sender, get_profile_service, get_rate_limiter
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from app.main import app

from .conftest import make_png_base64

PHONE = "03001234567"


class CapturingSender:
    def __init__(self):
        self.codes = {}

    def send(self, phone, code):
        self.codes[phone] = code


class AllowAll:
    def allow(self, key, max_requests, window_seconds):
        return True

    def release(self, key, window_seconds):
        pass


@pytest.fixture
def sender():
    return CapturingSender()


@pytest.fixture
def client(session, sender):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_rate_limiter] = lambda: AllowAll()
    app.dependency_overrides[get_otp_sender] = lambda: sender
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def login(client, sender, phone=PHONE):
    r = client.post("/auth/request-otp", json={"phone": phone})
    assert r.status_code == 200
    r = client.post("/auth/verify-otp", json={"phone": phone, "otp": sender.codes[phone]})
    assert r.status_code == 200
    return r.json()["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_login_and_buyer_profile_flow(client, sender):
    r = client.post("/auth/request-otp", json={"phone": PHONE})
    body = r.json()
    assert r.status_code == 200
    assert body["ok"] is True
    assert body["phone"] == PHONE
    assert body["expiresInSec"] == 300
    assert "otp" not in body

    r = client.post("/auth/verify-otp", json={"phone": PHONE, "otp": sender.codes[PHONE]})
    assert r.status_code == 200
    body = r.json()
    token = body["token"]
    assert body["user"]["phone"] == PHONE
    assert body["user"]["role"] == "buyer"

    r = client.get("/profile/me")
    assert r.status_code == 401
    assert r.json()["ok"] is False

    r = client.post("/profile/save", json={"role": "buyer", "name": "Ali"}, headers=auth(token))
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["role"] == "buyer"
    assert body["user"]["phone"] == PHONE
    assert body["user"]["name"] == "Ali"

    r = client.get("/profile/me", headers=auth(token))
    assert r.status_code == 200
    assert r.json()["user"]["name"] == "Ali"


def test_verify_is_single_use(client, sender):
    client.post("/auth/request-otp", json={"phone": PHONE})
    code = sender.codes[PHONE]
    assert client.post("/auth/verify-otp", json={"phone": PHONE, "otp": code}).status_code == 200

    r = client.post("/auth/verify-otp", json={"phone": PHONE, "otp": code})
    assert r.status_code == 400
    assert r.json()["message"] == "OTP already used"


def test_wrong_code_is_rejected(client, sender):
    client.post("/auth/request-otp", json={"phone": PHONE})
    wrong = "000000" if sender.codes[PHONE] != "000000" else "111111"
    r = client.post("/auth/verify-otp", json={"phone": PHONE, "otp": wrong})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid OTP"


def test_provider_profile_flow(client, sender, png_b64):
    token = login(client, sender)
    payload = {
        "role": "provider",
        "name": "Sana",
        "profilePicBase64": png_b64,
        "cnicFrontBase64": make_png_base64((10, 10, 10)),
        "cnicBackBase64": make_png_base64((20, 20, 20)),
        "selfieBase64": f"data:image/png;base64,{make_png_base64((30, 30, 30))}",
    }
    r = client.post("/profile/save", json=payload, headers=auth(token))
    assert r.status_code == 200
    body = r.json()
    assert body["role"] == "provider"
    assert body["status"] == "pending"
    assert body["user"]["verificationStatus"] == "pending"
    assert body["user"]["avatarBase64"] == png_b64

    r = client.get("/profile/me", headers=auth(token))
    assert r.json()["status"] == "pending"


def test_provider_without_documents_is_rejected(client, sender):
    token = login(client, sender)
    r = client.post("/profile/save", json={"role": "provider", "name": "Sana"}, headers=auth(token))
    assert r.status_code == 400
    assert r.json()["message"] == "Provider verification required"


def test_profile_me_before_save_is_404(client, sender):
    token = login(client, sender)
    r = client.get("/profile/me", headers=auth(token))
    assert r.status_code == 404
    assert r.json()["message"] == "Profile not found"


@pytest.mark.parametrize("header", [
    "Basic dXNlcjpwYXNz",
    "Bearer not-a-jwt",
    f"Bearer phone:{PHONE}",
])
def test_bad_credentials_are_401(client, header):
    r = client.get("/profile/me", headers={"Authorization": header})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_missing_token_checked_before_body_validation(client):
    r = client.post("/profile/save", json={"role": ["buyer"], "name": 5})
    assert r.status_code == 401


def test_request_otp_requires_phone(client):
    r = client.post("/auth/request-otp", json={})
    assert r.status_code == 400
    assert r.json()["message"] == "Phone required"


def test_request_otp_rejects_short_phone(client):
    r = client.post("/auth/request-otp", json={"phone": "12345"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid phone"


def test_malformed_json_is_400(client):
    r = client.post("/auth/request-otp", content=b"{oops", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["ok"] is False


def test_oversized_image_is_413(client, sender, session):
    token = login(client, sender)
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(
        user_repo=SqlUserRepository(session),
        audit_logger=get_audit_logger(),
        max_image_bytes=1000,
    )
    r = client.post(
        "/profile/save",
        json={"role": "buyer", "name": "Ali", "avatarBase64": "A" * 4000},
        headers=auth(token),
    )
    assert r.status_code == 413
    assert r.json()["ok"] is False


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json()["message"] == "Route not found: GET /nope"


def test_unhandled_error_is_sanitized(client, sender):
    token = login(client, sender)

    class Broken:
        def get_profile(self, phone):
            raise RuntimeError("connection string with password")

    app.dependency_overrides[get_profile_service] = lambda: Broken()
    r = client.get("/profile/me", headers=auth(token))
    assert r.status_code == 500
    assert r.json()["message"] == "Internal server error"
    assert "password" not in r.text


def test_security_headers_and_request_id(client):
    r = client.get("/", headers={"X-Request-ID": "abc123"})
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Request-ID"] == "abc123"
    assert r.json()["success"] is True
    assert r.json()["message"] == "PremiumChat API running"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "ok"
    assert r.json()["status"] == "healthy"
    assert r.json()["service"] == "PremiumChat API"
