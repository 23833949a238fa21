import base64
import io
import os

# Settings are read at import time; pin a throwaway environment first
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["OTP_SECRET"] = "test-otp-secret"
os.environ["ALLOW_DEMO_OTP"] = "false"
os.environ["SMS_BACKEND"] = "log"
os.environ.pop("REDIS_URL", None)

import pytest
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.db import models  # noqa: F401


def make_png_base64(color=(200, 30, 30), size=(8, 8)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def png_b64():
    return make_png_base64()


class FakeAudit:
    def __init__(self):
        self.events = []

    def log(self, action, phone, user_id=None, success=True, details=None):
        self.events.append((action, phone, success))

    def actions(self):
        return [e[0] for e in self.events]


@pytest.fixture
def audit():
    return FakeAudit()
