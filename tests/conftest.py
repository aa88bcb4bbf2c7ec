import os
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional

_TMP_ROOT = tempfile.mkdtemp(prefix="stylesnap-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("LOG_FILE", os.path.join(_TMP_ROOT, "logs", "logs.txt"))
os.environ.setdefault("PUBLIC_DIR", os.path.join(_TMP_ROOT, "public"))
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_secret")
os.environ.setdefault("REPLICATE_API_TOKEN", "r8_test_token")
os.environ["CORS_ORIGINS"] = "http://localhost:3000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stylesnap.core.config import settings
from stylesnap.db import session
from stylesnap.db.base import Base
from stylesnap.main import app
from stylesnap.models import TrialRecord
from stylesnap.services.generation_service import ImageGenerator, get_image_generator
from stylesnap.services.payment_service import RazorpayClient, get_payment_gateway

import stylesnap.models  # noqa: F401

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


class FakeImageGenerator(ImageGenerator):
    """Records every call; fails when `error` is set."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    async def generate(self, image_path, prompt, style_image_path=None) -> bytes:
        self.calls.append((Path(image_path), prompt, style_image_path))
        if self.error is not None:
            raise self.error
        return JPEG_BYTES


class FakeRazorpayClient(RazorpayClient):
    """Creates sequential orders without touching the network."""

    def __init__(self):
        super().__init__(key_id="rzp_test_key", key_secret="test_secret")
        self.orders: List[dict] = []

    async def create_order(self, amount, currency, receipt, notes):
        order = {
            "id": f"order_TEST{len(self.orders) + 1}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
            "status": "created",
        }
        self.orders.append(order)
        return order


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(db_engine, monkeypatch: pytest.MonkeyPatch):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    monkeypatch.setattr(session, "SessionLocal", factory)
    monkeypatch.setattr(session, "engine", db_engine)
    return factory


@pytest.fixture()
def db(session_factory):
    db_session = session_factory()
    try:
        yield db_session
    finally:
        db_session.close()


@pytest.fixture()
def public_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "public"
    (root / settings.UPLOAD_SUBDIR).mkdir(parents=True)
    (root / settings.GENERATED_SUBDIR).mkdir(parents=True)
    monkeypatch.setattr(settings, "PUBLIC_DIR", str(root))
    return root


@pytest.fixture()
def generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture()
def gateway() -> FakeRazorpayClient:
    return FakeRazorpayClient()


@pytest.fixture()
def app_overrides(session_factory, public_dir, generator, gateway, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", "test_secret")
    monkeypatch.setattr(settings, "DAILY_FREE_LIMIT", 0)
    app.dependency_overrides[get_image_generator] = lambda: generator
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_overrides) -> Iterator[TestClient]:
    test_client = TestClient(app_overrides)
    try:
        yield test_client
    finally:
        test_client.close()


@pytest.fixture()
def uploaded_image(public_dir: Path) -> str:
    """A source image already sitting in the uploads folder; returns its public URL."""
    path = public_dir / settings.UPLOAD_SUBDIR / "source.png"
    path.write_bytes(PNG_BYTES)
    return f"/{settings.UPLOAD_SUBDIR}/source.png"


def make_trial(db, trial_id: str, free_used: bool = False, paid_credits: int = 0) -> TrialRecord:
    trial = TrialRecord(
        id=trial_id,
        ip="127.0.0.1",
        last_ip="127.0.0.1",
        user_metadata={"ua": "pytest"},
        free_used=free_used,
        paid_credits=paid_credits,
    )
    db.add(trial)
    db.commit()
    return trial


def fetch_trial(session_factory, trial_id: str) -> Optional[TrialRecord]:
    fresh = session_factory()
    try:
        return fresh.query(TrialRecord).filter(TrialRecord.id == trial_id).first()
    finally:
        fresh.close()
