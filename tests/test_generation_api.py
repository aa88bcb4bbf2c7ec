from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from stylesnap.errors.exceptions import ImageGenerationException
from stylesnap.styles import get_style

from conftest import fetch_trial, make_trial


def _generate(client: TestClient, trial_id: str, image_url: str, **extra):
    body = {"trialId": trial_id, "imageUrl": image_url, "styleId": "ghibli-art"}
    body.update(extra)
    return client.post("/api/v1/generate", json=body)


def test_first_generation_is_free(client: TestClient, generator, uploaded_image, public_dir: Path, session_factory):
    response = _generate(client, "gen-fresh", uploaded_image)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["entitlementUsed"] == "free"
    assert data["hasUsedFreeTrial"] is True
    assert data["paidCredits"] == 0
    assert data["imageUrl"].startswith("/generated/")
    assert (public_dir / data["imageUrl"].lstrip("/")).is_file()

    assert len(generator.calls) == 1
    image_path, prompt, _ = generator.calls[0]
    assert image_path.name == "source.png"
    assert prompt == get_style("ghibli-art").style_prompt
    assert fetch_trial(session_factory, "gen-fresh").free_used is True


def test_blocked_identity_never_reaches_generator(client: TestClient, generator, uploaded_image, db):
    make_trial(db, "gen-blocked", free_used=True, paid_credits=0)

    response = _generate(client, "gen-blocked", uploaded_image)

    assert response.status_code == 402
    payload = response.json()
    assert payload["status"] == "need_payment"
    assert payload["statusCode"] == 402
    assert generator.calls == []


def test_paid_credit_allows_generation_after_free_used(client: TestClient, generator, uploaded_image, db, session_factory):
    make_trial(db, "gen-paid", free_used=True, paid_credits=2)

    response = _generate(client, "gen-paid", uploaded_image)

    assert response.status_code == 200
    assert response.json()["data"]["entitlementUsed"] == "paid"
    assert response.json()["data"]["paidCredits"] == 1
    assert fetch_trial(session_factory, "gen-paid").paid_credits == 1


def test_generator_failure_refunds_and_reports_upstream(client: TestClient, generator, uploaded_image, db, session_factory):
    make_trial(db, "gen-fail", free_used=True, paid_credits=1)
    generator.error = ImageGenerationException(detail="Replicate error 500")

    response = _generate(client, "gen-fail", uploaded_image)

    assert response.status_code == 502
    assert response.json()["kind"] == "upstream"
    assert fetch_trial(session_factory, "gen-fail").paid_credits == 1


def test_unexpected_generator_error_refunds_free_use(client: TestClient, generator, uploaded_image, session_factory):
    generator.error = RuntimeError("connection reset")

    response = _generate(client, "gen-crash", uploaded_image)

    assert response.status_code == 502
    assert fetch_trial(session_factory, "gen-crash").free_used is False


def test_explicit_prompt_overrides_style(client: TestClient, generator, uploaded_image):
    response = _generate(client, "gen-prompt", uploaded_image, styleId=None, prompt="  watercolor portrait  ")

    assert response.status_code == 200
    assert generator.calls[0][1] == "watercolor portrait"


@pytest.mark.parametrize(
    "image_url,status_code",
    [
        ("/../etc/passwd", 400),
        ("https://example.com/a.png", 400),
        ("data:image/png;base64,AAAA", 400),
        ("/uploads/missing.png", 404),
    ],
)
def test_rejects_bad_image_urls(client: TestClient, generator, public_dir, image_url, status_code):
    response = _generate(client, "gen-bad-url", image_url)

    assert response.status_code == status_code
    assert generator.calls == []


def test_rejects_missing_style_and_prompt(client: TestClient, generator, uploaded_image):
    response = client.post("/api/v1/generate", json={"trialId": "gen-x", "imageUrl": uploaded_image})

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"
    assert generator.calls == []


def test_rejects_unknown_style(client: TestClient, uploaded_image):
    response = _generate(client, "gen-y", uploaded_image, styleId="no-such-style")

    assert response.status_code == 400


def test_rejects_missing_trial_id(client: TestClient, generator, uploaded_image):
    response = client.post("/api/v1/generate", json={"imageUrl": uploaded_image, "styleId": "anime-art"})

    assert response.status_code == 400
    assert generator.calls == []
