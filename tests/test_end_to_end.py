from fastapi.testclient import TestClient

from stylesnap.services.payment_service import compute_signature

from conftest import PNG_BYTES, fetch_trial


def test_visit_generate_pay_generate(client: TestClient, generator, session_factory):
    # First visit seeds the identity
    page = client.get("/")
    trial_id = page.cookies.get("trialId")
    assert trial_id
    trial = fetch_trial(session_factory, trial_id)
    assert (trial.free_used, trial.paid_credits) == (False, 0)

    # Client reconciliation registers the same identity
    assert client.post("/api/v1/trial", json={"trialId": trial_id}).json()["status"] == "already_exists"

    upload = client.post("/api/v1/upload", files={"file": ("me.png", PNG_BYTES, "image/png")})
    image_url = upload.json()["data"]["imageUrl"]

    free = client.post("/api/v1/generate", json={"trialId": trial_id, "imageUrl": image_url, "styleId": "anime-art"})
    assert free.status_code == 200
    assert free.json()["data"]["entitlementUsed"] == "free"

    blocked = client.post("/api/v1/generate", json={"trialId": trial_id, "imageUrl": image_url, "styleId": "anime-art"})
    assert blocked.status_code == 402
    assert blocked.json()["status"] == "need_payment"
    assert len(generator.calls) == 1

    order = client.post("/api/v1/payment/order", json={"amount": 900, "currency": "INR", "trialId": trial_id})
    order_id = order.json()["data"]["id"]
    verify = client.post(
        "/api/v1/payment/verify",
        json={
            "razorpay_order_id": order_id,
            "razorpay_payment_id": "pay_E2E",
            "razorpay_signature": compute_signature(order_id, "pay_E2E", "test_secret"),
        },
    )
    assert verify.status_code == 200
    assert fetch_trial(session_factory, trial_id).paid_credits == 1

    status = client.get("/api/v1/trial/status", params={"trialId": trial_id}).json()["data"]
    assert status["isPaidUser"] is True
    assert status["canGenerate"] is True

    paid = client.post("/api/v1/generate", json={"trialId": trial_id, "imageUrl": image_url, "styleId": "anime-art"})
    assert paid.status_code == 200
    assert paid.json()["data"]["entitlementUsed"] == "paid"
    assert fetch_trial(session_factory, trial_id).paid_credits == 0
    assert len(generator.calls) == 2
