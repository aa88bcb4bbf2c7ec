import httpx
import pytest

from stylesnap.client.api_client import ApiError, StyleSnapApiClient
from stylesnap.client.context import AppContext
from stylesnap.client.flows import (
    CREDITS_NOT_UPDATED_MESSAGE,
    GenerationFlow,
    PaymentFlow,
    UploadedImage,
    remove_upload,
)
from stylesnap.services import payment_service
from stylesnap.services.payment_service import compute_signature
from stylesnap.styles import ImageStyle, get_style

from conftest import fetch_trial, make_trial


@pytest.fixture()
def api(app_overrides):
    return StyleSnapApiClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app_overrides))


def _checkout(payment_id: str = "pay_FLOW1", secret: str = "test_secret"):
    async def checkout(order):
        return {
            "razorpay_order_id": order["id"],
            "razorpay_payment_id": payment_id,
            "razorpay_signature": compute_signature(order["id"], payment_id, secret),
        }
    return checkout


@pytest.mark.anyio
async def test_generate_missing_inputs_only_toast(api, generator, uploaded_image):
    context = AppContext(trial_id="flow-missing")
    flow = GenerationFlow(context, api)

    assert await flow.handle_generate(None, get_style("anime-art")) is None
    assert await flow.handle_generate(UploadedImage(uploaded_image), None) is None
    context.trial_id = None
    assert await flow.handle_generate(UploadedImage(uploaded_image), get_style("anime-art")) is None
    await api.aclose()

    assert [t.message for t in context.toasts] == [
        "Please upload an image before generating.",
        "Please select a style before generating.",
        "Unable to verify your trial. Please refresh and try again.",
    ]
    assert generator.calls == []


@pytest.mark.anyio
async def test_generate_invalid_prompt_opens_dialog(api, uploaded_image):
    context = AppContext(trial_id="flow-prompt")
    broken_style = ImageStyle(id="x", title="X", category="X", image_url="/x.png", style_prompt="   ")

    result = await GenerationFlow(context, api).handle_generate(UploadedImage(uploaded_image), broken_style)
    await api.aclose()

    assert result is None
    assert context.message_dialog.title == "Invalid style prompt"


@pytest.mark.anyio
async def test_generate_success_records_image(api, generator, uploaded_image, session_factory):
    context = AppContext(trial_id="flow-free")
    flow = GenerationFlow(context, api)

    image_url = await flow.handle_generate(UploadedImage(uploaded_image), get_style("disney-art"))
    await api.aclose()

    assert image_url.startswith("/generated/")
    assert flow.status == "success"
    assert context.toasts[-1].message == "Image generated successfully."
    assert context.paywall_open is False
    assert fetch_trial(session_factory, "flow-free").free_used is True


@pytest.mark.anyio
async def test_generate_opens_paywall_instead_of_calling_server(api, generator, uploaded_image, db):
    make_trial(db, "flow-used", free_used=True, paid_credits=0)
    context = AppContext(trial_id="flow-used")

    result = await GenerationFlow(context, api).handle_generate(UploadedImage(uploaded_image), get_style("anime-art"))
    await api.aclose()

    assert result is None
    assert context.paywall_open is True
    assert context.message_dialog.title == "Free trial used"
    assert context.message_dialog.primary_label == "Pay ₹9"
    assert generator.calls == []


@pytest.mark.anyio
async def test_payment_flow_grants_credit_and_closes_paywall(api, db, session_factory):
    make_trial(db, "flow-pay", free_used=True)
    context = AppContext(trial_id="flow-pay", paywall_open=True)

    paid = await PaymentFlow(context, api).pay(_checkout())
    await api.aclose()

    assert paid is True
    assert context.paywall_open is False
    assert context.toasts[-1].message == "Payment Success 🎉"
    assert fetch_trial(session_factory, "flow-pay").paid_credits == 1


@pytest.mark.anyio
async def test_payment_flow_dismissed_checkout(api, db, session_factory):
    make_trial(db, "flow-dismiss", free_used=True)
    context = AppContext(trial_id="flow-dismiss", paywall_open=True)

    async def dismissed(order):
        return None

    paid = await PaymentFlow(context, api).pay(dismissed)
    await api.aclose()

    assert paid is False
    assert context.paywall_open is False
    assert fetch_trial(session_factory, "flow-dismiss").paid_credits == 0


@pytest.mark.anyio
async def test_payment_flow_bad_signature(api, db, session_factory):
    make_trial(db, "flow-forged", free_used=True)
    context = AppContext(trial_id="flow-forged", paywall_open=True)

    paid = await PaymentFlow(context, api).pay(_checkout(secret="not-the-secret"))
    await api.aclose()

    assert paid is False
    assert context.message_dialog.description == "Payment Verification Failed ❌"
    assert context.paywall_open is True
    assert fetch_trial(session_factory, "flow-forged").paid_credits == 0


@pytest.mark.anyio
async def test_payment_flow_bookkeeping_failure_shows_contact_support(
    api, db, monkeypatch: pytest.MonkeyPatch
):
    make_trial(db, "flow-bookkeeping", free_used=True)
    context = AppContext(trial_id="flow-bookkeeping", paywall_open=True)

    def failing_credit(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(payment_service, "add_paid_credits", failing_credit)

    paid = await PaymentFlow(context, api).pay(_checkout())
    await api.aclose()

    assert paid is False
    assert context.message_dialog.description == CREDITS_NOT_UPDATED_MESSAGE


@pytest.mark.anyio
async def test_remove_upload_is_best_effort(api, public_dir):
    context = AppContext(trial_id="flow-remove")
    target = public_dir / "uploads" / "remove-me.png"
    target.write_bytes(b"\x89PNG\r\n\x1a\n")

    await remove_upload(context, api, UploadedImage("/uploads/remove-me.png"))
    assert not target.exists()

    # Already gone: the 404 is swallowed and the toast still shows
    await remove_upload(context, api, UploadedImage("/uploads/remove-me.png"))
    await api.aclose()

    assert [t.message for t in context.toasts] == ["File removed.", "File removed."]


@pytest.mark.anyio
async def test_api_error_exposes_envelope(api):
    with pytest.raises(ApiError) as exc_info:
        await api.generate("", "/uploads/x.png", style_id="anime-art")
    await api.aclose()

    assert exc_info.value.status_code == 400
    assert exc_info.value.kind == "validation"
