"""Generation, payment and upload-removal flows driven from the client"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from stylesnap.client.api_client import ApiError, StyleSnapApiClient
from stylesnap.client.context import AppContext
from stylesnap.styles import ImageStyle

logger = logging.getLogger(__name__)

FREE_TRIAL_USED_TITLE = "Free trial used"
FREE_TRIAL_USED_MESSAGE = (
    "You have already used your free image. To generate more images, please proceed to payment."
)
CREDITS_NOT_UPDATED_MESSAGE = "Payment succeeded, but failed to update credits. Please contact support."

# Receives the order handle, returns the checkout confirmation or None when dismissed
Checkout = Callable[[Dict[str, Any]], Awaitable[Optional[Dict[str, Any]]]]


@dataclass
class UploadedImage:
    image_url: str
    file_name: Optional[str] = None


class GenerationFlow:
    def __init__(self, context: AppContext, api: StyleSnapApiClient):
        self.context = context
        self.api = api
        self.loading = False
        self.status = "idle"
        self.generated_image_url: Optional[str] = None

    def _block_for_payment(self, message: str = FREE_TRIAL_USED_MESSAGE) -> None:
        self.context.open_dialog(FREE_TRIAL_USED_TITLE, message, primary_label="Pay ₹9", secondary_label="Cancel")
        self.context.open_paywall()

    async def _free_and_no_credits(self, trial_id: str) -> bool:
        try:
            status = await self.api.trial_status(trial_id)
        except (ApiError, httpx.HTTPError) as e:
            # The server gates again on generate
            logger.warning(f"Entitlement check failed for {trial_id}: {str(e)}")
            return False
        return bool(status.get("hasUsedFreeTrial")) and not status.get("paidCredits")

    async def handle_generate(self, file: Optional[UploadedImage], style: Optional[ImageStyle]) -> Optional[str]:
        """
        Generate a stylized image for the uploaded file.
        Returns the generated image URL, or None when blocked or failed.
        """
        self.generated_image_url = None
        trial_id = self.context.trial_id

        if not file or not file.image_url:
            self.context.add_toast("error", "Please upload an image before generating.")
            return None
        if not style:
            self.context.add_toast("error", "Please select a style before generating.")
            return None
        if not trial_id:
            self.context.add_toast("error", "Unable to verify your trial. Please refresh and try again.")
            return None
        if not isinstance(style.style_prompt, str) or not style.style_prompt.strip():
            self.context.open_dialog(
                "Invalid style prompt",
                "The selected style does not have a valid prompt. Please choose another style.",
            )
            return None

        if await self._free_and_no_credits(trial_id):
            self._block_for_payment()
            return None

        self.loading = True
        try:
            result = await self.api.generate(trial_id, file.image_url, style_id=style.id, prompt=style.style_prompt)
        except ApiError as e:
            self.status = "failed"
            if e.status_code == 402:
                self._block_for_payment(e.message)
            else:
                self.context.add_toast("error", "Failed to generate image.")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Generation request failed: {str(e)}")
            self.status = "failed"
            self.context.add_toast("error", "Failed to generate image.")
            return None
        finally:
            self.loading = False

        image_url = result.get("imageUrl")
        if not image_url:
            self.status = "failed"
            self.context.add_toast("error", "Failed to generate image.")
            return None

        self.status = "success"
        self.generated_image_url = image_url if image_url.startswith("/") else f"/{image_url}"
        self.context.add_toast("success", "Image generated successfully.")
        return self.generated_image_url


class PaymentFlow:
    def __init__(self, context: AppContext, api: StyleSnapApiClient, amount: int = 900, currency: str = "INR"):
        self.context = context
        self.api = api
        self.amount = amount
        self.currency = currency

    async def pay(self, checkout: Checkout) -> bool:
        """
        Create an order, run the checkout and verify the confirmation.
        Returns True once the credits are recorded.
        """
        trial_id = self.context.trial_id
        if not trial_id:
            self.context.add_toast("error", "Unable to verify your trial. Please refresh and try again.")
            return False

        try:
            order = await self.api.create_order(trial_id, amount=self.amount, currency=self.currency)
        except (ApiError, httpx.HTTPError) as e:
            logger.error(f"Failed to create order for {trial_id}: {str(e)}")
            self.context.open_dialog("Payment", "Failed to initiate payment. Please try again.")
            return False

        confirmation = await checkout(order)
        if not confirmation:
            logger.info("Checkout dismissed by user")
            self.context.close_paywall()
            return False

        try:
            await self.api.verify_payment(confirmation, trial_id=trial_id)
        except ApiError as e:
            if e.kind == "bookkeeping":
                self.context.open_dialog("Payment", CREDITS_NOT_UPDATED_MESSAGE)
            elif e.kind == "verification":
                self.context.open_dialog("Payment", "Payment Verification Failed ❌")
            else:
                self.context.open_dialog("Payment", "Error verifying payment. Please contact support.")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Payment verification request failed: {str(e)}")
            self.context.open_dialog("Payment", "Error verifying payment. Please contact support.")
            return False

        self.context.add_toast("success", "Payment Success 🎉")
        self.context.close_paywall()
        return True


async def remove_upload(context: AppContext, api: StyleSnapApiClient, file: Optional[UploadedImage]) -> None:
    """Best-effort delete of an upload; the local state is cleared regardless"""
    try:
        if file and file.image_url:
            file_name = file.file_name or file.image_url.rsplit("/", 1)[-1]
            if file_name:
                await api.delete_upload(file_name)
    except (ApiError, httpx.HTTPError) as e:
        logger.info(f"Upload removal failed: {str(e)}")
    finally:
        context.add_toast("info", "File removed.")
