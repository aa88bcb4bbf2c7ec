"""Image generation gate: entitlement reservation around the image-to-image model"""
import asyncio
import base64
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from stylesnap.core.config import settings
from stylesnap.schemas.generation_schemas import GenerateRequest, GenerateResult
from stylesnap.services.entitlement_service import reserve_generation, release_generation, get_entitlement
from stylesnap.services.trial_service import normalize_trial_id
from stylesnap.styles import get_style
from stylesnap.utils.file_storage import resolve_public_path, save_generated_image, guess_mime_type
from stylesnap.utils.logger import log_generation
from stylesnap.errors.exceptions import (
    ValidationException,
    ImageGenerationException,
    ServerMisconfiguredException,
    UpstreamServiceException,
)

logger = logging.getLogger(__name__)

TERMINAL_STATES = {"succeeded", "failed", "canceled"}


class ImageGenerator:
    """Interface the generation gate needs from an image backend"""

    @property
    def is_configured(self) -> bool:
        return True

    async def generate(self, image_path: Path, prompt: str, style_image_path: Optional[Path] = None) -> bytes:
        raise NotImplementedError


def _to_data_uri(path: Path) -> str:
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{guess_mime_type(path)};base64,{encoded}"


class ReplicateImageGenerator(ImageGenerator):
    """
    Replicate predictions API client.

    Uses the single-image Kontext model, or the multi-image variant when a
    style reference image is supplied. Waits synchronously when Replicate
    honours `Prefer: wait`, otherwise polls the prediction until it settles.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token if api_token is not None else settings.REPLICATE_API_TOKEN
        self.api_url = (api_url or settings.REPLICATE_API_URL).rstrip("/")
        self.timeout = timeout or settings.GENERATION_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    def _build_input(self, image_path: Path, prompt: str, style_image_path: Optional[Path]) -> Dict[str, Any]:
        if style_image_path:
            return {
                "prompt": prompt,
                "input_image_1": _to_data_uri(image_path),
                "input_image_2": _to_data_uri(style_image_path),
                "output_format": "jpg",
            }
        return {
            "prompt": prompt,
            "input_image": _to_data_uri(image_path),
            "output_format": "jpg",
        }

    async def generate(self, image_path: Path, prompt: str, style_image_path: Optional[Path] = None) -> bytes:
        model = settings.REPLICATE_MULTI_IMAGE_MODEL if style_image_path else settings.REPLICATE_IMAGE_MODEL
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Prefer": "wait",
        }
        payload = {"input": self._build_input(image_path, prompt, style_image_path)}
        deadline = time.monotonic() + self.timeout

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(f"{self.api_url}/models/{model}/predictions", json=payload, headers=headers)
            if resp.status_code >= 400:
                raise ImageGenerationException(detail=f"Replicate error {resp.status_code}: {resp.text[:200]}")
            prediction = resp.json()

            while prediction.get("status") not in TERMINAL_STATES:
                poll_url = (prediction.get("urls") or {}).get("get")
                if not poll_url:
                    raise ImageGenerationException(detail="Replicate prediction has no status URL")
                if time.monotonic() > deadline:
                    raise ImageGenerationException(detail="Image generation timed out")
                await asyncio.sleep(settings.REPLICATE_POLL_INTERVAL_SECONDS)
                poll = await client.get(poll_url, headers=headers)
                poll.raise_for_status()
                prediction = poll.json()

            if prediction.get("status") != "succeeded":
                raise ImageGenerationException(
                    detail=str(prediction.get("error") or "Unknown error from Replicate")
                )

            output = prediction.get("output")
            if isinstance(output, list):
                output = output[0] if output else None
            if not isinstance(output, str) or not output:
                raise ImageGenerationException(detail="No image URL returned from Replicate")

            image_resp = await client.get(output)
            if image_resp.status_code != 200:
                raise ImageGenerationException(
                    detail="Failed to fetch generated image from Replicate output URL"
                )
            return image_resp.content


def get_image_generator() -> ImageGenerator:
    """FastAPI dependency; overridden in tests"""
    return ReplicateImageGenerator()


def resolve_prompt(request: GenerateRequest) -> str:
    """Explicit prompt wins; otherwise the catalog style's prompt"""
    if request.prompt and request.prompt.strip():
        return request.prompt.strip()
    if request.style_id:
        style = get_style(request.style_id)
        if style is None:
            raise ValidationException(detail=f"Unknown style: {request.style_id}")
        return style.style_prompt
    raise ValidationException(detail="Missing prompt or styleId")


async def generate_styled_image(
    db: Session,
    generator: ImageGenerator,
    request: GenerateRequest,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> GenerateResult:
    """
    Run one generation for a trial identity.

    The entitlement is reserved before the backend is called and refunded if
    the backend fails, so a blocked identity never reaches the generator and
    a failed call never costs a credit.
    """
    trial_id = normalize_trial_id(request.trial_id)
    prompt = resolve_prompt(request)
    image_path = resolve_public_path(request.image_url)
    style_image_path = resolve_public_path(request.style_image_url) if request.style_image_url else None

    if not generator.is_configured:
        raise ServerMisconfiguredException(detail="Image generation is not configured")

    entitlement = reserve_generation(db, trial_id, ip_address=ip_address, user_agent=user_agent)

    start = time.time()
    try:
        content = await generator.generate(image_path, prompt, style_image_path)
        image_url = save_generated_image(content, prompt)
    except Exception as e:
        duration = time.time() - start
        refunded = release_generation(db, trial_id, entitlement)
        log_generation(trial_id, entitlement, duration, error=str(e))
        if not refunded:
            logger.error(f"Generation failed and {entitlement} entitlement was not refunded for trial {trial_id}")
        if isinstance(e, UpstreamServiceException):
            raise
        raise ImageGenerationException(detail=f"Failed to generate image: {str(e)}") from e

    log_generation(trial_id, entitlement, time.time() - start)

    current = get_entitlement(db, trial_id)
    return GenerateResult(
        image_url=image_url,
        entitlement_used=entitlement,
        free_used=current.free_used,
        paid_credits=current.paid_credits,
    )
