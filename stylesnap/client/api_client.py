"""Async HTTP client for the StyleSnap API"""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the API, carrying the error envelope"""

    def __init__(self, status_code: int, body: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.body = body or {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return self.body.get("message") or f"HTTP {self.status_code}"

    @property
    def kind(self) -> Optional[str]:
        return self.body.get("kind")

    @property
    def status(self) -> Optional[str]:
        return self.body.get("status")


class StyleSnapApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Every call returns the `data` member of the success envelope and raises
    ApiError otherwise. Transport failures surface as httpx.HTTPError.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_prefix = api_prefix
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "StyleSnapApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = await self._client.request(method, f"{self.api_prefix}{path}", **kwargs)
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400 or not body.get("success", False):
            raise ApiError(resp.status_code, body if isinstance(body, dict) else {})
        return body.get("data")

    # Trial identity
    async def register_trial(self, trial_id: str) -> Dict[str, Any]:
        return await self._request("POST", "/trial", json={"trialId": trial_id})

    async def delete_trial(self, trial_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", "/trial", json={"trialId": trial_id})

    async def trial_status(self, trial_id: str) -> Dict[str, Any]:
        return await self._request("GET", "/trial/status", params={"trialId": trial_id})

    # Uploads
    async def upload_image(self, content: bytes, filename: str, content_type: str = "image/jpeg") -> Dict[str, Any]:
        return await self._request("POST", "/upload", files={"file": (filename, content, content_type)})

    async def delete_upload(self, file_name: str) -> Dict[str, Any]:
        return await self._request("DELETE", "/upload", params={"fileName": file_name})

    # Generation
    async def generate(
        self,
        trial_id: str,
        image_url: str,
        style_id: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {"trialId": trial_id, "imageUrl": image_url}
        if style_id:
            payload["styleId"] = style_id
        if prompt:
            payload["prompt"] = prompt
        return await self._request("POST", "/generate", json=payload)

    # Payments
    async def create_order(self, trial_id: str, amount: int = 900, currency: str = "INR") -> Dict[str, Any]:
        return await self._request(
            "POST", "/payment/order", json={"amount": amount, "currency": currency, "trialId": trial_id}
        )

    async def verify_payment(self, confirmation: Dict[str, Any], trial_id: Optional[str] = None) -> Dict[str, Any]:
        payload = dict(confirmation)
        if trial_id:
            payload.setdefault("trialId", trial_id)
        return await self._request("POST", "/payment/verify", json=payload)
