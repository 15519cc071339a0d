"""HTTP client for the Laybuy API."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from laybuy_gateway.config import USER_AGENT, LaybuySettings
from laybuy_gateway.models.requests import ProviderRequest
from laybuy_gateway.models.responses import ProviderResponse
from laybuy_gateway.services.errors import UnrecognizedResponseError
from laybuy_gateway.shared.correlation import CORRELATION_HEADER, current_correlation_id

logger = logging.getLogger("laybuy.client")


class LaybuyClient:
    """Sends typed requests to the Laybuy API.

    Base URL, Basic credentials and timeout are fixed when the client is
    built. Transport errors (``httpx.TransportError``) reach the caller as
    raised; a body that does not parse into the expected response model is
    reported as ``UnrecognizedResponseError``. Nothing is retried.
    """

    def __init__(self, settings: LaybuySettings,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.service_url,
            auth=httpx.BasicAuth(settings.merchant_id or "", settings.authentication_key or ""),
            timeout=settings.timeout_seconds,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        response_model = request.response_model
        content = request.to_json() if request.has_body else None
        headers = {CORRELATION_HEADER: current_correlation_id()}
        if content is not None:
            headers["Content-Type"] = "application/json"

        logger.debug(f"{request.method} {request.path}")
        resp = await self._client.request(
            request.method,
            request.path,
            content=content,
            headers=headers,
        )

        body = resp.text
        try:
            return response_model.model_validate_json(body)
        except ValidationError:
            logger.warning(
                f"Unrecognized response from {request.path} (HTTP {resp.status_code})"
            )
            raise UnrecognizedResponseError(body)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LaybuyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
