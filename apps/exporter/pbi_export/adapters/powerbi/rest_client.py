"""Authenticated request shaping for the Power BI REST API."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from pbi_export.core.logging_safety import body_preview
from pbi_export.errors import RequestFailedError, TransportError
from pbi_export.schemas.auth import Credential
from pbi_export.schemas.error import ErrorEnvelope

logger = logging.getLogger(__name__)


def decode_error_response(response: httpx.Response) -> RequestFailedError:
    """Build the error for a non-2xx response.

    A body matching ``{"error": {...}}`` with a message contributes its code,
    message and details verbatim; anything else becomes the message as raw text.
    """
    text = response.text
    try:
        envelope = ErrorEnvelope.model_validate(json.loads(text))
    except (ValueError, ValidationError):
        envelope = None

    if envelope is not None and envelope.error.message:
        return RequestFailedError(
            envelope.error.message,
            status_code=response.status_code,
            code=envelope.error.code or None,
            details=envelope.error.details,
        )
    return RequestFailedError(text, status_code=response.status_code)


class PowerBIRestClient:
    """Sends report-scoped requests with a per-request bearer header.

    The wrapped ``httpx.AsyncClient`` is never mutated, so one client can be
    shared by concurrent export runs.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, base_url: str, group_id: str, report_id: str) -> None:
        self._http = http_client
        self._report_url = f"{base_url.rstrip('/')}/groups/{group_id}/reports/{report_id}"

    def url_for(self, path: str) -> str:
        return f"{self._report_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        *,
        credential: Credential,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request; non-2xx responses raise ``RequestFailedError``."""
        url = self.url_for(path)
        headers = {"Authorization": credential.authorization_header}
        logger.debug("powerbi.request method=%s url=%s", method, url)

        try:
            response = await self._http.request(method, url, headers=headers, json=json_body)
        except httpx.TransportError as exc:
            logger.warning("powerbi.transport_failed method=%s url=%s reason=%s", method, url, type(exc).__name__)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.is_success:
            return response

        error = decode_error_response(response)
        logger.error(
            "powerbi.request_failed method=%s url=%s status_code=%s code=%s body=%s",
            method,
            url,
            response.status_code,
            error.code,
            body_preview(response.text),
        )
        raise error


__all__ = ["PowerBIRestClient", "decode_error_response"]
