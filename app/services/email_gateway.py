from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from app.core.config import settings


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: int | None
    detail: dict[str, Any]

    error_code: str | None = None
    error_message: str | None = None
    retryable: bool = False


def _cap_text(s: str, *, max_chars: int) -> str:
    if len(s) <= max_chars:
        return s
    return s[:max_chars] + f"...(truncated, {len(s)} chars)"


class EmailGateway:
    """
    Thin client for the transactional email HTTP API.

    - One AsyncClient per gateway (connection pooling).
    - No retries here; the Celery task decides from `retryable`.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout_seconds: float | None = None,
        max_response_body_chars: int = 2_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url or settings.email_api_url
        self._api_key = api_key if api_key is not None else settings.email_api_key.get_secret_value()
        self._sender = sender or settings.email_from
        self._max_body = max_response_body_chars
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds or settings.email_timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        *,
        to: str,
        subject: str,
        html: str,
        tags: Mapping[str, str] | None = None,
        request_id: str | None = None,
    ) -> SendResult:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if request_id:
            headers["X-Request-Id"] = request_id

        body = {
            "from": self._sender,
            "to": to,
            "subject": subject,
            "html": html,
            "tags": dict(tags or {}),
        }

        try:
            resp = await self._client.post(self._url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            return SendResult(
                ok=False,
                status_code=None,
                detail={"error": "timeout"},
                error_code="TIMEOUT",
                error_message=str(e),
                retryable=True,
            )
        except httpx.RequestError as e:
            # DNS errors, connection refused, TLS, etc.
            return SendResult(
                ok=False,
                status_code=None,
                detail={"error": "request_error"},
                error_code="REQUEST_ERROR",
                error_message=str(e),
                retryable=True,
            )

        try:
            parsed = resp.json()
            detail = parsed if isinstance(parsed, dict) else {"data": parsed}
        except ValueError:
            detail = {"raw": _cap_text(resp.text, max_chars=self._max_body)}

        if 200 <= resp.status_code < 300:
            return SendResult(ok=True, status_code=resp.status_code, detail=detail)

        return SendResult(
            ok=False,
            status_code=resp.status_code,
            detail=detail,
            error_code=f"HTTP_{resp.status_code}",
            error_message=f"HTTP {resp.status_code}",
            retryable=resp.status_code in (408, 429, 500, 502, 503, 504),
        )
