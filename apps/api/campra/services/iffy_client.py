"""Client for the Iffy content moderation ingest API.

Iffy reviews content asynchronously: the ingest call only registers the
record, and verdicts arrive later through Iffy's own channels. Every
successful submission therefore yields a "pending" result.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

import httpx

from campra.core.structured_logging import safe_url
from campra.db.enums import IffyConfidenceThreshold
from campra.db.models import Meta
from campra.services.http_service import build_async_client, request_with_retries

logger = logging.getLogger(__name__)

DEFAULT_IFFY_API_URL = "https://api.iffy.com/api/v1/ingest"
PLATFORM = "campra"

CONFIDENCE_THRESHOLDS = {
    IffyConfidenceThreshold.LOW.value: 0.5,
    IffyConfidenceThreshold.MEDIUM.value: 0.7,
}
STRICT_CONFIDENCE_THRESHOLD = 0.9


class IffyError(RuntimeError):
    """Raised when the ingest API rejects or fails a submission."""


def confidence_threshold_for(value: str | None) -> float:
    """Map the meta setting to a numeric threshold; unknown values are strictest."""
    return CONFIDENCE_THRESHOLDS.get(value or "", STRICT_CONFIDENCE_THRESHOLD)


@dataclass
class ModerationRequest:
    content: str
    content_type: Literal["text", "image"]
    user_id: str
    content_id: str
    school_id: str | None = None


@dataclass
class ModerationResult:
    flagged: bool
    confidence: float
    category: str
    reason: str
    iffy_record_id: str | None = None
    iffy_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class IffyClient:
    api_key: str
    api_url: str = DEFAULT_IFFY_API_URL
    confidence_threshold: float = 0.7
    public_url: str = ""
    timeout: float = 10.0
    max_attempts: int = 3
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    @classmethod
    def from_meta(
        cls,
        meta: Meta,
        *,
        public_url: str,
        default_api_url: str = DEFAULT_IFFY_API_URL,
        timeout: float = 10.0,
        max_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "IffyClient":
        if not meta.iffy_api_key:
            raise IffyError("Iffy API key not configured in instance settings")
        return cls(
            api_key=meta.iffy_api_key,
            api_url=meta.iffy_api_url or default_api_url,
            confidence_threshold=confidence_threshold_for(meta.iffy_confidence_threshold),
            public_url=public_url.rstrip("/"),
            timeout=timeout,
            max_attempts=max_attempts,
            transport=transport,
        )

    def set_confidence_threshold(self, threshold: float) -> None:
        if threshold < 0 or threshold > 1:
            raise ValueError("Confidence threshold must be between 0 and 1")
        self.confidence_threshold = threshold
        logger.info("Updated confidence threshold to %s", threshold)

    def _build_body(
        self,
        request: ModerationRequest,
        *,
        client_path: str,
        entity: str,
        content: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "clientId": request.content_id,
            "clientUrl": f"{self.public_url}/{client_path}/{request.content_id}",
            "name": f"{request.content_type.capitalize()} content from {request.user_id}",
            "entity": entity,
            "content": content,
            "user": {
                "clientId": request.user_id,
                "name": request.user_id,
                "username": request.user_id,
            },
            "metadata": {
                "contentType": request.content_type,
                "platform": PLATFORM,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "schoolId": request.school_id,
            },
        }

    async def _submit(self, body: dict[str, Any]) -> dict[str, Any]:
        logger.info("Submitting content to Iffy API: %s", safe_url(self.api_url))
        async with build_async_client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await request_with_retries(
                    lambda: client.post(
                        self.api_url,
                        json=body,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    ),
                    max_attempts=self.max_attempts,
                )
            except httpx.RequestError as exc:
                raise IffyError(f"Iffy API request failed: {type(exc).__name__}") from exc

        if response.is_error:
            raise IffyError(f"Iffy API error: {response.status_code}")
        try:
            data = response.json()
        except ValueError:
            data = {}
        return data if isinstance(data, dict) else {}

    async def _submit_for_review(
        self, request: ModerationRequest, body: dict[str, Any], reason: str
    ) -> ModerationResult:
        try:
            response = await self._submit(body)
        except IffyError as exc:
            logger.error("Failed to moderate %s content %s: %s", request.content_type, request.content_id, exc)
            return ModerationResult(
                flagged=False,
                confidence=0,
                category="error",
                reason="Moderation service unavailable",
            )

        logger.info("%s content submitted to Iffy: %s", request.content_type.capitalize(), request.content_id)
        return ModerationResult(
            flagged=False,
            confidence=0,
            category="pending",
            reason=reason,
            iffy_record_id=response.get("id") or request.content_id,
            iffy_url=response.get("url"),
        )

    async def submit_text(self, request: ModerationRequest) -> ModerationResult:
        if request.content_type != "text":
            raise ValueError("submit_text only supports text content")
        body = self._build_body(
            request,
            client_path="notes",
            entity="post",
            content={"text": request.content},
        )
        return await self._submit_for_review(request, body, "Content submitted to Iffy for moderation")

    async def submit_image(self, request: ModerationRequest, image_url: str) -> ModerationResult:
        if request.content_type != "image":
            raise ValueError("submit_image only supports image content")
        body = self._build_body(
            request,
            client_path="files",
            entity="image",
            content={"imageUrls": [image_url]},
        )
        return await self._submit_for_review(request, body, "Image submitted to Iffy for moderation")
