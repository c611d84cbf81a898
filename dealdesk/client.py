"""
Async client for the dealdesk REST API.

Thin wrapper over httpx.AsyncClient. Every call unwraps the
{"success", "data", "meta"} envelope and raises ApiError on transport
failures or non-2xx responses.
"""

import base64
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import httpx

from dealdesk.config import settings
from dealdesk.exceptions import ApiError, AttachmentTooLargeError
from dealdesk.schemas.activity import ActivityPage, ActivityResponse
from dealdesk.schemas.attachment import AttachmentResponse
from dealdesk.schemas.deal import DealDetailResponse, ProductResponse
from dealdesk.schemas.payment import PaymentResponse
from dealdesk.schemas.schedule import ScheduleResponse, SplitResponse
from dealdesk.schemas.search import SearchResult
from dealdesk.services.splits import Split

logger = logging.getLogger(__name__)

FILENAME_REGEX = re.compile(r'filename="?([^";]+)"?')


@dataclass
class ExportFile:
    filename: str
    content: bytes
    media_type: str


@dataclass
class DownloadedAttachment:
    file_name: str
    file_type: str
    content: bytes


def _split_from_response(split: SplitResponse) -> Split:
    return Split(
        agent_name=split.agent_name,
        split_percent=split.split_percent,
        split_amount=split.split_amount,
        agent_id=split.agent_id,
    )


class DealDeskClient:
    """
    API client.

    Usage:
        async with DealDeskClient() as client:
            deal = await client.get_deal(42)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_attachment_bytes: Optional[int] = None,
    ):
        origin = (base_url or settings.api_base_url).rstrip("/")
        self.max_attachment_bytes = max_attachment_bytes or settings.max_attachment_bytes
        self._http = httpx.AsyncClient(
            base_url=f"{origin}/api",
            timeout=timeout or settings.api_timeout_seconds,
            transport=transport,
            headers={"Content-Type": "application/json"},
            event_hooks={"request": [self._log_request], "response": [self._log_response]},
        )

    async def __aenter__(self) -> "DealDeskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Plumbing ──────────────────────────────────────────

    @staticmethod
    async def _log_request(request: httpx.Request) -> None:
        logger.debug("API request: %s %s", request.method, request.url)

    @staticmethod
    async def _log_response(response: httpx.Response) -> None:
        request = response.request
        if response.is_success:
            logger.debug("API response: %s %s -> %s", request.method, request.url, response.status_code)
        else:
            logger.warning("API error: %s %s -> %s", request.method, request.url, response.status_code)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.exception("API %s %s failed", method, url)
            raise ApiError(f"{method} {url} failed: {exc}") from exc

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("detail")
            else:
                detail = response.text or None
            raise ApiError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )
        return response

    async def _envelope(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Decoded success body; anything but a JSON object is an ApiError."""
        response = await self._request(method, url, **kwargs)
        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(
                f"{method} {url} returned a non-JSON body",
                status_code=response.status_code,
                detail=response.text or None,
            ) from exc
        if not isinstance(body, dict):
            raise ApiError(
                f"{method} {url} returned {type(body).__name__}, expected an envelope object",
                status_code=response.status_code,
                detail=body,
            )
        return body

    async def _data(self, method: str, url: str, **kwargs) -> Any:
        return (await self._envelope(method, url, **kwargs)).get("data")

    # ── Deals ─────────────────────────────────────────────

    async def get_deal(self, deal_id: int) -> DealDetailResponse:
        return DealDetailResponse.model_validate(await self._data("GET", f"/deals/{deal_id}"))

    async def update_deal(self, deal_id: int, **fields) -> DealDetailResponse:
        """Partial update; pass snake_case or camelCase field names."""
        payload = {_camel(k): _jsonable(v) for k, v in fields.items()}
        return DealDetailResponse.model_validate(await self._data("PUT", f"/deals/{deal_id}", json=payload))

    async def create_deal(self, name: str, **fields) -> DealDetailResponse:
        """POST /deals; talent_client_ids attaches clients to the new deal."""
        payload = {_camel(k): _jsonable(v) for k, v in fields.items()}
        payload["name"] = name
        return DealDetailResponse.model_validate(await self._data("POST", "/deals", json=payload))

    async def delete_deal(self, deal_id: int) -> None:
        await self._request("DELETE", f"/deals/{deal_id}")

    async def get_payments(self, deal_id: int) -> List[PaymentResponse]:
        data = await self._data("GET", f"/deals/{deal_id}/payments")
        return [PaymentResponse.model_validate(item) for item in data or []]

    async def get_payment(self, payment_id: int) -> PaymentResponse:
        return PaymentResponse.model_validate(await self._data("GET", f"/payments/{payment_id}"))

    async def get_activities(
        self,
        deal_id: int,
        limit: int = 50,
        offset: int = 0,
        activity_type: Optional[str] = None,
    ) -> ActivityPage:
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        if activity_type:
            params["activityType"] = activity_type
        body = await self._envelope("GET", f"/deals/{deal_id}/activities", params=params)
        meta = body.get("meta")
        if not isinstance(meta, dict):
            meta = {}
        return ActivityPage(
            items=[ActivityResponse.model_validate(item) for item in body.get("data") or []],
            total=meta.get("total", 0),
            limit=meta.get("limit", limit),
            offset=meta.get("offset", offset),
            has_more=meta.get("hasMore", False),
        )

    async def export_deal(
        self,
        deal_id: int,
        format: str = "pdf",
        sections: Optional[Dict[str, bool]] = None,
        notes_filter: Optional[Dict[str, str]] = None,
        pdf_options: Optional[Dict[str, Any]] = None,
    ) -> ExportFile:
        payload: Dict[str, Any] = {"format": format}
        if sections is not None:
            payload["sections"] = {_camel(k): v for k, v in sections.items()}
        if notes_filter is not None:
            payload["notesFilter"] = notes_filter
        if pdf_options is not None:
            payload["pdfOptions"] = {_camel(k): v for k, v in pdf_options.items()}

        response = await self._request("POST", f"/deals/{deal_id}/export", json=payload)
        match = FILENAME_REGEX.search(response.headers.get("content-disposition", ""))
        return ExportFile(
            filename=match.group(1) if match else f"deal_{deal_id}_export.{format}",
            content=response.content,
            media_type=response.headers.get("content-type", "application/octet-stream"),
        )

    # ── Products ──────────────────────────────────────────

    async def create_product(self, deal_id: int, name: str, **fields) -> ProductResponse:
        payload = {_camel(k): _jsonable(v) for k, v in fields.items()}
        payload.update(dealId=deal_id, name=name)
        return ProductResponse.model_validate(await self._data("POST", "/products", json=payload))

    async def delete_product(self, product_id: int) -> None:
        await self._request("DELETE", f"/products/{product_id}")

    async def get_product_schedules(self, product_id: int) -> List[ScheduleResponse]:
        data = await self._data("GET", f"/products/{product_id}/schedules", params={"limit": 100})
        return [ScheduleResponse.model_validate(item) for item in data or []]

    # ── Schedules & splits ────────────────────────────────

    async def create_schedule(self, product_id: int, **fields) -> ScheduleResponse:
        """POST /schedules; default splits are seeded server-side."""
        payload = {_camel(k): _jsonable(v) for k, v in fields.items()}
        payload["productId"] = product_id
        return ScheduleResponse.model_validate(await self._data("POST", "/schedules", json=payload))

    async def delete_schedule(self, schedule_id: int) -> None:
        await self._request("DELETE", f"/schedules/{schedule_id}")

    async def get_schedules_by_product(self, product_id: int) -> List[ScheduleResponse]:
        data = await self._data("GET", f"/schedules/by-product/{product_id}")
        return [ScheduleResponse.model_validate(item) for item in data or []]

    async def get_schedule(self, schedule_id: int) -> ScheduleResponse:
        return ScheduleResponse.model_validate(await self._data("GET", f"/schedules/{schedule_id}"))

    async def get_schedules_by_deal(self, deal_id: int) -> List[ScheduleResponse]:
        data = await self._data("GET", f"/schedules/by-deal/{deal_id}")
        return [ScheduleResponse.model_validate(item) for item in data or []]

    async def get_splits(self, schedule_id: int) -> List[Split]:
        data = await self._data("GET", f"/schedules/{schedule_id}/splits")
        return [_split_from_response(SplitResponse.model_validate(item)) for item in data or []]

    async def replace_splits(self, schedule_id: int, splits: Sequence[Split]) -> List[Split]:
        """PUT /schedules/{id}/splits/batch - replaces every split of the schedule."""
        payload = {
            "splits": [
                {
                    "agentName": s.agent_name,
                    "agentId": s.agent_id,
                    "splitPercent": float(s.split_percent),
                    "splitAmount": float(s.split_amount),
                }
                for s in splits
            ]
        }
        data = await self._data("PUT", f"/schedules/{schedule_id}/splits/batch", json=payload)
        return [_split_from_response(SplitResponse.model_validate(item)) for item in data or []]

    # ── Attachments ───────────────────────────────────────

    async def upload_attachment(
        self,
        deal_id: int,
        file_name: str,
        content: bytes,
        file_type: str = "application/octet-stream",
        description: Optional[str] = None,
    ) -> AttachmentResponse:
        if len(content) > self.max_attachment_bytes:
            raise AttachmentTooLargeError(len(content), self.max_attachment_bytes)

        payload = {
            "fileName": file_name,
            "fileType": file_type,
            "fileSize": len(content),
            "base64Data": base64.b64encode(content).decode("ascii"),
            "dealId": deal_id,
            "description": description,
        }
        return AttachmentResponse.model_validate(await self._data("POST", "/attachments", json=payload))

    async def download_attachment(self, attachment_id: int) -> DownloadedAttachment:
        data = await self._data("GET", f"/attachments/{attachment_id}/download")
        return DownloadedAttachment(
            file_name=data["fileName"],
            file_type=data["fileType"],
            content=base64.b64decode(data["base64Data"]),
        )

    async def delete_attachment(self, attachment_id: int) -> None:
        await self._request("DELETE", f"/attachments/{attachment_id}")

    # ── Search ────────────────────────────────────────────

    async def search(
        self,
        query: str,
        cost_center: Optional[str] = None,
        cost_center_group: Optional[str] = None,
    ) -> List[SearchResult]:
        params = {"q": query}
        if cost_center:
            params["costCenter"] = cost_center
        if cost_center_group:
            params["costCenterGroup"] = cost_center_group
        data = await self._data("GET", "/search", params=params)
        return [SearchResult.model_validate(item) for item in data or []]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _jsonable(value):
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
