"""
HTTP client for the hiring backend.

Every non-2xx response is mapped onto the error taxonomy in ``core.errors``.
List reads return a ``FetchResult`` so the retry orchestrator can tell a
served page from a cold-start placeholder without sniffing payload shapes.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from core.config import settings
from core.errors import (
    BackendError,
    NotReadyError,
    TransientNetworkError,
    error_from_response,
)
from core.models import (
    Candidate,
    Job,
    Note,
    Page,
    ReorderResult,
    TimelineEntry,
)
from client.retry import FetchResult, NotReady, Ready

logger = logging.getLogger(__name__)


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset query parameters."""
    return {key: value for key, value in params.items() if value not in (None, "")}


class BackendClient:
    """
    Thin async wrapper over ``httpx.AsyncClient``.

    Args:
        base_url: Backend root, e.g. ``http://localhost:8000/api``
        timeout: Per-request timeout in seconds
        transport: Custom transport (``httpx.ASGITransport`` in tests)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ==================== Transport ===================== #

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and return the decoded JSON body."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransientNetworkError(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"{method} {path} failed: {exc}") from exc

        body = self._decode(response)
        if response.is_error:
            error = error_from_response(response.status_code, body)
            logger.warning(
                f"{method} {path} -> {response.status_code} "
                f"({type(error).__name__}: {error.message})"
            )
            raise error
        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def _get_page(self, path: str, model: type, params: dict[str, Any]) -> FetchResult:
        """GET a list endpoint; malformed envelopes come back as ``NotReady``."""
        try:
            body = await self._request("GET", path, params=_clean_params(params))
        except NotReadyError as exc:
            return NotReady(exc.message)

        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            return NotReady(f"malformed list response from {path}")
        try:
            return Ready(Page[model].model_validate(body))
        except ValidationError as exc:
            return NotReady(f"invalid list payload from {path}: {exc.error_count()} errors")

    @staticmethod
    def _parse(model: type, body: Any, path: str):
        try:
            return model.model_validate(body)
        except ValidationError as exc:
            raise NotReadyError(f"Unexpected payload from {path}") from exc

    async def check_ready(self) -> bool:
        """Probe ``GET /ready``; False while the backend is still seeding."""
        try:
            await self._request("GET", "/ready")
        except BackendError as exc:
            logger.debug(f"Readiness probe failed: {exc.message}")
            return False
        return True

    # ==================== Jobs ===================== #

    async def list_jobs(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        experience_level: Optional[str] = None,
        page: int = 1,
        page_size: int = 100,
        sort: str = "order",
    ) -> FetchResult:
        return await self._get_page(
            "/jobs",
            Job,
            {
                "search": search,
                "status": status,
                "experienceLevel": experience_level,
                "page": page,
                "pageSize": page_size,
                "sort": sort,
            },
        )

    async def get_job(self, job_id: str) -> Job:
        path = f"/jobs/{job_id}"
        return self._parse(Job, await self._request("GET", path), path)

    async def create_job(self, data: dict[str, Any]) -> Job:
        return self._parse(Job, await self._request("POST", "/jobs", json=data), "/jobs")

    async def update_job(self, job_id: str, changes: dict[str, Any]) -> Job:
        path = f"/jobs/{job_id}"
        return self._parse(Job, await self._request("PATCH", path, json=changes), path)

    async def reorder_job(self, job_id: str, from_order: int, to_order: int) -> ReorderResult:
        path = f"/jobs/{job_id}/reorder"
        body = await self._request(
            "PATCH", path, json={"fromOrder": from_order, "toOrder": to_order}
        )
        return self._parse(ReorderResult, body, path)

    # ==================== Candidates ===================== #

    async def list_candidates(
        self,
        search: Optional[str] = None,
        stage: Optional[str] = None,
        job_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 1000,
    ) -> FetchResult:
        return await self._get_page(
            "/candidates",
            Candidate,
            {
                "search": search,
                "stage": stage,
                "jobId": job_id,
                "page": page,
                "pageSize": page_size,
            },
        )

    async def get_candidate(self, candidate_id: str) -> Candidate:
        path = f"/candidates/{candidate_id}"
        return self._parse(Candidate, await self._request("GET", path), path)

    async def create_candidate(self, data: dict[str, Any]) -> Candidate:
        body = await self._request("POST", "/candidates", json=data)
        return self._parse(Candidate, body, "/candidates")

    async def update_candidate(self, candidate_id: str, changes: dict[str, Any]) -> Candidate:
        path = f"/candidates/{candidate_id}"
        return self._parse(Candidate, await self._request("PATCH", path, json=changes), path)

    async def delete_candidate(self, candidate_id: str) -> None:
        await self._request("DELETE", f"/candidates/{candidate_id}")

    async def get_timeline(self, candidate_id: str) -> list[TimelineEntry]:
        path = f"/candidates/{candidate_id}/timeline"
        body = await self._request("GET", path)
        if not isinstance(body, list):
            raise NotReadyError(f"Unexpected payload from {path}")
        return [self._parse(TimelineEntry, entry, path) for entry in body]

    async def list_notes(self, candidate_id: str) -> list[Note]:
        path = f"/candidates/{candidate_id}/notes"
        body = await self._request("GET", path)
        if not isinstance(body, list):
            raise NotReadyError(f"Unexpected payload from {path}")
        return [self._parse(Note, note, path) for note in body]

    async def add_note(self, candidate_id: str, content: str, author: Optional[str] = None) -> Note:
        path = f"/candidates/{candidate_id}/notes"
        payload = {"content": content}
        if author:
            payload["author"] = author
        return self._parse(Note, await self._request("POST", path, json=payload), path)
