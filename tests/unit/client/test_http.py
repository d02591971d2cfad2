"""Tests for the backend HTTP client's error mapping and list parsing."""

import httpx
import pytest

from client.http import BackendClient
from client.retry import NotReady, Ready
from core.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    NotReadyError,
    TransientNetworkError,
)
from core.models import Page


def _client(handler) -> BackendClient:
    return BackendClient(
        base_url="http://testserver/api",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def _error(status: int, code: str, message: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status,
            json={"error": {"code": code, "message": message, "path": request.url.path, "method": request.method}},
        )
    return handler


JOBS_PAGE = {
    "data": [{"id": "job-1", "title": "Backend Engineer", "order": 1, "experienceLevel": "Senior"}],
    "pagination": {"page": 1, "pageSize": 100, "total": 1, "totalPages": 1, "currentPage": 1},
}


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,code,expected", [
        (400, "HTTP_ERROR", InvalidRequestError),
        (404, "HTTP_ERROR", NotFoundError),
        (409, "HTTP_ERROR", ConflictError),
        (500, "SIMULATED_FAILURE", TransientNetworkError),
        (503, "NOT_READY", NotReadyError),
    ])
    async def test_status_to_error(self, status, code, expected):
        async with _client(_error(status, code, "nope")) as client:
            with pytest.raises(expected) as exc_info:
                await client.get_job("job-1")

        assert exc_info.value.status_code == status
        assert exc_info.value.message == "nope"

    @pytest.mark.asyncio
    async def test_transport_failure_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransientNetworkError):
                await client.get_candidate("c1")

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransientNetworkError, match="timed out"):
                await client.list_notes("c1")


class TestListReads:
    @pytest.mark.asyncio
    async def test_served_page_is_ready(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=JOBS_PAGE)

        async with _client(handler) as client:
            result = await client.list_jobs(search="engineer", experience_level="Senior")

        assert isinstance(result, Ready)
        assert isinstance(result.value, Page)
        assert result.value.data[0].experience_level == "Senior"
        assert seen["params"] == {
            "search": "engineer",
            "experienceLevel": "Senior",
            "page": "1",
            "pageSize": "100",
            "sort": "order",
        }

    @pytest.mark.asyncio
    async def test_empty_served_page_is_still_ready(self):
        body = {"data": [], "pagination": {"page": 1, "pageSize": 100, "total": 0}}
        async with _client(lambda request: httpx.Response(200, json=body)) as client:
            result = await client.list_candidates()

        assert isinstance(result, Ready)
        assert result.value.data == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], {"error": "warming up"}, {"data": None}])
    async def test_malformed_envelope_is_not_ready(self, body):
        async with _client(lambda request: httpx.Response(200, json=body)) as client:
            result = await client.list_jobs()

        assert isinstance(result, NotReady)

    @pytest.mark.asyncio
    async def test_not_ready_response_is_not_ready(self):
        async with _client(_error(503, "NOT_READY", "Storage is still initializing")) as client:
            result = await client.list_candidates()

        assert isinstance(result, NotReady)
        assert result.reason == "Storage is still initializing"

    @pytest.mark.asyncio
    async def test_server_error_on_list_raises(self):
        async with _client(_error(500, "INTERNAL_SERVER_ERROR", "boom")) as client:
            with pytest.raises(TransientNetworkError):
                await client.list_jobs()


class TestWrites:
    @pytest.mark.asyncio
    async def test_reorder_sends_camel_case_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = request.read().decode()
            return httpx.Response(
                200,
                json={"success": True, "message": "Jobs reordered successfully", "fromOrder": 2, "toOrder": 5},
            )

        async with _client(handler) as client:
            result = await client.reorder_job("job-2", 2, 5)

        assert seen["method"] == "PATCH"
        assert seen["path"] == "/api/jobs/job-2/reorder"
        assert '"fromOrder": 2' in seen["body"] or '"fromOrder":2' in seen["body"]
        assert result.to_order == 5

    @pytest.mark.asyncio
    async def test_delete_with_empty_body(self):
        async with _client(lambda request: httpx.Response(204)) as client:
            assert await client.delete_candidate("c1") is None

    @pytest.mark.asyncio
    async def test_check_ready(self):
        async with _client(lambda request: httpx.Response(200, json={"status": "ready"})) as client:
            assert await client.check_ready() is True

        async with _client(_error(503, "NOT_READY", "seeding")) as client:
            assert await client.check_ready() is False

    @pytest.mark.asyncio
    async def test_unexpected_payload_is_not_ready_error(self):
        async with _client(lambda request: httpx.Response(200, json={"unexpected": True})) as client:
            with pytest.raises(NotReadyError):
                await client.get_job("job-1")
