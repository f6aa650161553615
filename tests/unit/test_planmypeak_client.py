"""
Unit tests for the PlanMyPeak HTTP client.

httpx.AsyncClient is patched; responses are real httpx.Response objects.

Tests for:
- Error mapping (unavailable, auth, API errors, malformed bodies, not found)
- Retry of connect errors
- Container lookup and creation
- Workout lookup and upload
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from application.exceptions import (
    RemotePlatformAPIError,
    RemotePlatformAuthError,
    RemotePlatformUnavailable,
)
from infrastructure.planmypeak_client import PlanMyPeakClient

pytestmark = pytest.mark.unit

BASE_URL = "https://pmp.test/api"


# =============================================================================
# Helpers
# =============================================================================


def _response(status_code: int, json=None, text=None) -> httpx.Response:
    request = httpx.Request("GET", BASE_URL)
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


def _patched_client(*outcomes):
    """
    Patch httpx.AsyncClient so each request returns (or raises) the next
    outcome. Returns (patcher, request_mock).
    """
    client = MagicMock()
    client.request = AsyncMock(side_effect=list(outcomes))
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=client)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return patch("infrastructure.planmypeak_client.httpx.AsyncClient", factory), client.request


@pytest.fixture
def client() -> PlanMyPeakClient:
    return PlanMyPeakClient(BASE_URL, "token-123", retry_attempts=2, retry_wait_seconds=0)


# =============================================================================
# Transport and error mapping
# =============================================================================


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_bearer_token_is_sent(self, client):
        patcher, request = _patched_client(_response(200, json={"libraries": []}))
        with patcher:
            await client.find_container_by_name("Anything")

        method, url = request.call_args.args
        assert method == "GET"
        assert url == f"{BASE_URL}/v1/workouts/libraries"
        assert request.call_args.kwargs["headers"]["Authorization"] == "Bearer token-123"

    @pytest.mark.asyncio
    async def test_connect_error_is_retried(self, client):
        patcher, request = _patched_client(
            httpx.ConnectError("refused"),
            _response(200, json={"libraries": [{"id": 1, "name": "Found"}]}),
        )
        with patcher:
            found = await client.find_container_by_name("found")

        assert found.id == "1"
        assert request.call_count == 2

    @pytest.mark.asyncio
    async def test_persistent_connect_error_is_unavailable(self, client):
        patcher, request = _patched_client(
            httpx.ConnectError("refused"), httpx.ConnectError("refused")
        )
        with patcher, pytest.raises(RemotePlatformUnavailable):
            await client.find_container_by_name("x")

        assert request.call_count == 2

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self, client):
        patcher, _ = _patched_client(httpx.ReadTimeout("slow"), httpx.ReadTimeout("slow"))
        with patcher, pytest.raises(RemotePlatformUnavailable, match="timed out"):
            await client.find_container_by_name("x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_errors(self, client, status):
        patcher, request = _patched_client(_response(status, json={"error": "nope"}))
        with patcher, pytest.raises(RemotePlatformAuthError) as exc_info:
            await client.find_container_by_name("x")

        assert exc_info.value.status_code == status
        assert request.call_count == 1

    @pytest.mark.asyncio
    async def test_api_error_uses_body_message(self, client):
        patcher, request = _patched_client(_response(500, json={"error": "database down"}))
        with patcher, pytest.raises(RemotePlatformAPIError) as exc_info:
            await client.find_container_by_name("x")

        assert exc_info.value.message == "database down"
        assert exc_info.value.status_code == 500
        assert request.call_count == 1

    @pytest.mark.asyncio
    async def test_api_error_falls_back_to_text(self, client):
        patcher, _ = _patched_client(_response(502, text="Bad gateway"))
        with patcher, pytest.raises(RemotePlatformAPIError, match="Bad gateway"):
            await client.find_container_by_name("x")

    @pytest.mark.asyncio
    async def test_dropped_connection_is_unavailable(self, client):
        patcher, request = _patched_client(httpx.ReadError("connection reset"))
        with patcher, pytest.raises(RemotePlatformUnavailable, match="connection reset"):
            await client.create_resource("lib-1", {"name": "Tempo"})

        assert request.call_count == 1

    @pytest.mark.asyncio
    async def test_protocol_error_is_unavailable(self, client):
        patcher, _ = _patched_client(httpx.RemoteProtocolError("peer closed connection"))
        with patcher, pytest.raises(RemotePlatformUnavailable):
            await client.find_container_by_name("x")

    @pytest.mark.asyncio
    async def test_html_success_page_is_api_error(self, client):
        html = httpx.Response(
            200,
            content=b"<html><body>Maintenance</body></html>",
            headers={"content-type": "text/html"},
            request=httpx.Request("GET", BASE_URL),
        )
        patcher, _ = _patched_client(html)
        with patcher, pytest.raises(RemotePlatformAPIError, match="non-JSON") as exc_info:
            await client.find_container_by_name("x")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_list_body_is_api_error(self, client):
        patcher, _ = _patched_client(_response(200, json=[{"id": "lib-1"}]))
        with patcher, pytest.raises(RemotePlatformAPIError, match="unexpected list"):
            await client.find_container_by_name("x")


# =============================================================================
# Containers
# =============================================================================


class TestContainers:
    @pytest.mark.asyncio
    async def test_find_by_name_is_trimmed_and_case_insensitive(self, client):
        patcher, _ = _patched_client(
            _response(200, json={"libraries": [{"id": 7, "name": " My Library ", "source_id": "TP:x"}]})
        )
        with patcher:
            found = await client.find_container_by_name("my library")

        assert found.id == "7"
        assert found.source_id == "TP:x"

    @pytest.mark.asyncio
    async def test_find_plan_uses_plans_endpoint(self, client):
        patcher, request = _patched_client(_response(200, json={"plans": []}))
        with patcher:
            found = await client.find_container_by_name("Plan", kind="plan")

        assert found is None
        assert request.call_args.args[1] == f"{BASE_URL}/training-plans"

    @pytest.mark.asyncio
    async def test_resolve_reuses_matching_source_id(self, client):
        patcher, request = _patched_client(
            _response(200, json={"libraries": [{"id": "lib-9", "name": "Shared", "source_id": "TP:S"}]})
        )
        with patcher:
            handle = await client.resolve_or_create_container("Shared", source_id="TP:S")

        assert handle.id == "lib-9"
        assert handle.created is False
        assert request.call_count == 1

    @pytest.mark.asyncio
    async def test_create_library(self, client):
        patcher, request = _patched_client(
            _response(201, json={"library": {"id": "lib-1", "name": "New"}})
        )
        with patcher:
            handle = await client.resolve_or_create_container("  New ")

        assert handle.id == "lib-1"
        assert handle.created is True
        assert request.call_args.args[0] == "POST"
        assert request.call_args.kwargs["json"] == {"name": "New", "source_id": None}

    @pytest.mark.asyncio
    async def test_create_plan_sends_metadata_and_weeks(self, client):
        weeks = [{"week_number": 1, "phase": "Base"}]
        patcher, request = _patched_client(
            _response(200, json={"plans": []}),
            _response(201, json={"planId": "plan-1"}),
        )
        with patcher:
            handle = await client.resolve_or_create_container(
                "Base Block",
                kind="plan",
                source_id="TP:555",
                metadata={"description": "desc", "weeks": weeks},
            )

        assert handle.id == "plan-1"
        assert handle.kind == "plan"
        body = request.call_args.kwargs["json"]
        assert body["metadata"] == {"name": "Base Block", "source_id": "TP:555", "description": "desc"}
        assert body["weeks"] == weeks
        assert body["publish"] is True

    @pytest.mark.asyncio
    async def test_delete_container(self, client):
        patcher, request = _patched_client(_response(204))
        with patcher:
            await client.delete_container("plan-1", kind="plan")

        assert request.call_args.args == ("DELETE", f"{BASE_URL}/training-plans/plan-1")


# =============================================================================
# Workouts
# =============================================================================


class TestWorkouts:
    @pytest.mark.asyncio
    async def test_find_resource_by_identity(self, client):
        patcher, request = _patched_client(
            _response(200, json={"workouts": [
                {"id": "w-other", "source_id": "TP:other"},
                {"id": "w-1", "source_id": "TP:abc", "name": "Sweet Spot"},
            ]})
        )
        with patcher:
            found = await client.find_resource_by_identity("lib-1", "TP:abc")

        assert found.id == "w-1"
        assert found.name == "Sweet Spot"
        assert request.call_args.kwargs["params"] == {"library_id": "lib-1", "source_id": "TP:abc"}

    @pytest.mark.asyncio
    async def test_find_resource_not_found(self, client):
        patcher, _ = _patched_client(_response(404, json={"error": "not found"}))
        with patcher:
            assert await client.find_resource_by_identity("lib-1", "TP:abc") is None

    @pytest.mark.asyncio
    async def test_create_resource(self, client):
        patcher, request = _patched_client(
            _response(201, json={"workout": {"id": "w-2", "source_id": "TP:abc"}})
        )
        with patcher:
            created = await client.create_resource("lib-1", {"name": "Tempo", "source_id": "TP:abc"})

        assert created.id == "w-2"
        assert created.container_id == "lib-1"
        assert created.name == "Tempo"
        assert request.call_args.kwargs["json"]["library_id"] == "lib-1"

    @pytest.mark.asyncio
    async def test_create_resource_without_id_fails(self, client):
        patcher, _ = _patched_client(_response(200, json={"workout": {}}))
        with patcher, pytest.raises(RemotePlatformAPIError, match="no id"):
            await client.create_resource("lib-1", {"name": "Tempo"})


# =============================================================================
# Plan calendar
# =============================================================================


class TestPlanCalendar:
    @pytest.mark.asyncio
    async def test_create_schedule_entry(self, client):
        patcher, request = _patched_client(_response(201, json={"entry": {"id": "e-1"}}))
        payload = {"kind": "workout", "week_number": 2, "day_of_week": 3}
        with patcher:
            entry = await client.create_schedule_entry("plan-1", payload)

        assert entry.id == "e-1"
        assert (entry.week_number, entry.day_of_week) == (2, 3)
        assert request.call_args.args[1] == f"{BASE_URL}/training-plans/plan-1/schedule"

    @pytest.mark.asyncio
    async def test_create_note(self, client):
        patcher, request = _patched_client(_response(201, json={"note": {"id": 5}}))
        with patcher:
            note = await client.create_note("plan-1", {"week_number": 1, "day_of_week": 6})

        assert note.id == "5"
        assert request.call_args.args[1] == f"{BASE_URL}/training-plans/plan-1/notes"
