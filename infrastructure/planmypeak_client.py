"""
HTTP client for the PlanMyPeak API.

Implements the RemotePlatform port: workout libraries, workouts inside a
library, training plans, and schedule entries / notes inside a plan.

Connect errors and timeouts are retried with exponential backoff. Every
other transport failure, error status or malformed body is raised
immediately as a RemotePlatformError subclass.
Lookups answer ``None`` for "not found".
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from application.exceptions import (
    RemotePlatformAPIError,
    RemotePlatformAuthError,
    RemotePlatformUnavailable,
)
from application.ports import (
    ContainerHandle,
    ContainerKind,
    NoteHandle,
    ResourceHandle,
    ScheduleEntryHandle,
)
from domain.models.conflict import ContainerDescriptor

logger = logging.getLogger(__name__)

WORKOUT_LIBRARIES_ENDPOINT = "/v1/workouts/libraries"
WORKOUT_LIBRARY_ITEMS_ENDPOINT = "/v1/workouts/library"
TRAINING_PLANS_ENDPOINT = "/training-plans"

RETRYABLE_EXCEPTIONS = (httpx.ConnectError, httpx.TimeoutException)


def _normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def _source_id_of(item: Dict[str, Any]) -> Optional[str]:
    return item.get("source_id") or item.get("sourceId")


class PlanMyPeakClient:
    """
    HTTP client for PlanMyPeak communication.

    Every request carries the bearer token given at construction. A new
    ``httpx.AsyncClient`` is opened per request.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ):
        """
        Initialize the PlanMyPeak client.

        Args:
            base_url: API root (e.g., "https://app.planmypeak.com/api")
            token: Bearer token for the Authorization header
            timeout: Request timeout in seconds
            retry_attempts: Attempts for connect errors and timeouts
            retry_wait_seconds: Initial backoff between attempts
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_wait_seconds = retry_wait_seconds

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
        json: Optional[Dict[str, Any]],
    ) -> httpx.Response:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_wait_seconds, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    return await client.request(
                        method, url, params=params, json=json, headers=self._headers()
                    )
        raise RemotePlatformUnavailable(f"No attempt was made for {method} {url}")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("error") or data.get("message")
            if message:
                return str(message)
        return response.text or f"HTTP {response.status_code}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        not_found_ok: bool = False,
    ) -> Optional[httpx.Response]:
        url = f"{self._base_url}{path}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        try:
            response = await self._send(method, url, params, json)
        except httpx.ConnectError as e:
            logger.error(f"PlanMyPeak unavailable: {e}")
            raise RemotePlatformUnavailable(
                f"PlanMyPeak is not available at {self._base_url}"
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"PlanMyPeak timeout: {e}")
            raise RemotePlatformUnavailable("PlanMyPeak request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"PlanMyPeak transport error on {method} {path}: {e}")
            raise RemotePlatformUnavailable(f"PlanMyPeak request failed: {e}") from e

        status = response.status_code
        if status == 404 and not_found_ok:
            return None
        if status in (401, 403):
            logger.warning(f"PlanMyPeak rejected credentials on {method} {path} ({status})")
            raise RemotePlatformAuthError("PlanMyPeak authentication required", status)
        if not 200 <= status < 300:
            message = self._error_message(response)
            logger.error(f"PlanMyPeak error: {status} - {message}")
            raise RemotePlatformAPIError(message, status)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"PlanMyPeak returned a non-JSON body ({response.status_code})")
            raise RemotePlatformAPIError(
                "PlanMyPeak returned a non-JSON response", response.status_code
            ) from e
        if not isinstance(data, dict):
            raise RemotePlatformAPIError(
                f"PlanMyPeak returned an unexpected {type(data).__name__} body",
                response.status_code,
            )
        return data

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    async def _list_containers(self, kind: ContainerKind) -> List[Dict[str, Any]]:
        if kind == "plan":
            response = await self._request("GET", TRAINING_PLANS_ENDPOINT)
            return list(self._json(response).get("plans", []))
        response = await self._request("GET", WORKOUT_LIBRARIES_ENDPOINT)
        return list(self._json(response).get("libraries", []))

    async def find_container_by_name(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
    ) -> Optional[ContainerDescriptor]:
        wanted = _normalize_name(name)
        for item in await self._list_containers(kind):
            if _normalize_name(item.get("name")) == wanted:
                return ContainerDescriptor(
                    id=str(item["id"]),
                    name=item.get("name") or name,
                    source_id=_source_id_of(item),
                )
        return None

    async def resolve_or_create_container(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContainerHandle:
        name = name.strip()
        if source_id:
            for item in await self._list_containers(kind):
                if _source_id_of(item) == source_id:
                    logger.info(f"Reusing {kind} {item['id']} for source_id {source_id}")
                    return ContainerHandle(
                        id=str(item["id"]),
                        name=item.get("name") or name,
                        kind=kind,
                        source_id=source_id,
                        created=False,
                    )

        if kind == "plan":
            metadata = dict(metadata or {})
            weeks = metadata.pop("weeks", [])
            body = {
                "metadata": {"name": name, "source_id": source_id, **metadata},
                "weeks": weeks,
                "publish": True,
            }
            data = self._json(await self._request("POST", TRAINING_PLANS_ENDPOINT, json=body))
            plan_id = data.get("planId") or data.get("id")
            logger.info(f'Created training plan "{name}" ({plan_id})')
            return ContainerHandle(
                id=str(plan_id), name=name, kind=kind, source_id=source_id, created=True
            )

        body = {"name": name, "source_id": source_id}
        data = self._json(await self._request("POST", WORKOUT_LIBRARIES_ENDPOINT, json=body))
        data = data.get("library", data)
        logger.info(f'Created workout library "{name}" ({data.get("id")})')
        return ContainerHandle(
            id=str(data["id"]),
            name=data.get("name") or name,
            kind=kind,
            source_id=source_id,
            created=True,
        )

    async def delete_container(
        self,
        container_id: str,
        *,
        kind: ContainerKind = "library",
    ) -> None:
        base = TRAINING_PLANS_ENDPOINT if kind == "plan" else WORKOUT_LIBRARIES_ENDPOINT
        await self._request("DELETE", f"{base}/{container_id}")
        logger.info(f"Deleted {kind} {container_id}")

    # -------------------------------------------------------------------------
    # Workouts
    # -------------------------------------------------------------------------

    async def find_resource_by_identity(
        self,
        container_id: str,
        identity: str,
    ) -> Optional[ResourceHandle]:
        response = await self._request(
            "GET",
            WORKOUT_LIBRARY_ITEMS_ENDPOINT,
            params={"library_id": container_id, "source_id": identity},
            not_found_ok=True,
        )
        if response is None:
            return None

        for item in self._json(response).get("workouts", []):
            if _source_id_of(item) == identity:
                return ResourceHandle(
                    id=str(item["id"]),
                    container_id=str(item.get("library_id") or container_id),
                    source_id=identity,
                    name=item.get("name"),
                )
        return None

    async def create_resource(
        self,
        container_id: str,
        payload: Dict[str, Any],
    ) -> ResourceHandle:
        body = {**payload, "library_id": container_id}
        data = self._json(await self._request("POST", WORKOUT_LIBRARY_ITEMS_ENDPOINT, json=body))
        data = data.get("workout", data)
        if not data.get("id"):
            raise RemotePlatformAPIError(
                f'PlanMyPeak returned no id for workout "{payload.get("name")}"', 200
            )
        return ResourceHandle(
            id=str(data["id"]),
            container_id=container_id,
            source_id=_source_id_of(data) or payload.get("source_id"),
            name=data.get("name") or payload.get("name"),
        )

    # -------------------------------------------------------------------------
    # Plan calendar
    # -------------------------------------------------------------------------

    async def create_schedule_entry(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> ScheduleEntryHandle:
        data = self._json(
            await self._request(
                "POST", f"{TRAINING_PLANS_ENDPOINT}/{plan_id}/schedule", json=payload
            )
        )
        data = data.get("entry", data)
        return ScheduleEntryHandle(
            id=str(data.get("id") or payload.get("id") or ""),
            plan_id=plan_id,
            week_number=int(payload["week_number"]),
            day_of_week=int(payload["day_of_week"]),
        )

    async def create_note(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> NoteHandle:
        data = self._json(
            await self._request("POST", f"{TRAINING_PLANS_ENDPOINT}/{plan_id}/notes", json=payload)
        )
        data = data.get("note", data)
        return NoteHandle(
            id=str(data.get("id") or ""),
            plan_id=plan_id,
            week_number=int(payload["week_number"]),
            day_of_week=int(payload["day_of_week"]),
        )
