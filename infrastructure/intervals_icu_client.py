"""
HTTP client for the Intervals.icu API.

Implements the RemotePlatform port for workout library exports: folders
are containers and library workouts are resources. Intervals.icu has no
source ids on folders or workouts, so a folder is matched by name and a
workout by the identity stored as its tag.

Training plans are not supported; plan operations raise
RemotePlatformAPIError so a plan-scope run ends in the folder phase
without touching the athlete's library.

Authentication is HTTP basic auth with the literal user ``API_KEY`` and
the athlete's API key as password. The athlete id is looked up once per
client through ``GET /athlete/0``.
"""

import logging
from typing import Any, Dict, List, Optional, Union

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
from domain.converters.intervals_icu_mapping import build_workout_body
from domain.models.conflict import ContainerDescriptor

logger = logging.getLogger(__name__)

CURRENT_ATHLETE_ENDPOINT = "/athlete/0"
PLAN_FOLDER_TYPE = "PLAN"
PLANS_UNSUPPORTED = "Intervals.icu exports support workout libraries only"

RETRYABLE_EXCEPTIONS = (httpx.ConnectError, httpx.TimeoutException)

JsonBody = Union[Dict[str, Any], List[Any]]


def _normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def _athlete_id_of(data: Dict[str, Any]) -> Optional[str]:
    """Concrete athlete id from the common response shapes, never ``0``."""
    athlete = data.get("athlete")
    candidates = [data.get("id"), data.get("athlete_id"), data.get("athleteId")]
    if isinstance(athlete, dict):
        candidates.append(athlete.get("id"))

    for value in candidates:
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value > 0:
            return str(value)
        if isinstance(value, str) and value.strip() and value.strip() != "0":
            return value.strip()
    return None


def _folder_id(container_id: str) -> Union[int, str]:
    return int(container_id) if container_id.isdigit() else container_id


class IntervalsIcuClient:
    """
    HTTP client for Intervals.icu communication.

    A new ``httpx.AsyncClient`` is opened per request. The resolved athlete
    id is cached for the lifetime of the client.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ):
        """
        Initialize the Intervals.icu client.

        Args:
            base_url: API root (e.g., "https://intervals.icu/api/v1")
            api_key: Athlete API key from the Intervals.icu settings page
            timeout: Request timeout in seconds
            retry_attempts: Attempts for connect errors and timeouts
            retry_wait_seconds: Initial backoff between attempts
        """
        self._base_url = base_url.rstrip("/")
        self._auth = httpx.BasicAuth("API_KEY", api_key)
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_wait_seconds = retry_wait_seconds
        self._athlete_id: Optional[str] = None

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
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
                        method,
                        url,
                        json=json,
                        auth=self._auth,
                        headers={"Accept": "application/json"},
                    )
        raise RemotePlatformUnavailable(f"No attempt was made for {method} {url}")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        not_found_ok: bool = False,
    ) -> Optional[httpx.Response]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._send(method, url, json)
        except httpx.ConnectError as e:
            logger.error(f"Intervals.icu unavailable: {e}")
            raise RemotePlatformUnavailable(
                f"Intervals.icu is not available at {self._base_url}"
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Intervals.icu timeout: {e}")
            raise RemotePlatformUnavailable("Intervals.icu request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Intervals.icu transport error on {method} {path}: {e}")
            raise RemotePlatformUnavailable(f"Intervals.icu request failed: {e}") from e

        status = response.status_code
        if status == 404 and not_found_ok:
            return None
        if status in (401, 403):
            logger.warning(f"Intervals.icu rejected the API key on {method} {path} ({status})")
            raise RemotePlatformAuthError("Invalid Intervals.icu API key", status)
        if not 200 <= status < 300:
            message = response.text or f"HTTP {status}"
            logger.error(f"Intervals.icu error: {status} - {message}")
            raise RemotePlatformAPIError(f"Intervals.icu API error: {status}", status)
        return response

    @staticmethod
    def _json(response: httpx.Response, expected: type = dict) -> JsonBody:
        if response.status_code == 204 or not response.content:
            return expected()
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Intervals.icu returned a non-JSON body ({response.status_code})")
            raise RemotePlatformAPIError(
                "Intervals.icu returned a non-JSON response", response.status_code
            ) from e
        if not isinstance(data, expected):
            raise RemotePlatformAPIError(
                f"Intervals.icu returned an unexpected {type(data).__name__} body",
                response.status_code,
            )
        return data

    async def _athlete_path(self) -> str:
        if self._athlete_id is None:
            data = self._json(await self._request("GET", CURRENT_ATHLETE_ENDPOINT))
            athlete_id = _athlete_id_of(data)
            if athlete_id is None:
                raise RemotePlatformAPIError("Intervals.icu did not return an athlete id")
            self._athlete_id = athlete_id
            logger.debug(f"Using Intervals.icu athlete {athlete_id}")
        return f"/athlete/{self._athlete_id}"

    @staticmethod
    def _require_library(kind: ContainerKind) -> None:
        if kind != "library":
            raise RemotePlatformAPIError(PLANS_UNSUPPORTED)

    # -------------------------------------------------------------------------
    # Folders
    # -------------------------------------------------------------------------

    async def _list_folders(self) -> List[Dict[str, Any]]:
        response = await self._request("GET", f"{await self._athlete_path()}/folders")
        return [
            folder
            for folder in self._json(response, list)
            if isinstance(folder, dict) and folder.get("type") != PLAN_FOLDER_TYPE
        ]

    async def _find_folder(self, name: str) -> Optional[Dict[str, Any]]:
        wanted = _normalize_name(name)
        for folder in await self._list_folders():
            if _normalize_name(folder.get("name")) == wanted:
                return folder
        return None

    async def find_container_by_name(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
    ) -> Optional[ContainerDescriptor]:
        self._require_library(kind)
        folder = await self._find_folder(name)
        if folder is None:
            return None
        return ContainerDescriptor(id=str(folder["id"]), name=folder.get("name") or name)

    async def resolve_or_create_container(
        self,
        name: str,
        *,
        kind: ContainerKind = "library",
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContainerHandle:
        """
        Return the folder for ``source_id``, creating it if needed.

        Folders have no source id, so one with the same name stands in for
        it. Without a ``source_id`` a new folder is always created.
        """
        self._require_library(kind)
        name = name.strip()

        if source_id:
            existing = await self._find_folder(name)
            if existing is not None:
                return ContainerHandle(
                    id=str(existing["id"]),
                    name=existing.get("name") or name,
                    kind=kind,
                    source_id=source_id,
                    created=False,
                )

        body: Dict[str, Any] = {"name": name}
        description = (metadata or {}).get("description")
        if description:
            body["description"] = description
        data = self._json(
            await self._request("POST", f"{await self._athlete_path()}/folders", json=body)
        )
        if data.get("id") is None:
            raise RemotePlatformAPIError("Intervals.icu returned a folder with no id")
        logger.info(f'Created Intervals.icu folder "{name}" ({data["id"]})')
        return ContainerHandle(
            id=str(data["id"]), name=name, kind=kind, source_id=source_id, created=True
        )

    async def delete_container(
        self,
        container_id: str,
        *,
        kind: ContainerKind = "library",
    ) -> None:
        self._require_library(kind)
        await self._request(
            "DELETE",
            f"{await self._athlete_path()}/folders/{container_id}",
            not_found_ok=True,
        )
        logger.info(f"Deleted Intervals.icu folder {container_id}")

    # -------------------------------------------------------------------------
    # Workouts
    # -------------------------------------------------------------------------

    async def find_resource_by_identity(
        self,
        container_id: str,
        identity: str,
    ) -> Optional[ResourceHandle]:
        response = await self._request(
            "GET", f"{await self._athlete_path()}/workouts", not_found_ok=True
        )
        if response is None:
            return None
        for item in self._json(response, list):
            if not isinstance(item, dict) or str(item.get("folder_id")) != container_id:
                continue
            if identity in (item.get("tags") or []) and item.get("id") is not None:
                return ResourceHandle(
                    id=str(item["id"]),
                    container_id=container_id,
                    source_id=identity,
                    name=item.get("name"),
                )
        return None

    async def create_resource(
        self,
        container_id: str,
        payload: Dict[str, Any],
    ) -> ResourceHandle:
        body = build_workout_body(payload, _folder_id(container_id))
        data = self._json(
            await self._request("POST", f"{await self._athlete_path()}/workouts", json=body)
        )
        if data.get("id") is None:
            raise RemotePlatformAPIError("Intervals.icu returned a workout with no id")
        return ResourceHandle(
            id=str(data["id"]),
            container_id=container_id,
            source_id=payload.get("source_id"),
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
        raise RemotePlatformAPIError(PLANS_UNSUPPORTED)

    async def create_note(
        self,
        plan_id: str,
        payload: Dict[str, Any],
    ) -> NoteHandle:
        raise RemotePlatformAPIError(PLANS_UNSUPPORTED)
