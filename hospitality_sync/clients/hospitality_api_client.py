"""Hospitality REST API client for front desk and housekeeping operations."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from pydantic import ValidationError
from structlog import get_logger

from hospitality_sync.config import settings
from hospitality_sync.models.common import ErrorBody

logger = get_logger(__name__)

TokenProvider = Callable[[], Union[str, Awaitable[str]]]


class HospitalityAPIError(Exception):
    """Base exception for hospitality API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionExpiredError(HospitalityAPIError):
    """Raised on 401: the bearer credential is missing, invalid or expired."""

    pass


class PermissionDeniedError(HospitalityAPIError):
    """Raised on 403: the signed-in role may not perform the request."""

    pass


class ResourceNotFoundError(HospitalityAPIError):
    """Raised on 404."""

    pass


class TransitionRejectedError(HospitalityAPIError):
    """Raised when the server rejects a request with a 4xx validation error.

    ``message`` is the server's ``error`` field, verbatim.
    """

    pass


class ServerError(HospitalityAPIError):
    """Raised when the API returns a 5xx."""

    pass


class TransportError(HospitalityAPIError):
    """Raised when no response was received (timeout, connection failure)."""

    pass


class HospitalityAPIClient:
    """Client for the hospitality REST API.

    Reads may be retried on timeouts and 5xx responses. Writes (check-in,
    check-out, task transitions, guest creation) are sent exactly once.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize the client, falling back to settings for anything not given.

        Args:
            base_url: API root, e.g. ``http://localhost:5000/api``
            token: Static bearer token
            token_provider: Callable returning the current bearer token (sync or async);
                takes precedence over ``token``
            timeout: Per-request timeout in seconds
            max_retries: Attempts for read requests
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.api_token
        self.token_provider = token_provider
        self.timeout = timeout if timeout is not None else settings.api.request_timeout
        self.max_retries = max(1, max_retries if max_retries is not None else settings.api.max_retries)
        self.retry_backoff_base = settings.api.retry_backoff_base

    async def _get_token(self) -> str:
        if self.token_provider is None:
            return self.token or ""
        token = self.token_provider()
        if inspect.isawaitable(token):
            token = await token
        return token or ""

    async def _get_headers(self) -> dict[str, str]:
        """Get default headers with the bearer credential.

        Returns:
            Dictionary of HTTP headers including authentication.
        """
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "HospitalitySync/1.0",
        }
        token = await self._get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        """Extract the server's ``error`` field, falling back to the raw body."""
        try:
            body = ErrorBody.model_validate(response.json())
            if body.error:
                return body.error
        except (ValueError, ValidationError):
            pass
        text = (response.text or "").strip()
        return text[:200] if text else default

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        retry: bool = False,
    ) -> Any:
        """Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, ...)
            endpoint: API endpoint path (without base URL)
            data: Request body (for POST requests)
            params: Query parameters
            retry: Retry timeouts and 5xx with exponential backoff. Only safe for reads.

        Returns:
            Decoded JSON response (dict or list), ``{}`` for an empty body

        Raises:
            SessionExpiredError: On 401
            PermissionDeniedError: On 403
            ResourceNotFoundError: On 404
            TransitionRejectedError: On any other 4xx
            ServerError: On 5xx after retries
            TransportError: When no response was received
        """
        url = f"{self.base_url}{endpoint}"
        headers = await self._get_headers()
        attempts = self.max_retries if retry else 1

        for attempt in range(attempts):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        json=data,
                        params=params,
                    )

                    if response.status_code == 401:
                        logger.warning(
                            "API session expired",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise SessionExpiredError(
                            self._error_message(response, "Authentication required"),
                            status_code=401,
                        )

                    if response.status_code == 403:
                        logger.warning(
                            "API permission denied",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise PermissionDeniedError(
                            self._error_message(response, "Access denied"),
                            status_code=403,
                        )

                    if response.status_code == 404:
                        logger.warning(
                            "API resource not found",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise ResourceNotFoundError(
                            self._error_message(response, f"Resource not found: {endpoint}"),
                            status_code=404,
                        )

                    if response.status_code >= 500:
                        if attempt < attempts - 1:
                            wait_time = self.retry_backoff_base ** attempt
                            logger.warning(
                                "API server error, retrying",
                                endpoint=endpoint,
                                status_code=response.status_code,
                                attempt=attempt + 1,
                                max_retries=attempts,
                                wait_seconds=wait_time,
                            )
                            await asyncio.sleep(wait_time)
                            continue
                        logger.error(
                            "API server error",
                            endpoint=endpoint,
                            method=method,
                            status_code=response.status_code,
                        )
                        raise ServerError(
                            self._error_message(response, f"Server error at {endpoint}"),
                            status_code=response.status_code,
                        )

                    if 400 <= response.status_code < 500:
                        message = self._error_message(response, f"Request rejected at {endpoint}")
                        logger.info(
                            "API rejected request",
                            endpoint=endpoint,
                            method=method,
                            status_code=response.status_code,
                            error=message,
                        )
                        raise TransitionRejectedError(message, status_code=response.status_code)

                    if response.status_code in (200, 201, 204):
                        logger.debug(
                            "API request successful",
                            endpoint=endpoint,
                            method=method,
                            status_code=response.status_code,
                        )
                        if response.text:
                            return response.json()
                        return {}

                    logger.error(
                        "Unexpected API response status",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    )
                    raise HospitalityAPIError(
                        f"Unexpected response from {endpoint}: {response.status_code}",
                        status_code=response.status_code,
                    )

            except httpx.TimeoutException as e:
                if attempt < attempts - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "API request timeout, retrying",
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        max_retries=attempts,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("API request timeout", endpoint=endpoint, method=method)
                raise TransportError(f"Request timeout for {endpoint}") from e

            except httpx.RequestError as e:
                if attempt < attempts - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "API request error, retrying",
                        endpoint=endpoint,
                        error=str(e),
                        attempt=attempt + 1,
                        max_retries=attempts,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "API request error",
                    endpoint=endpoint,
                    method=method,
                    error=str(e),
                )
                raise TransportError(f"Request failed for {endpoint}: {str(e)}") from e

        raise TransportError(f"Failed to complete request to {endpoint}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_current_user(self) -> dict[str, Any]:
        """Fetch the signed-in user (``GET /auth/me``)."""
        return await self._make_request("GET", "/auth/me", retry=True)

    async def get_arrivals(self, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Fetch today's arrivals (pending or confirmed bookings checking in today)."""
        return await self._make_request("GET", "/bookings/arrivals", params=params, retry=True)

    async def get_departures(self, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Fetch today's departures (checked-in bookings checking out today)."""
        return await self._make_request("GET", "/bookings/departures", params=params, retry=True)

    async def get_in_house(self, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Fetch all checked-in bookings."""
        return await self._make_request("GET", "/bookings/in-house", params=params, retry=True)

    async def get_booking(self, booking_id: str) -> dict[str, Any]:
        return await self._make_request("GET", f"/bookings/{booking_id}", retry=True)

    async def get_room_availability(self, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Fetch per room-type availability.

        Args:
            params: Optional ``branchId``, ``checkIn`` and ``checkOut`` (ISO dates)

        Returns:
            ``{"summary": [...], "totalRooms": n, "availableRooms": n}``
        """
        return await self._make_request("GET", "/rooms/availability", params=params, retry=True)

    async def get_folio_by_booking(self, booking_id: str) -> dict[str, Any]:
        """Fetch the folio (charges, payments, balance) for a booking."""
        return await self._make_request("GET", f"/folios/booking/{booking_id}", retry=True)

    async def get_tasks(self, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Fetch housekeeping tasks.

        Args:
            params: Optional filters: ``branchId``, ``status``, ``taskType``, ``priority``,
                ``assignedTo``, ``roomId``, ``date``, ``page``, ``limit``

        Returns:
            ``{"tasks": [...], "pagination": {...}}``
        """
        return await self._make_request("GET", "/housekeeping/tasks", params=params, retry=True)

    async def get_pending_tasks(self, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Fetch open tasks with a priority summary."""
        return await self._make_request("GET", "/housekeeping/pending", params=params, retry=True)

    async def get_room_status(self, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Fetch the room status board (``{"rooms": [...], "summary": {...}}``)."""
        return await self._make_request("GET", "/housekeeping/room-status", params=params, retry=True)

    async def get_housekeeping_stats(self, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await self._make_request("GET", "/housekeeping/stats", params=params, retry=True)

    # ------------------------------------------------------------------
    # Writes (never retried)
    # ------------------------------------------------------------------

    async def check_in(
        self,
        booking_id: str,
        room_assignments: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Check a booking in. The server opens the folio and marks rooms occupied.

        Args:
            booking_id: Booking identifier
            room_assignments: Optional room reassignment at check-in

        Returns:
            Updated booking
        """
        logger.info("Checking in booking", booking_id=booking_id)
        body: dict[str, Any] = {}
        if room_assignments:
            body["roomAssignments"] = room_assignments
        return await self._make_request("POST", f"/bookings/{booking_id}/check-in", data=body)

    async def check_out(self, booking_id: str, payment: dict[str, Any]) -> dict[str, Any]:
        """Check a booking out, recording the final payment if any.

        Args:
            booking_id: Booking identifier
            payment: ``paymentMethod``, ``paymentAmount`` and optional ``paymentReference``

        Returns:
            Updated booking
        """
        logger.info(
            "Checking out booking",
            booking_id=booking_id,
            payment_method=payment.get("paymentMethod"),
            payment_amount=payment.get("paymentAmount"),
        )
        return await self._make_request("POST", f"/bookings/{booking_id}/check-out", data=payment)

    async def start_task(self, task_id: str) -> dict[str, Any]:
        logger.info("Starting housekeeping task", task_id=task_id)
        return await self._make_request("POST", f"/housekeeping/tasks/{task_id}/start", data={})

    async def complete_task(self, task_id: str, notes: Optional[str] = None) -> dict[str, Any]:
        logger.info("Completing housekeeping task", task_id=task_id)
        body = {"notes": notes} if notes else {}
        return await self._make_request("POST", f"/housekeeping/tasks/{task_id}/complete", data=body)

    async def verify_task(self, task_id: str, notes: Optional[str] = None) -> dict[str, Any]:
        """Approve a completed task. Rejection back to pending is not offered."""
        logger.info("Verifying housekeeping task", task_id=task_id)
        body: dict[str, Any] = {"approved": True}
        if notes:
            body["notes"] = notes
        return await self._make_request("POST", f"/housekeeping/tasks/{task_id}/verify", data=body)

    async def create_guest(self, guest: dict[str, Any]) -> dict[str, Any]:
        """Register a guest record (walk-in)."""
        logger.info("Creating guest", last_name=guest.get("lastName"))
        return await self._make_request("POST", "/guests", data=guest)
