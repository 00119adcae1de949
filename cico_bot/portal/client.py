# cico_bot/portal/client.py
"""Async client for the attendance portal API."""

import logging
from datetime import date, timedelta

import httpx

from cico_bot.errors import AuthExpired, LoginFailed, PortalError
from cico_bot.models.records import AttendanceRecord, StudentProfile

from .retry import portal_retry

logger = logging.getLogger(__name__)

LOGIN_PATH = "/student/studentLoginApi-web"
HISTORY_PATH = "/student/getStudentCheckInCheckOutHistory"
PROFILE_PATH = "/student/v1/getCurrentStudent"


def lookback_days(limit: int) -> int:
    """
    History window for a record limit.

    Large limits mean "everything": the portal needs an explicit date range,
    so a bulk request spans ten years.
    """
    if limit > 365:
        return 3650
    if limit > 30:
        return 365
    return 30


class PortalClient:
    """
    Async attendance portal client.

    Handles:
    - Email/password login returning an access token
    - Check-in/check-out history (newest first)
    - Current student profile
    - Distinguishing expired sessions (401) from other failures
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize portal client.

        Args:
            base_url: Portal API base URL
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @portal_retry
    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        params: dict | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": token} if token else None
        response = await self._client.request(method, path, params=params, headers=headers)
        if response.status_code == 401:
            raise AuthExpired("Portal rejected the session token")
        response.raise_for_status()
        return response

    async def _call(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self._request(method, path, **kwargs)
            return response.json()
        except (AuthExpired, LoginFailed):
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"Portal {method} {path} returned {e.response.status_code}")
            raise PortalError(f"Portal returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Portal {method} {path} failed: {e!r}")
            raise PortalError(f"Portal request failed: {type(e).__name__}") from e
        except ValueError as e:
            logger.error(f"Portal {method} {path} returned invalid JSON")
            raise PortalError("Portal returned an invalid response") from e

    async def login(self, email: str, password: str) -> str:
        """
        Exchange credentials for an access token.

        Returns:
            Access token string

        Raises:
            LoginFailed: Invalid credentials or unsuccessful response
            PortalError: Network or server failure
        """
        logger.info(f"Logging in user: {email}")
        try:
            payload = await self._call(
                "POST", LOGIN_PATH, params={"email": email, "password": password}
            )
        except AuthExpired as e:
            raise LoginFailed("invalid email or password", invalid_credentials=True) from e

        data = payload.get("data") or {}
        token = data.get("AccessToken") if isinstance(data, dict) else None
        if payload.get("success") and token:
            return token

        raise LoginFailed(payload.get("message") or "Invalid response")

    async def get_attendance(self, token: str, limit: int = 1) -> list[AttendanceRecord]:
        """
        Fetch check-in/check-out history, newest first.

        Args:
            token: Access token from login()
            limit: Maximum records to return

        Returns:
            Records (empty list when the portal has none)

        Raises:
            AuthExpired: Token no longer valid
            PortalError: Network or server failure
        """
        end = date.today()
        start = end - timedelta(days=lookback_days(limit))
        params = {
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "limit": limit,
            "offset": 0,
            "type": "All",
        }
        logger.info(f"Fetching attendance {params['startDate']}..{params['endDate']} (limit={limit})")

        payload = await self._call("GET", HISTORY_PATH, token=token, params=params)
        raw_records = (payload.get("response") or {}).get("attendance") or []
        records = [AttendanceRecord.model_validate(item) for item in raw_records]
        logger.info(f"Fetched {len(records)} attendance record(s)")
        return records

    async def get_profile(self, token: str) -> StudentProfile:
        """
        Fetch the current student's profile.

        Raises:
            AuthExpired: Token no longer valid
            PortalError: Network or server failure, or empty profile
        """
        payload = await self._call("GET", PROFILE_PATH, token=token)
        if not payload:
            raise PortalError("Portal returned an empty profile")
        return StudentProfile.model_validate(payload)
