# tests/unit/test_portal_client.py
"""
Tests for the attendance portal client.

Uses httpx.MockTransport to script portal responses.
"""

from datetime import date, timedelta

import httpx
import pytest

from cico_bot.errors import AuthExpired, LoginFailed, PortalError
from cico_bot.portal.client import (
    HISTORY_PATH,
    LOGIN_PATH,
    PROFILE_PATH,
    PortalClient,
    lookback_days,
)
from cico_bot.portal.retry import is_retryable

BASE_URL = "https://portal.example/api"


def _client(handler) -> PortalClient:
    return PortalClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("limit,days", [(1, 30), (10, 30), (30, 30), (31, 365), (365, 365), (9999, 3650)])
def test_lookback_days(limit, days):
    assert lookback_days(limit) == days


def test_is_retryable():
    request = httpx.Request("GET", BASE_URL)
    assert is_retryable(httpx.ConnectError("refused", request=request))
    assert is_retryable(
        httpx.HTTPStatusError("bad gateway", request=request, response=httpx.Response(502))
    )
    assert not is_retryable(
        httpx.HTTPStatusError("not found", request=request, response=httpx.Response(404))
    )
    assert not is_retryable(AuthExpired("expired"))


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {"AccessToken": "tok-1"}})

    async with _client(handler) as client:
        token = await client.login("a@b.com", "secret")

    assert token == "tok-1"
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api" + LOGIN_PATH
    assert seen[0].url.params["email"] == "a@b.com"
    assert seen[0].url.params["password"] == "secret"


@pytest.mark.asyncio
async def test_login_invalid_credentials():
    async with _client(lambda request: httpx.Response(401)) as client:
        with pytest.raises(LoginFailed) as exc_info:
            await client.login("a@b.com", "wrong")

    assert exc_info.value.invalid_credentials is True


@pytest.mark.asyncio
async def test_login_unsuccessful_response():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Account locked"})

    async with _client(handler) as client:
        with pytest.raises(LoginFailed) as exc_info:
            await client.login("a@b.com", "secret")

    assert exc_info.value.invalid_credentials is False
    assert exc_info.value.reason == "Account locked"


@pytest.mark.asyncio
async def test_login_success_without_token():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": {}})

    async with _client(handler) as client:
        with pytest.raises(LoginFailed) as exc_info:
            await client.login("a@b.com", "secret")

    assert exc_info.value.reason == "Invalid response"


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_attendance_parses_records():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "response": {
                    "attendance": [
                        {
                            "checkInDate": "2024-01-05",
                            "checkInTime": "09:00",
                            "checkOutTime": "18:00",
                            "workingHour": 32400,
                            "workReport": "Did things",
                            "checkInImage": "https://img/in.jpg",
                            "extraField": "ignored",
                        }
                    ]
                }
            },
        )

    async with _client(handler) as client:
        records = await client.get_attendance("tok-1", limit=10)

    assert len(records) == 1
    record = records[0]
    assert record.date == "2024-01-05"
    assert record.working_hour_seconds == 32400
    assert record.check_in_image == "https://img/in.jpg"
    assert record.check_out_image is None

    request = seen[0]
    assert request.url.path == "/api" + HISTORY_PATH
    assert request.headers["Authorization"] == "tok-1"
    params = request.url.params
    assert params["limit"] == "10"
    assert params["offset"] == "0"
    assert params["type"] == "All"
    today = date.today()
    assert params["endDate"] == today.isoformat()
    assert params["startDate"] == (today - timedelta(days=30)).isoformat()


@pytest.mark.asyncio
async def test_get_attendance_bulk_window():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"response": {"attendance": []}})

    async with _client(handler) as client:
        await client.get_attendance("tok-1", limit=9999)

    expected = (date.today() - timedelta(days=3650)).isoformat()
    assert seen[0].url.params["startDate"] == expected


@pytest.mark.asyncio
async def test_get_attendance_missing_list_is_empty():
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        assert await client.get_attendance("tok-1") == []


@pytest.mark.asyncio
async def test_get_attendance_expired_token():
    async with _client(lambda request: httpx.Response(401)) as client:
        with pytest.raises(AuthExpired):
            await client.get_attendance("stale")


@pytest.mark.asyncio
async def test_client_error_becomes_portal_error():
    async with _client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(PortalError):
            await client.get_attendance("tok-1")


@pytest.mark.asyncio
async def test_invalid_json_becomes_portal_error():
    async with _client(lambda request: httpx.Response(200, content=b"<html>")) as client:
        with pytest.raises(PortalError):
            await client.get_attendance("tok-1")


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_profile():
    payload = {
        "userId": 1001,
        "fullName": "Asha Rao",
        "email": "asha@example.com",
        "currentCourse": "Python",
        "courseResponse": {"courseFees": 25000},
        "active": True,
        "profilePic": "https://img/me.jpg",
    }

    def handler(request):
        assert request.url.path == "/api" + PROFILE_PATH
        return httpx.Response(200, json=payload)

    async with _client(handler) as client:
        profile = await client.get_profile("tok-1")

    assert profile.user_id == "1001"
    assert profile.full_name == "Asha Rao"
    assert profile.course.course_fees == "25000"
    assert profile.active is True


@pytest.mark.asyncio
async def test_get_profile_empty_payload():
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(PortalError):
            await client.get_profile("tok-1")
