"""Tests for the remote prediction client."""

import json

import httpx
import pytest

from ride_analytics.config import Settings
from ride_analytics.exceptions import (
    InsufficientDataError,
    RemotePredictionError,
    RemoteRateLimitError,
    RemoteUnavailableError,
)
from ride_analytics.prediction.client import RemotePredictionClient, request_or_none

BASE_URL = "https://api.test/v1"


def make_client(handler):
    return RemotePredictionClient(
        api_key="test-key",
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )


class TestRequest:
    """Tests for RemotePredictionClient.request."""

    @pytest.mark.asyncio
    async def test_success_returns_data(self):
        """Test the envelope data is returned on success."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "data": {"predicted_ftp": 270}})

        async with make_client(handler) as client:
            data = await client.request("/ftp/predict", {"user_id": "u1"})

        assert data == {"predicted_ftp": 270}
        assert seen["url"] == f"{BASE_URL}/ftp/predict"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"] == {"user_id": "u1"}
        assert client.is_online

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope(self):
        """Test success=false raises with the server message."""
        def handler(request):
            return httpx.Response(
                200, json={"success": False, "error": {"message": "model not trained"}}
            )

        async with make_client(handler) as client:
            with pytest.raises(RemotePredictionError) as exc_info:
                await client.request("/ftp/predict", {})

        assert exc_info.value.message == "model not trained"

    @pytest.mark.asyncio
    async def test_missing_data(self):
        """Test success without data is an error."""
        def handler(request):
            return httpx.Response(200, json={"success": True})

        async with make_client(handler) as client:
            with pytest.raises(RemotePredictionError):
                await client.request("/ftp/predict", {})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["ok", [1, 2], 42])
    async def test_non_object_data(self, data):
        """Test data that is not a JSON object is rejected."""
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": data})

        async with make_client(handler) as client:
            with pytest.raises(RemotePredictionError) as exc_info:
                await client.request("/ftp/predict", {})

        assert exc_info.value.details == {"endpoint": "/ftp/predict"}

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        """Test a non-JSON body is an error."""
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        async with make_client(handler) as client:
            with pytest.raises(RemotePredictionError) as exc_info:
                await client.request("/ftp/predict", {})

        assert "Malformed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        """Test 429 carries Retry-After."""
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "30"})

        async with make_client(handler) as client:
            with pytest.raises(RemoteRateLimitError) as exc_info:
                await client.request("/ftp/predict", {})

        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_insufficient_data(self):
        """Test 422 maps to InsufficientDataError with guidance."""
        def handler(request):
            return httpx.Response(
                422, json={"success": False, "error": {"message": "Not enough rides"}}
            )

        async with make_client(handler) as client:
            with pytest.raises(InsufficientDataError) as exc_info:
                await client.request("/ftp/predict", {})

        assert exc_info.value.message == "Not enough rides"
        assert exc_info.value.guidance == "Record more varied workouts to improve prediction accuracy."

    @pytest.mark.asyncio
    async def test_server_error_marks_offline(self):
        """Test 5xx raises unavailable and flips is_online."""
        def handler(request):
            return httpx.Response(503)

        async with make_client(handler) as client:
            with pytest.raises(RemoteUnavailableError):
                await client.request("/ftp/predict", {})

            assert not client.is_online

    @pytest.mark.asyncio
    async def test_connection_error_marks_offline(self):
        """Test connection failures raise unavailable."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteUnavailableError):
                await client.request("/ftp/predict", {})

            assert not client.is_online

    @pytest.mark.asyncio
    async def test_timeout_marks_offline(self):
        """Test timeouts raise unavailable."""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteUnavailableError):
                await client.request("/ftp/predict", {})

    @pytest.mark.asyncio
    async def test_other_status(self):
        """Test other statuses raise the base remote error."""
        def handler(request):
            return httpx.Response(404)

        async with make_client(handler) as client:
            with pytest.raises(RemotePredictionError) as exc_info:
                await client.request("/ftp/predict", {})

        assert not isinstance(exc_info.value, RemoteUnavailableError)
        assert exc_info.value.details["status"] == 404

    @pytest.mark.asyncio
    async def test_recovers_online_state(self):
        """Test a success after a failure sets is_online again."""
        responses = [httpx.Response(500), httpx.Response(200, json={"success": True, "data": {}})]

        def handler(request):
            return responses.pop(0)

        async with make_client(handler) as client:
            with pytest.raises(RemoteUnavailableError):
                await client.request("/x", {})
            await client.request("/x", {})

            assert client.is_online


class TestFromSettings:
    """Tests for building the client from settings."""

    def test_disabled_without_key(self):
        """Test no API key means no client."""
        assert RemotePredictionClient.from_settings(Settings(remote_api_key="")) is None

    def test_enabled_with_key(self):
        """Test settings are passed through."""
        settings = Settings(
            remote_api_key="abc",
            remote_api_url="https://example.test/v2/",
            remote_timeout_seconds=5.0,
        )

        client = RemotePredictionClient.from_settings(settings)

        assert client.api_key == "abc"
        assert client.base_url == "https://example.test/v2"
        assert client.timeout == 5.0


class TestRequestOrNone:
    """Tests for request_or_none."""

    @pytest.mark.asyncio
    async def test_no_client(self):
        """Test a missing client skips the remote call."""
        assert await request_or_none(None, "/x", {}, dict) is None

    @pytest.mark.asyncio
    async def test_failure_returns_none(self):
        """Test remote errors are swallowed for fallback."""
        async with make_client(lambda request: httpx.Response(503)) as client:
            assert await request_or_none(client, "/x", {}, dict) is None

    @pytest.mark.asyncio
    async def test_parse_failure_returns_none(self):
        """Test an unparseable payload falls back."""
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"unexpected": 1}})

        def parse(data):
            return data["predicted_ftp"]

        async with make_client(handler) as client:
            assert await request_or_none(client, "/x", {}, parse) is None

    @pytest.mark.asyncio
    async def test_success_parses(self):
        """Test the parser receives the data."""
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"predicted_ftp": 270}})

        async with make_client(handler) as client:
            result = await request_or_none(client, "/x", {}, lambda d: d["predicted_ftp"])

        assert result == 270

    @pytest.mark.asyncio
    async def test_non_object_data_returns_none(self):
        """Test a string payload falls back instead of reaching the parser."""
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": "ok"})

        def parse(data):
            return data.get("predicted_ftp")

        async with make_client(handler) as client:
            assert await request_or_none(client, "/x", {}, parse) is None

    @pytest.mark.asyncio
    async def test_parser_attribute_error_returns_none(self):
        """Test a parser tripping over a nested non-object value falls back."""
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"adjustment": "up"}})

        def parse(data):
            return data["adjustment"].get("direction")

        async with make_client(handler) as client:
            assert await request_or_none(client, "/x", {}, parse) is None
