"""
Optional client for the remote prediction service.

Every call may fail; callers catch the typed errors raised here and fall
back to the local algorithms. The client never retries on its own.
"""

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from ..exceptions import (
    InsufficientDataError,
    RemotePredictionError,
    RemoteRateLimitError,
    RemoteUnavailableError,
    RideAnalyticsError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_API_URL = "https://api.rustride.io/v1"
DEFAULT_TIMEOUT = 30.0

REMOTE_INSUFFICIENT_DATA_GUIDANCE = "Record more varied workouts to improve prediction accuracy."


class ApiErrorBody(BaseModel):
    message: str = ""


class ApiEnvelope(BaseModel):
    """Response wrapper returned by every prediction endpoint."""

    success: bool
    data: Optional[Any] = None
    error: Optional[ApiErrorBody] = Field(default=None)


class RemotePredictionClient:
    """
    Async JSON client for the prediction API.

    Uses bearer authentication and POSTs a JSON payload to each endpoint.
    ``is_online`` reflects the outcome of the most recent request.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.is_online = True
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings=None) -> Optional["RemotePredictionClient"]:
        """Build a client from settings, or None if no API key is configured."""
        if settings is None:
            from ..config import get_settings

            settings = get_settings()
        if not settings.remote_enabled:
            return None
        return cls(
            api_key=settings.remote_api_key,
            base_url=settings.remote_api_url,
            timeout=settings.remote_timeout_seconds,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "RemotePredictionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def request(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a payload and return the envelope's ``data``.

        Args:
            endpoint: Path below the base URL (e.g. "/ftp/predict")
            payload: JSON-serializable request body

        Returns:
            The ``data`` object of a successful response

        Raises:
            RemoteUnavailableError: Connection failure, timeout or 5xx
            RemoteRateLimitError: HTTP 429
            InsufficientDataError: HTTP 422 (server needs more history)
            RemotePredictionError: Any other failure
        """
        url = f"{self.base_url}{endpoint}"
        client = await self._get_client()

        try:
            response = await client.post(url, headers=self._headers(), json=payload)
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            self.is_online = False
            logger.warning(f"Prediction service unreachable at {url}: {e}")
            raise RemoteUnavailableError(details={"endpoint": endpoint}) from e
        except httpx.HTTPError as e:
            raise RemotePredictionError(f"Request failed: {e}") from e

        status = response.status_code

        if response.is_success:
            self.is_online = True
            envelope = self._parse_envelope(response)
            if not envelope.success:
                message = envelope.error.message if envelope.error else "Unknown error"
                raise RemotePredictionError(message, details={"endpoint": endpoint})
            if envelope.data is None:
                raise RemotePredictionError("API returned success but no data")
            if not isinstance(envelope.data, dict):
                raise RemotePredictionError(
                    "API returned non-object data", details={"endpoint": endpoint}
                )
            return envelope.data

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RemoteRateLimitError(
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if status == 422:
            envelope = self._parse_envelope(response)
            message = envelope.error.message if envelope.error else "Insufficient data"
            raise InsufficientDataError(
                count=0,
                message=message,
                guidance=REMOTE_INSUFFICIENT_DATA_GUIDANCE,
            )

        if response.is_server_error:
            self.is_online = False
            logger.warning(f"Prediction service error {status} on {endpoint}")
            raise RemoteUnavailableError(
                f"Prediction service returned {status}",
                details={"endpoint": endpoint, "status": status},
            )

        raise RemotePredictionError(
            f"API returned status {status}",
            details={"endpoint": endpoint, "status": status},
        )

    def _parse_envelope(self, response: httpx.Response) -> ApiEnvelope:
        try:
            return ApiEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise RemotePredictionError(f"Malformed response: {e}") from e


async def request_or_none(
    client: Optional[RemotePredictionClient],
    endpoint: str,
    payload: Dict[str, Any],
    parse: Callable[[Dict[str, Any]], T],
) -> Optional[T]:
    """
    Try a remote prediction, returning None on any failure.

    Used by the predictors before running their local algorithm. Failures
    are logged, never raised.
    """
    if client is None:
        return None

    try:
        data = await client.request(endpoint, payload)
        return parse(data)
    except RideAnalyticsError as e:
        logger.warning(f"Remote prediction {endpoint} failed, using local fallback: {e}")
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Unexpected remote payload from {endpoint}, using local fallback: {e}")
    return None
