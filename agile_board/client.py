"""HTTP client for the work-tracking API gateway using httpx."""

from typing import Any

import httpx
import structlog

from agile_board.errors import EntityNotFoundError, ServiceError

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 10.0
DEFAULT_ERROR_MESSAGE = "An error occurred"
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."

_STATUS_MESSAGES = {
    400: "Bad request. Please check your inputs.",
    401: "Unauthorized. Please log in again.",
    403: "Forbidden. You don't have permission for this action.",
    500: "Server error. Please try again later.",
}

_ENVELOPE_KEYS = {"isSuccessful", "data", "errors", "message"}
_MALFORMED = object()


def _error_message(payload: Any) -> str | None:
    """Extract the server's message from an error or envelope body."""
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        return "; ".join(str(e) for e in errors)
    if isinstance(errors, str) and errors:
        return errors
    message = payload.get("message")
    if message:
        return str(message)
    return None


def unwrap(payload: Any) -> Any:
    """Unwrap an ``{isSuccessful, data, errors}`` envelope.

    Bare arrays and bare objects are returned unchanged, so endpoints that
    skip the envelope are handled the same way.
    """
    if not isinstance(payload, dict):
        return payload

    is_envelope = "isSuccessful" in payload or ("data" in payload and set(payload) <= _ENVELOPE_KEYS)
    if not is_envelope:
        return payload

    if payload.get("isSuccessful") is False:
        raise ServiceError(_error_message(payload) or DEFAULT_ERROR_MESSAGE)
    return payload.get("data")


class GatewayClient:
    """Thin JSON client for the API gateway."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            base_url: Gateway base URL, e.g. http://localhost:8080/api
            timeout: Seconds to wait for connect, read and write before giving up
            transport: Optional httpx transport, used by tests to stub the gateway
        """
        if not base_url:
            raise ValueError("Gateway URL required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        logger.debug("Gateway client initialized", base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        error_message: str = DEFAULT_ERROR_MESSAGE,
    ) -> Any:
        """Send a request and return the unwrapped response data.

        Args:
            method: HTTP method
            path: Path relative to the gateway base URL
            json: Optional JSON body
            params: Optional query parameters
            error_message: Fallback message when the server gives none

        Returns:
            Unwrapped response data, or None for an empty body

        Raises:
            EntityNotFoundError: The gateway answered 404
            ServiceError: Any other failure, including transport errors
        """
        logger.debug("Sending gateway request", method=method, path=path)
        try:
            response = self._http.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            logger.error("Gateway request timed out", method=method, path=path, error=str(e))
            raise ServiceError(NETWORK_ERROR_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.error("Gateway request failed", method=method, path=path, error=str(e))
            raise ServiceError(NETWORK_ERROR_MESSAGE) from e

        payload = self._decode(response)

        if response.status_code == 404:
            logger.info("Entity not found", method=method, path=path)
            raise EntityNotFoundError()

        if not response.is_success:
            message = (
                _error_message(payload) or _STATUS_MESSAGES.get(response.status_code) or error_message
            )
            logger.error("Gateway returned an error", method=method, path=path, status=response.status_code)
            raise ServiceError(message, status_code=response.status_code)

        if payload is _MALFORMED:
            logger.error("Gateway returned a malformed body", method=method, path=path)
            raise ServiceError(error_message, status_code=response.status_code)

        data = unwrap(payload)
        logger.debug("Gateway request completed", method=method, path=path, status=response.status_code)
        return data

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError:
            return _MALFORMED

    def get(self, path: str, params: dict[str, Any] | None = None, error_message: str = DEFAULT_ERROR_MESSAGE) -> Any:
        return self.request("GET", path, params=params, error_message=error_message)

    def post(self, path: str, json: Any = None, error_message: str = DEFAULT_ERROR_MESSAGE) -> Any:
        return self.request("POST", path, json=json, error_message=error_message)

    def put(self, path: str, json: Any = None, error_message: str = DEFAULT_ERROR_MESSAGE) -> Any:
        return self.request("PUT", path, json=json, error_message=error_message)

    def delete(self, path: str, error_message: str = DEFAULT_ERROR_MESSAGE) -> Any:
        return self.request("DELETE", path, error_message=error_message)

