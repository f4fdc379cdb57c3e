"""Portfolio admin API client - HTTP transport and response handling."""

import json
import sys
from datetime import datetime
from typing import Any

import httpx
from pydantic import SecretStr

from ..models import (
    APIConfiguration,
    AuthError,
    NotFoundError,
    ServerError,
    TransportError,
    ValidationError,
)


def log_event(message: str, component: str = "CLIENT") -> None:
    """Log an event to stderr with timestamp and consistent formatting."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] [{component}] {message}", file=sys.stderr, flush=True)


class _ClientLogger:
    """Lightweight logger that delegates to log_event.

    The MCP stdio transport owns stdout and reconfigures the logging module,
    so the client writes straight to stderr instead.
    """

    def __init__(self, component: str = "CLIENT") -> None:
        self._component = component

    def info(self, msg: object) -> None:
        log_event(str(msg), self._component)

    def warning(self, msg: object) -> None:
        log_event(f"WARNING: {msg}", self._component)

    def error(self, msg: object) -> None:
        log_event(f"ERROR: {msg}", self._component)

    def debug(self, msg: object) -> None:
        log_event(f"DEBUG: {msg}", self._component)


logger = _ClientLogger()


class PortfolioClientCore:
    """Core HTTP client - envelope unwrapping and error mapping.

    Every call surfaces its outcome once; there are no retries here.
    """

    def __init__(self, config: APIConfiguration, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.base_url = config.base_url
        self._token: SecretStr | None = config.api_token
        self._client: httpx.AsyncClient | None = None
        self._transport = transport

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            if self._token is not None:
                headers["Authorization"] = f"Bearer {self._token.get_secret_value()}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: str | None) -> None:
        """Install (or clear) the bearer token used on every request."""
        self._token = SecretStr(token) if token else None
        if self._client is not None:
            if self._token is None:
                self._client.headers.pop("Authorization", None)
            else:
                self._client.headers["Authorization"] = f"Bearer {token}"

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PortfolioClientCore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            return {}
        return body if isinstance(body, dict) else {}

    async def _handle_response(self, response: httpx.Response, resource_id: str | None = None) -> Any:
        """Map error statuses to the error taxonomy and unwrap ``data``.

        ``resource_id`` names the record a 404 refers to; without it the last
        path segment is used.
        """
        status = response.status_code

        if status >= 400:
            body = self._error_body(response)
            message = body.get("message") or body.get("error")

            if status in (401, 403):
                raise AuthError(message or "Invalid credentials or unauthorized access", status=status)

            if status == 404:
                raise NotFoundError(
                    resource_id=resource_id or response.request.url.path.rstrip("/").split("/")[-1],
                    message=message or "This item no longer exists",
                )

            if status >= 500:
                raise ServerError(message or f"Server error: {status}", status=status)

            raise ValidationError(
                message or f"API error: {status}",
                status=status,
                field_errors=body.get("fieldErrors"),
            )

        if status == 204 or not response.content:
            return None

        try:
            payload = response.json()
        except json.JSONDecodeError as err:
            raise ServerError("Invalid response format from API", status=status) from err

        # Success responses wrap the payload as {"timestamp", "path", "data"}
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    async def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        resource_id: str | None = None,
    ) -> Any:
        """Issue one request and return the unwrapped payload."""
        try:
            response = await self.client.request(method, path, json=body)
        except httpx.TimeoutException as err:
            logger.warning(f"Timeout on {method} {path}: {err}")
            raise TransportError(f"Request timed out: {method} {path}") from err
        except httpx.TransportError as err:
            logger.warning(f"Network error on {method} {path}: {err}")
            raise TransportError(f"Unable to reach the server: {err}") from err

        return await self._handle_response(response, resource_id)

    async def login(self, email: str, password: str) -> str:
        """Exchange operator credentials for a bearer token and install it."""
        data = await self.request("POST", "/api/auth/login", {"email": email, "password": password})
        token = (data or {}).get("accessToken")
        if not token:
            raise AuthError("Login response did not include an access token")
        self.set_token(token)
        logger.info(f"Authenticated as {email}")
        return token

    def logout(self) -> None:
        self.set_token(None)
