"""
HTTP client for the TLINK cloud API.

Thin wrapper around an aiohttp session that turns every call into either
a decoded JSON object or one of the bridge transport/payload exceptions.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from aiohttp.client import ClientTimeout

from ..exceptions import PayloadError, TransportError
from ..logging import get_logger, log_debug


TOKEN_PATH = "/oauth/token"
DEVICE_SENSOR_DATAS_PATH = "/api/device/getDeviceSensorDatas"
APP_ID_HEADER = "tlinkAppId"


class TlinkApiClient:
    """HTTP API client for the TLINK cloud."""

    __slots__ = ("_session", "_base_url", "_timeout")

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        timeout_s: float = 30.0
    ) -> None:
        """Initialize the API client.

        Args:
            session: aiohttp client session for HTTP requests
            base_url: Scheme and host, without trailing slash
            timeout_s: Total timeout per request
        """
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = ClientTimeout(total=timeout_s)

    async def post_form(
        self,
        path: str,
        form: Dict[str, str],
        basic_auth: Optional[aiohttp.BasicAuth] = None
    ) -> Dict[str, Any]:
        """POST url-encoded form parameters."""
        return await self._post(path, data=form, auth=basic_auth)

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        bearer_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """POST a JSON document, optionally with bearer authentication."""
        all_headers = dict(headers or {})
        if bearer_token:
            all_headers["Authorization"] = f"Bearer {bearer_token}"
        return await self._post(path, json_body=payload, headers=all_headers)

    async def _post(
        self,
        path: str,
        data: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[aiohttp.BasicAuth] = None
    ) -> Dict[str, Any]:
        """
        Send a POST request and decode the body.

        Returns:
            Decoded JSON object

        Raises:
            TransportError: On connection failure, timeout or empty body
            PayloadError: If the body is not a JSON object
        """
        url = f"{self._base_url}{path}"
        log_debug(f"HTTP POST {url}")

        try:
            async with self._session.post(
                url,
                data=data,
                json=json_body,
                headers=headers,
                auth=auth,
                timeout=self._timeout
            ) as response:
                body = await response.text()
                log_debug(f"HTTP {url} response: {response.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"POST {path} failed: {e!r}") from e

        if not body:
            raise TransportError(f"POST {path} returned an empty body")

        try:
            decoded = json.loads(body)
        except ValueError as e:
            if get_logger().is_debug:
                log_debug(body[:300])
            raise PayloadError(f"Invalid JSON from {path}") from e

        if not isinstance(decoded, dict):
            raise PayloadError(f"Expected JSON object from {path}, got {type(decoded).__name__}")

        return decoded
