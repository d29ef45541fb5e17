"""
API Client — issues HTTP-shaped calls to the TalentFlow API.

Every call resolves to an ApiResult instead of raising: non-2xx responses
become the matching error kind and transport failures become TransientError.
"""

from typing import Any, Optional

import httpx

from config.log import get_logger
from config.settings import settings
from models.errors import TransientError, error_for_status
from models.result import ApiResult

log = get_logger(__name__)


class ApiClient:
    """Thin async wrapper around httpx.AsyncClient."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        base_url: str = None,
    ):
        self._client = httpx.AsyncClient(
            transport=transport,
            base_url=base_url or settings.api_base_url,
            headers={"Accept": "application/json"},
        )

    async def request(
        self,
        method: str,
        path: str,
        params: dict = None,
        json_body: Any = None,
        fallback_error: str = "Request failed",
    ) -> ApiResult:
        """
        Send one request.

        Args:
            method: HTTP method.
            path: Path under the base URL, e.g. /api/jobs.
            params: Query parameters; None values are dropped.
            json_body: JSON request body, if any.
            fallback_error: Message used when the error body has none.

        Returns:
            ApiResult with the decoded body on success, or the error on failure.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            resp = await self._client.request(method, path, params=query or None, json=json_body)
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, path, e)
            return ApiResult.fail(TransientError(str(e) or fallback_error))

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.is_success:
            return ApiResult.ok(body, resp.status_code)

        message = fallback_error
        if isinstance(body, dict) and body.get("error"):
            message = body["error"]
        return ApiResult.fail(error_for_status(resp.status_code, message))

    async def get(self, path: str, params: dict = None, **kwargs) -> ApiResult:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json_body: Any = None, **kwargs) -> ApiResult:
        return await self.request("POST", path, json_body=json_body, **kwargs)

    async def put(self, path: str, json_body: Any = None, **kwargs) -> ApiResult:
        return await self.request("PUT", path, json_body=json_body, **kwargs)

    async def patch(self, path: str, json_body: Any = None, **kwargs) -> ApiResult:
        return await self.request("PATCH", path, json_body=json_body, **kwargs)

    async def delete(self, path: str, **kwargs) -> ApiResult:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
