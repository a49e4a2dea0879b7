"""PostgREST (hosted backend) data gateway"""

from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from foodpos.gateway.base import NO_ROWS, BaseGateway, GatewayError, GatewayResult, escape_like

logger = structlog.get_logger()


def _literal(value: Any) -> str:
    """Render a filter value the way PostgREST expects it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RestGateway(BaseGateway):
    """Gateway over the hosted backend's REST interface"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    def set_access_token(self, token: Optional[str]) -> None:
        self._client.headers["Authorization"] = f"Bearer {token or self.api_key}"

    @staticmethod
    def _filters(
        eq: Optional[Dict[str, Any]],
        ilike: Optional[Dict[str, str]] = None,
    ) -> List[Tuple[str, str]]:
        params = []
        for column, value in (eq or {}).items():
            params.append((column, "is.null" if value is None else f"eq.{_literal(value)}"))
        for column, pattern in (ilike or {}).items():
            params.append((column, f"ilike.{escape_like(pattern)}"))
        return params

    async def _request(
        self,
        method: str,
        table: str,
        params: List[Tuple[str, str]],
        json: Optional[Dict[str, Any]] = None,
    ) -> GatewayResult:
        headers = {}
        if method != "GET":
            headers["Prefer"] = "return=representation"

        logger.debug("Gateway request", method=method, table=table, params=params)

        try:
            response = await self._client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("Gateway transport error", method=method, table=table, error=str(e))
            return GatewayResult(error=GatewayError(message=str(e), code="network"))

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            error = GatewayError(
                message=body.get("message") or response.text or f"HTTP {response.status_code}",
                code=body.get("code") or str(response.status_code),
                details=body.get("details"),
            )
            logger.error(
                "Gateway call failed",
                method=method,
                table=table,
                status_code=response.status_code,
                error=error.message,
                code=error.code,
            )
            return GatewayResult(error=error)

        return GatewayResult(data=response.json() if response.content else [])

    async def select(
        self,
        table: str,
        *,
        eq: Optional[Dict[str, Any]] = None,
        ilike: Optional[Dict[str, str]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> GatewayResult:
        params = [("select", "*")] + self._filters(eq, ilike)
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params)

    async def insert(self, table: str, values: Dict[str, Any]) -> GatewayResult:
        result = await self._request("POST", table, [], json=values)
        if not result.ok or not isinstance(result.data, list):
            return result
        if not result.data:
            # Row written but not visible to this session
            logger.error("Insert returned no row", table=table)
            return GatewayResult(error=GatewayError(message=f"Insert into {table} returned no row", code=NO_ROWS))
        return GatewayResult(data=result.data[0])

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        eq: Dict[str, Any],
    ) -> GatewayResult:
        return await self._request("PATCH", table, self._filters(eq), json=values)

    async def delete(self, table: str, *, eq: Dict[str, Any]) -> GatewayResult:
        return await self._request("DELETE", table, self._filters(eq))

    async def close(self) -> None:
        await self._client.aclose()
