"""Base data gateway interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel

# Error code reported when a single-row select matches nothing
NO_ROWS = "PGRST116"

# Escape character for LIKE patterns built from literal text
LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Make ``text`` match itself literally inside a LIKE pattern"""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return text


class GatewayError(BaseModel):
    """Error reported by the backend for one call"""
    message: str
    code: Optional[str] = None
    details: Optional[str] = None


class GatewayResult(BaseModel):
    """Outcome of one gateway call: either data or an error"""
    data: Any = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseGateway(ABC):
    """
    Row-level access to the named collections of the hosted backend.

    Calls never raise; failures come back in ``GatewayResult.error``.
    There are no transactions spanning more than one call.
    """

    @abstractmethod
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
        """
        Return matching rows as a list of dicts.

        ``None`` in ``eq`` matches NULL. ``ilike`` values are compared as
        case-insensitive exact matches; wildcards in them are literal.
        """
        pass

    @abstractmethod
    async def insert(self, table: str, values: Dict[str, Any]) -> GatewayResult:
        """Insert one row and return it"""
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        eq: Dict[str, Any],
    ) -> GatewayResult:
        """Update matching rows and return them as a list"""
        pass

    @abstractmethod
    async def delete(self, table: str, *, eq: Dict[str, Any]) -> GatewayResult:
        """Delete matching rows and return them as a list"""
        pass

    async def select_single(self, table: str, *, eq: Dict[str, Any]) -> GatewayResult:
        """Return exactly one row, or an error when none matches"""
        result = await self.select(table, eq=eq, limit=1)
        if not result.ok:
            return result
        if not result.data:
            return GatewayResult(
                error=GatewayError(
                    message=f"No rows found in {table}",
                    code=NO_ROWS,
                )
            )
        return GatewayResult(data=result.data[0])

    def set_access_token(self, token: Optional[str]) -> None:
        """Use the session's token for subsequent calls (no-op by default)"""

    async def close(self) -> None:
        """Release connections"""
