"""SQLAlchemy-backed data gateway"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Type

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import DateTime, Uuid
import structlog

from foodpos.database import Base
from foodpos.gateway.base import LIKE_ESCAPE, BaseGateway, GatewayError, GatewayResult, escape_like
from foodpos.models import Category, Order, OrderItem, Product, Profile, Shift, StockItem

logger = structlog.get_logger()

DEFAULT_TABLES: Dict[str, Type[Base]] = {
    "categories": Category,
    "products": Product,
    "stock": StockItem,
    "orders": Order,
    "order_items": OrderItem,
    "profiles": Profile,
    "shifts": Shift,
}


class InvalidQuery(Exception):
    """Raised internally for unknown tables, columns or malformed values"""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class SQLGateway(BaseGateway):
    """
    Gateway over a SQL database.
    Each call runs in its own session and commits on its own.
    """

    def __init__(self, session_factory, tables: Optional[Dict[str, Type[Base]]] = None):
        self.session_factory = session_factory
        self.tables = tables or DEFAULT_TABLES

    def _model(self, table: str) -> Type[Base]:
        model = self.tables.get(table)
        if model is None:
            raise InvalidQuery(f'relation "{table}" does not exist', code="42P01")
        return model

    def _column(self, model: Type[Base], name: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise InvalidQuery(
                f'column {model.__tablename__}.{name} does not exist',
                code="42703",
            )
        return column

    def _coerce(self, model: Type[Base], name: str, value: Any) -> Any:
        """Convert wire values (strings) into the column's Python type"""
        column = self._column(model, name)
        if not isinstance(value, str):
            return value
        try:
            if isinstance(column.type, Uuid):
                return uuid.UUID(value)
            if isinstance(column.type, DateTime):
                return datetime.fromisoformat(value)
        except ValueError:
            raise InvalidQuery(
                f'invalid input syntax for {column.type}: "{value}"',
                code="22P02",
            )
        return value

    def _coerce_values(self, model: Type[Base], values: Dict[str, Any]) -> Dict[str, Any]:
        return {key: self._coerce(model, key, value) for key, value in values.items()}

    def _filtered(self, model: Type[Base], eq: Optional[Dict[str, Any]], ilike: Optional[Dict[str, str]] = None):
        query = select(model)
        for name, value in (eq or {}).items():
            column = self._column(model, name)
            if value is None:
                query = query.where(column.is_(None))
            else:
                query = query.where(column == self._coerce(model, name, value))
        for name, pattern in (ilike or {}).items():
            query = query.where(self._column(model, name).ilike(escape_like(pattern), escape=LIKE_ESCAPE))
        return query

    @staticmethod
    def _to_row(instance: Base) -> Dict[str, Any]:
        row = {column.key: getattr(instance, column.key) for column in instance.__table__.columns}
        return jsonable_encoder(row)

    @staticmethod
    def _failure(table: str, operation: str, error: Exception) -> GatewayResult:
        code = getattr(error, "code", None)
        logger.error(
            "Gateway call failed",
            table=table,
            operation=operation,
            error=str(error),
            code=code,
        )
        return GatewayResult(error=GatewayError(message=str(error), code=code))

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
        try:
            model = self._model(table)
            query = self._filtered(model, eq, ilike)
            if order_by:
                column = self._column(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            if limit is not None:
                query = query.limit(limit)

            async with self.session_factory() as db:
                result = await db.execute(query)
                rows = [self._to_row(instance) for instance in result.scalars().all()]
        except (InvalidQuery, SQLAlchemyError) as e:
            return self._failure(table, "select", e)

        return GatewayResult(data=rows)

    async def insert(self, table: str, values: Dict[str, Any]) -> GatewayResult:
        try:
            model = self._model(table)
            instance = model(**self._coerce_values(model, values))

            async with self.session_factory() as db:
                db.add(instance)
                await db.commit()
                await db.refresh(instance)
                row = self._to_row(instance)
        except (InvalidQuery, SQLAlchemyError) as e:
            return self._failure(table, "insert", e)

        return GatewayResult(data=row)

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        eq: Dict[str, Any],
    ) -> GatewayResult:
        try:
            model = self._model(table)
            changes = self._coerce_values(model, values)

            async with self.session_factory() as db:
                result = await db.execute(self._filtered(model, eq))
                instances = result.scalars().all()
                for instance in instances:
                    for key, value in changes.items():
                        setattr(instance, key, value)
                await db.commit()
                rows = []
                for instance in instances:
                    await db.refresh(instance)
                    rows.append(self._to_row(instance))
        except (InvalidQuery, SQLAlchemyError) as e:
            return self._failure(table, "update", e)

        return GatewayResult(data=rows)

    async def delete(self, table: str, *, eq: Dict[str, Any]) -> GatewayResult:
        try:
            model = self._model(table)

            async with self.session_factory() as db:
                result = await db.execute(self._filtered(model, eq))
                instances = result.scalars().all()
                rows = [self._to_row(instance) for instance in instances]
                for instance in instances:
                    await db.delete(instance)
                await db.commit()
        except (InvalidQuery, SQLAlchemyError) as e:
            return self._failure(table, "delete", e)

        return GatewayResult(data=rows)
