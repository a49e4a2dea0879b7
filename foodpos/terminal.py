"""
POS terminal: one signed-in operator's view of the backend
"""

from typing import Optional

import structlog

from foodpos.auth import BaseAuthBackend, LocalAuthBackend, RemoteAuthBackend, SessionProvider
from foodpos.config import Settings
from foodpos.gateway import BaseGateway, get_gateway
from foodpos.notifications import Notifier
from foodpos.services.orders import OrderService
from foodpos.services.shifts import ShiftRepository, ShiftService
from foodpos.stores.catalog import CatalogStore
from foodpos.stores.inventory import InventoryStore

logger = structlog.get_logger()


class PosTerminal:
    """
    Wires the gateway, session, stores and order/shift engine together.
    Stores and services reload when the session changes.
    """

    def __init__(
        self,
        gateway: BaseGateway,
        auth_backend: BaseAuthBackend,
        settings: Settings,
        notifier: Optional[Notifier] = None,
    ):
        self.gateway = gateway
        self.auth_backend = auth_backend
        self.notifier = notifier or Notifier(max_history=settings.notification_history)

        self.session = SessionProvider(auth_backend, gateway, self.notifier)
        self.catalog = CatalogStore(gateway, self.notifier)
        self.inventory = InventoryStore(gateway, self.notifier, settings.low_stock_multiplier)
        self.shifts = ShiftService(
            ShiftRepository(gateway),
            self.notifier,
            date_format=settings.shift_date_format,
        )
        self.orders = OrderService(
            gateway,
            self.notifier,
            self.shifts,
            first_order_number=settings.first_order_number,
        )

        for store in (self.catalog, self.inventory, self.shifts, self.orders):
            self.session.on_change(store.on_session_change)

    async def close(self) -> None:
        await self.auth_backend.close()
        await self.gateway.close()


def build_gateway(settings: Settings, session_factory=None) -> BaseGateway:
    """Gateway for the configured backend"""
    if settings.gateway_backend == "rest":
        return get_gateway(
            "rest",
            base_url=settings.remote_url,
            api_key=settings.remote_anon_key,
            timeout=settings.remote_timeout_seconds,
        )

    if session_factory is None:
        from foodpos.database import SessionLocal

        session_factory = SessionLocal
    return get_gateway(settings.gateway_backend, session_factory=session_factory)


def build_terminal(settings: Settings, session_factory=None) -> PosTerminal:
    """Terminal with the gateway and auth backend chosen by settings"""
    gateway = build_gateway(settings, session_factory)
    if settings.gateway_backend == "rest":
        auth_backend = RemoteAuthBackend(
            settings.remote_url,
            settings.remote_anon_key,
            timeout=settings.remote_timeout_seconds,
        )
    else:
        auth_backend = LocalAuthBackend(gateway)

    logger.info("Terminal configured", gateway=settings.gateway_backend)
    return PosTerminal(gateway, auth_backend, settings)
