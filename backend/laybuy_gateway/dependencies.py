"""Process-wide service singletons, handed to routers through ``Depends``."""

from functools import lru_cache

from laybuy_gateway.config import LaybuySettings
from laybuy_gateway.services.audit import AuditLog
from laybuy_gateway.services.currency import CurrencyService, PriceFormatter
from laybuy_gateway.services.laybuy_manager import LaybuyManager
from laybuy_gateway.services.order_locks import OrderLocks
from laybuy_gateway.services.provider_client import LaybuyClient
from laybuy_gateway.services.state_machine import OrderProcessingService
from laybuy_gateway.services.store import AttributeStore, OrderStore


@lru_cache()
def get_settings() -> LaybuySettings:
    return LaybuySettings.from_env()


@lru_cache()
def get_order_store() -> OrderStore:
    return OrderStore(get_settings().data_dir)


@lru_cache()
def get_audit_log() -> AuditLog:
    return AuditLog(get_settings().data_dir)


@lru_cache()
def get_client() -> LaybuyClient:
    return LaybuyClient(get_settings())


@lru_cache()
def get_manager() -> LaybuyManager:
    settings = get_settings()
    orders = get_order_store()
    return LaybuyManager(
        settings=settings,
        client=get_client(),
        orders=orders,
        attributes=AttributeStore(settings.data_dir),
        currencies=CurrencyService(settings.primary_store_currency, settings.exchange_rates),
        formatter=PriceFormatter(),
        order_processing=OrderProcessingService(orders),
        audit=get_audit_log(),
        locks=OrderLocks(),
    )
