# khanya/services/__init__.py
from dataclasses import dataclass

from flask import current_app

from .catalog_service import CatalogService
from .metrics_service import MetricsService
from .notification_service import NotificationDispatcher
from .order_service import OrderService
from .payment_service import PaymentService
from .tracking_service import TrackingService
from .verification_service import VerificationService

EXTENSION_KEY = "khanya"


@dataclass
class Services:
    """Service instances of one application, wired to its connectors."""
    notifications: NotificationDispatcher
    verification: VerificationService
    payments: PaymentService
    tracking: TrackingService
    orders: OrderService
    metrics: MetricsService
    catalog: CatalogService
    auth: object


def build_services(settings, connector_manager) -> Services:
    dispatcher = NotificationDispatcher(
        email_connector=connector_manager.get_connector('email'),
        sms_connector=connector_manager.get_connector('sms'),
        settings=settings,
    )
    return Services(
        notifications=dispatcher,
        verification=VerificationService(dispatcher, ttl_minutes=settings.pin_ttl_minutes),
        payments=PaymentService(connector_manager.get_connector('paystack'), dispatcher),
        tracking=TrackingService(),
        orders=OrderService(dispatcher),
        metrics=MetricsService(),
        catalog=CatalogService(),
        auth=connector_manager.get_connector('auth'),
    )


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
