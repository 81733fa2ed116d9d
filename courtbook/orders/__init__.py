"""
Module 'orders' (feature-first): validation de la demande, tenue des créneaux,
tarification et création de l'order côté passerelle de paiement.
"""

from .pricing import compute_amount, price_per_minute
from .gateway import GatewayError, PaymentGateway, RazorpayGateway, get_gateway
from .models import OrderHandle, OrderRequest, RetryOrderRequest, SlotIn
from .service import create_order, retry_order

__all__ = [
    # pricing
    "compute_amount",
    "price_per_minute",
    # gateway
    "GatewayError",
    "PaymentGateway",
    "RazorpayGateway",
    "get_gateway",
    # models
    "OrderHandle",
    "OrderRequest",
    "RetryOrderRequest",
    "SlotIn",
    # services
    "create_order",
    "retry_order",
]
