from .orders import Order, OrderItem  # noqa: F401
from .payments import (  # noqa: F401
    PaymentLog,
    PaymentMethod,
    PaymentRefund,
    PaymentTransaction,
    PaymentWebhook,
)
