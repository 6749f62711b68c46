from .user import User  # noqa: F401
from .vendor import Vendor, VendorAdmin, VendorSettings  # noqa: F401
from .product import Product  # noqa: F401
from .order import Order, OrderFulfillment, OrderItem  # noqa: F401
from .payment import Payment  # noqa: F401
from .payout import VendorPayout  # noqa: F401

from .webhook_event import WebhookEvent, WebhookDeadLetter  # noqa: F401

from .email_outbox import EmailOutbox  # noqa: F401

from .audit_log import AuditLog  # noqa: F401

from .idempotency_key import IdempotencyKey  # noqa: F401
