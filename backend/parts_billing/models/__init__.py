# models包初始化文件

from parts_billing.models.order import Order
from parts_billing.models.part import OrderPart, Part, PartClass
from parts_billing.models.invoice import Invoice
from parts_billing.models.system_config import SystemConfig

__all__ = [
    "Order",
    "OrderPart",
    "Part",
    "PartClass",
    "Invoice",
    "SystemConfig",
]
