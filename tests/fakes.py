"""内存仓储替身，实现 repositories.interfaces 中的接口"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from parts_billing.repositories.interfaces import (
    InvoiceRepository, LineItemRepository, OrderRepository, WatermarkStore
)
from parts_billing.services.create_invoice import CreateInvoiceService
from parts_billing.services.invoice_effects import InvoiceEffects
from parts_billing.services.order_service import OrderService

BASE_TIME = datetime(2024, 1, 1, 8, 0, 0)


class StoreDown(Exception):
    pass


class FakeOrderRepository(OrderRepository):
    def __init__(self, orders: Optional[List[Dict[str, Any]]] = None):
        self.orders = {order["id"]: dict(order, invoice_ids=list(order.get("invoice_ids", []))) for order in orders or []}
        self.fail_on_add = False

    async def find_by_id(self, order_id, fields):
        order = self.orders.get(order_id)
        if order is None:
            return None
        return {field: order.get(field) for field in fields}

    async def add_invoice(self, order_id, invoice_id):
        if self.fail_on_add:
            raise StoreDown("orders unavailable")
        invoice_ids = self.orders[order_id]["invoice_ids"]
        if invoice_id not in invoice_ids:
            invoice_ids.append(invoice_id)


class FakeInvoiceRepository(InvoiceRepository):
    def __init__(self, invoices: Optional[List[Dict[str, Any]]] = None):
        self.invoices: List[Dict[str, Any]] = [dict(invoice) for invoice in invoices or []]
        self.fail_on_create = False

    async def find_by_order(self, order_id, fields):
        return [
            {field: invoice.get(field) for field in fields}
            for invoice in self.invoices
            if invoice["order_id"] == order_id
        ]

    async def create(self, values):
        if self.fail_on_create:
            raise StoreDown("invoices unavailable")
        invoice = dict(values, id=len(self.invoices) + 1)
        self.invoices.append(invoice)
        return dict(invoice)

    def by_id(self, invoice_id):
        return next(invoice for invoice in self.invoices if invoice["id"] == invoice_id)


class FakeLineItemRepository(LineItemRepository):
    """items 中 completed=False 表示尚未履约/报价"""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None):
        self.items = {item["id"]: dict({"completed": True, "invoice_id": None}, **item) for item in items or []}
        self.fail_on_find = False

    def add(self, item):
        self.items[item["id"]] = dict({"completed": True, "invoice_id": None}, **item)

    async def find_unbilled(self, since):
        if self.fail_on_find:
            raise StoreDown("parts unavailable")
        return [
            {key: value for key, value in item.items() if key not in ("completed", "invoice_id")}
            for item in self.items.values()
            if item["created_at"] > since and item["completed"] and item["invoice_id"] is None
        ]

    async def find_earliest_unbilled(self, since):
        pending = [
            item["created_at"] for item in self.items.values()
            if item["created_at"] > since and item["invoice_id"] is None
        ]
        return min(pending) if pending else None

    async def stamp_invoice(self, item_id, invoice_id):
        self.items[item_id]["invoice_id"] = invoice_id


class FakeWatermarkStore(WatermarkStore):
    def __init__(self, value: Optional[datetime] = None):
        self.value = value

    async def get_watermark(self):
        return self.value

    async def set_watermark(self, value):
        self.value = value


def stock_part(id, order_id, price, created_at=BASE_TIME, item_class="StockPart", **extra):
    return dict(
        id=id, order_id=order_id, item_class=item_class,
        price_before_discount=Decimal(price), created_at=created_at, **extra
    )


def request_part(id, order_id, price, created_at=BASE_TIME, **extra):
    return dict(
        id=id, order_id=order_id, item_class="RequestPart",
        premium_price_before_discount=Decimal(price), created_at=created_at, **extra
    )


def order(id, delivery_fees="0", wallet="0", discount="0"):
    return dict(
        id=id,
        delivery_fees=Decimal(delivery_fees),
        wallet_payment_amount=Decimal(wallet),
        discount_amount=Decimal(discount),
        invoice_ids=[],
    )


class Harness:
    """组装好的开票服务及其仓储替身"""

    def __init__(self, orders=(), order_parts=(), request_parts=(), invoices=(), watermark=None):
        self.orders = FakeOrderRepository(list(orders))
        self.order_parts = FakeLineItemRepository(list(order_parts))
        self.request_parts = FakeLineItemRepository(list(request_parts))
        self.invoices = FakeInvoiceRepository(list(invoices))
        self.watermarks = FakeWatermarkStore(watermark)
        self.order_service = OrderService(self.orders, self.order_parts, self.request_parts)
        self.effects = InvoiceEffects(self.orders, self.order_parts, self.request_parts)
        self.service = CreateInvoiceService(
            order_service=self.order_service,
            invoice_repo=self.invoices,
            effects=self.effects,
            watermark_store=self.watermarks,
            initial_watermark=datetime(2021, 4, 1),
        )
